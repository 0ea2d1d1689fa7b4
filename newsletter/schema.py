from pydantic import BaseModel, field_validator
from email_validator import validate_email, EmailNotValidError
from typing import List, Optional
from datetime import datetime
from common.schema import APIModel, strip_text

def normalize_email(v):
    """Validate an address and lower-case it so one inbox maps to one row."""
    if not v:
        raise ValueError("Please provide a valid email address")
    if len(v) > 255:
        raise ValueError("Email must be 255 characters or less")
    try:
        validate_email(v, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Please provide a valid email address")
    return v.lower()

class SubscriptionCreate(BaseModel):
    email: str

    @field_validator("email", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        return strip_text(v)

    @field_validator("email")
    @classmethod
    def validate_address(cls, v):
        return normalize_email(v)

class SubscriptionStatus(BaseModel):
    message: str
    status: str

class SubscriberResponse(APIModel):
    id: int
    email: str
    confirmed: bool
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    unsub_at: Optional[datetime] = None

class SubscriberListResponse(APIModel):
    subscribers: List[SubscriberResponse]
