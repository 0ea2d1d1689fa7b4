from pydantic import BaseModel, field_validator
from typing import List
from datetime import datetime
from common.schema import APIModel, strip_text, check_length
from newsletter.schema import normalize_email

# Contact Form Schema
class ContactFormCreate(BaseModel):
    name: str
    email: str
    subject: str
    message: str

    @field_validator("name", "email", "subject", "message", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        return strip_text(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return check_length(v, "Name", 100)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return normalize_email(v)

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v):
        return check_length(v, "Subject", 200)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v):
        return check_length(v, "Message", 5000)

class ContactReceipt(APIModel):
    id: int
    name: str
    subject: str
    created_at: datetime

class ContactFormResponse(APIModel):
    message: str
    contact: ContactReceipt

class ContactMessageResponse(APIModel):
    id: int
    name: str
    email: str
    subject: str
    message: str
    read: bool
    created_at: datetime

class ContactMessageListResponse(APIModel):
    messages: List[ContactMessageResponse]
