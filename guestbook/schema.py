from pydantic import BaseModel, field_validator
from typing import List
from datetime import datetime
import re
from common.schema import APIModel, strip_text, check_length

HTML_CHARS = re.compile(r"[<>]")

class GuestbookEntryCreate(BaseModel):
    name: str
    message: str

    @field_validator("name", "message", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        return strip_text(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        check_length(v, "Name", 80)
        if HTML_CHARS.search(v):
            raise ValueError("Name contains invalid characters")
        return v

    @field_validator("message")
    @classmethod
    def validate_message(cls, v):
        check_length(v, "Message", 200)
        if HTML_CHARS.search(v):
            raise ValueError("Message contains invalid characters")
        return v

class GuestbookEntryResponse(APIModel):
    id: int
    name: str
    message: str
    created_at: datetime

class GuestbookListResponse(APIModel):
    entries: List[GuestbookEntryResponse]

class GuestbookEntryCreated(APIModel):
    entry: GuestbookEntryResponse
