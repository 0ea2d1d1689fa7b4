from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from common.schema import APIModel

class AdminLogin(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None

class LoginResponse(APIModel):
    token: str
    expires_in: str
    message: str

class VerifyResponse(APIModel):
    valid: bool
    username: str

# Dashboard stats
class GuestbookStats(APIModel):
    total: int
    visible: int

class NewsletterStats(APIModel):
    total: int
    confirmed: int

class ContactStats(APIModel):
    total: int
    unread: int

class StatsResponse(APIModel):
    guestbook: GuestbookStats
    newsletter: NewsletterStats
    contacts: ContactStats

# Moderation views
class AdminGuestbookEntry(APIModel):
    id: int
    name: str
    message: str
    visible: bool
    ip_hash: str
    created_at: datetime

class AdminGuestbookList(APIModel):
    entries: List[AdminGuestbookEntry]

class VisibilityState(APIModel):
    id: int
    name: str
    visible: bool

class VisibilityToggleResponse(APIModel):
    entry: VisibilityState
    message: str

class ReadState(APIModel):
    id: int
    read: bool

class ReadToggleResponse(APIModel):
    message: str
    contact: ReadState

class DeletedResponse(APIModel):
    message: str
    id: int
