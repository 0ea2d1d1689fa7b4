from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional, Dict, Any
import logging
from config import ADMIN_USERNAME, JWT_EXPIRES_IN
from database import get_db
from guestbook.model import GuestbookEntry
from newsletter.model import NewsletterSub
from newsletter import crud as newsletter_crud
from newsletter.schema import SubscriberListResponse
from contact.model import ContactMessage
from contact.schema import ContactMessageListResponse
from security import auth
from security.ratelimit import login_limit
from . import schema

logger = logging.getLogger(__name__)

# Not covered by the general limiter; login carries its own tier and
# everything else requires the admin bearer token
router = APIRouter(
    prefix="/admin",
    tags=["admin"]
)

# Helper functions
def parse_id(raw: str, kind: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {kind} ID.")

def database_error(context: str, e: Exception, detail: str, db: Session):
    db.rollback()
    logger.error(f"[Admin {context}] Error: {str(e)}")
    return HTTPException(status_code=500, detail=detail)

# ---------- Authentication ---------- #

@router.post("/login", response_model=schema.LoginResponse)
@login_limit
def login(request: Request, credentials: Optional[schema.AdminLogin] = None):
    """Exchange the admin username and password for a bearer token"""
    if not auth.is_login_configured():
        logger.error("ADMIN_PASSWORD_HASH or JWT_SECRET not configured.")
        raise HTTPException(status_code=500, detail="Admin login is not configured on this server.")

    if not credentials or not credentials.username or not credentials.password:
        raise HTTPException(status_code=400, detail="Username and password are required.")

    client = request.client.host if request.client else "unknown"
    try:
        valid = auth.authenticate(credentials.username, credentials.password)
    except ValueError as e:
        # Raised by passlib when the configured hash is malformed
        logger.error(f"[Admin Login] Error: {str(e)}")
        raise HTTPException(status_code=500, detail="Login failed. Please try again.")

    if not valid:
        logger.warning(f"Failed admin login from {client}")
        raise HTTPException(status_code=401, detail="Invalid credentials.")

    logger.info(f"Admin login from {client}")
    return {
        "token": auth.create_access_token(ADMIN_USERNAME),
        "expires_in": JWT_EXPIRES_IN,
        "message": "Welcome back, admin. 🐾"
    }

@router.get("/verify", response_model=schema.VerifyResponse)
def verify(admin: Dict[str, Any] = Depends(auth.require_admin)):
    """Cheap check the dashboard uses to validate a stored token"""
    return {"valid": True, "username": admin["username"]}

# ---------- Dashboard stats ---------- #

@router.get("/stats", response_model=schema.StatsResponse, dependencies=[Depends(auth.require_admin)])
def get_stats(db: Session = Depends(get_db)):
    try:
        return {
            "guestbook": {
                "total": db.query(GuestbookEntry).count(),
                "visible": db.query(GuestbookEntry).filter(GuestbookEntry.visible.is_(True)).count(),
            },
            "newsletter": {
                "total": db.query(NewsletterSub).count(),
                "confirmed": db.query(NewsletterSub).filter(NewsletterSub.confirmed.is_(True)).count(),
            },
            "contacts": {
                "total": db.query(ContactMessage).count(),
                "unread": db.query(ContactMessage).filter(ContactMessage.read.is_(False)).count(),
            },
        }
    except SQLAlchemyError as e:
        raise database_error("Stats", e, "Failed to fetch stats.", db)

# ---------- Guestbook management ---------- #

@router.get("/guestbook", response_model=schema.AdminGuestbookList, dependencies=[Depends(auth.require_admin)])
def list_guestbook(db: Session = Depends(get_db)):
    """All entries including hidden ones, newest first"""
    try:
        entries = db.query(GuestbookEntry)\
            .order_by(GuestbookEntry.created_at.desc(), GuestbookEntry.id.desc())\
            .all()
    except SQLAlchemyError as e:
        raise database_error("Guestbook GET", e, "Failed to fetch guestbook entries.", db)
    return {"entries": entries}

@router.patch("/guestbook/{entry_id}", response_model=schema.VisibilityToggleResponse, dependencies=[Depends(auth.require_admin)])
def toggle_guestbook_visibility(entry_id: str, db: Session = Depends(get_db)):
    """Soft-hide or restore an entry; the row is kept either way"""
    entry_pk = parse_id(entry_id, "entry")
    try:
        entry = db.query(GuestbookEntry).filter(GuestbookEntry.id == entry_pk).first()
        if not entry:
            raise HTTPException(status_code=404, detail="Entry not found.")
        entry.visible = not entry.visible
        db.commit()
        db.refresh(entry)
    except SQLAlchemyError as e:
        raise database_error("Guestbook PATCH", e, "Failed to update entry.", db)

    return {
        "entry": entry,
        "message": "Entry is now visible." if entry.visible else "Entry is now hidden."
    }

@router.delete("/guestbook/{entry_id}", response_model=schema.DeletedResponse, dependencies=[Depends(auth.require_admin)])
def delete_guestbook_entry(entry_id: str, db: Session = Depends(get_db)):
    entry_pk = parse_id(entry_id, "entry")
    try:
        entry = db.query(GuestbookEntry).filter(GuestbookEntry.id == entry_pk).first()
        if not entry:
            raise HTTPException(status_code=404, detail="Entry not found.")
        db.delete(entry)
        db.commit()
    except SQLAlchemyError as e:
        raise database_error("Guestbook DELETE", e, "Failed to delete entry.", db)
    return {"message": "Entry permanently deleted.", "id": entry_pk}

# ---------- Newsletter management ---------- #

@router.get("/newsletter", response_model=SubscriberListResponse, dependencies=[Depends(auth.require_admin)])
def list_subscribers(db: Session = Depends(get_db)):
    try:
        subscribers = newsletter_crud.list_subscribers(db)
    except SQLAlchemyError as e:
        raise database_error("Newsletter GET", e, "Failed to fetch subscribers.", db)
    return {"subscribers": subscribers}

@router.delete("/newsletter/{subscriber_id}", response_model=schema.DeletedResponse, dependencies=[Depends(auth.require_admin)])
def delete_subscriber(subscriber_id: str, db: Session = Depends(get_db)):
    subscriber_pk = parse_id(subscriber_id, "subscriber")
    try:
        deleted = newsletter_crud.delete_subscriber(db, subscriber_pk)
    except SQLAlchemyError as e:
        raise database_error("Newsletter DELETE", e, "Failed to remove subscriber.", db)
    if not deleted:
        raise HTTPException(status_code=404, detail="Subscriber not found.")
    return {"message": "Subscriber removed.", "id": subscriber_pk}

# ---------- Contact message management ---------- #

@router.get("/contacts", response_model=ContactMessageListResponse, dependencies=[Depends(auth.require_admin)])
def list_contacts(db: Session = Depends(get_db)):
    try:
        messages = db.query(ContactMessage)\
            .order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())\
            .all()
    except SQLAlchemyError as e:
        raise database_error("Contacts GET", e, "Failed to fetch contact messages.", db)
    return {"messages": messages}

@router.patch("/contacts/{message_id}", response_model=schema.ReadToggleResponse, dependencies=[Depends(auth.require_admin)])
def toggle_contact_read(message_id: str, db: Session = Depends(get_db)):
    message_pk = parse_id(message_id, "message")
    try:
        message = db.query(ContactMessage).filter(ContactMessage.id == message_pk).first()
        if not message:
            raise HTTPException(status_code=404, detail="Message not found.")
        message.read = not message.read
        db.commit()
        db.refresh(message)
    except SQLAlchemyError as e:
        raise database_error("Contacts PATCH", e, "Failed to update message.", db)

    return {
        "message": "Marked as read." if message.read else "Marked as unread.",
        "contact": message
    }

@router.delete("/contacts/{message_id}", response_model=schema.DeletedResponse, dependencies=[Depends(auth.require_admin)])
def delete_contact(message_id: str, db: Session = Depends(get_db)):
    message_pk = parse_id(message_id, "message")
    try:
        message = db.query(ContactMessage).filter(ContactMessage.id == message_pk).first()
        if not message:
            raise HTTPException(status_code=404, detail="Message not found.")
        db.delete(message)
        db.commit()
    except SQLAlchemyError as e:
        raise database_error("Contacts DELETE", e, "Failed to delete message.", db)
    return {"message": "Contact message deleted.", "id": message_pk}
