from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import hashlib
import logging
from database import get_db
from security.ratelimit import general_limit, guestbook_write_limit
from . import model, schema

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/guestbook",
    tags=["guestbook"]
)

def hash_ip(ip):
    return hashlib.sha256(ip.encode("utf-8")).hexdigest()

def client_ip(request: Request):
    return request.client.host if request.client else "unknown"

@router.get("", response_model=schema.GuestbookListResponse)
@general_limit
def list_entries(request: Request, db: Session = Depends(get_db)):
    """List visible entries, newest first"""
    try:
        entries = db.query(model.GuestbookEntry)\
            .filter(model.GuestbookEntry.visible.is_(True))\
            .order_by(model.GuestbookEntry.created_at.desc(), model.GuestbookEntry.id.desc())\
            .all()
    except SQLAlchemyError as e:
        logger.error(f"[Guestbook GET] Error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch guestbook entries.")
    return {"entries": entries}

@router.post("", response_model=schema.GuestbookEntryCreated, status_code=status.HTTP_201_CREATED)
@general_limit
@guestbook_write_limit
def create_entry(request: Request, entry: schema.GuestbookEntryCreate, db: Session = Depends(get_db)):
    """Sign the guestbook"""
    db_entry = model.GuestbookEntry(
        name=entry.name,
        message=entry.message,
        ip_hash=hash_ip(client_ip(request)),
        visible=True
    )
    try:
        db.add(db_entry)
        db.commit()
        db.refresh(db_entry)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[Guestbook POST] Error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to save guestbook entry.")
    return {"entry": db_entry}
