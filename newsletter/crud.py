from sqlalchemy.orm import Session
from typing import Optional, Tuple
from datetime import datetime, timezone
import secrets
from . import model

# ---------- Subscription outcomes ---------- #

ALREADY_SUBSCRIBED = "already_subscribed"
RESUBSCRIBED = "resubscribed"
CONFIRMATION_RESENT = "confirmation_resent"
PENDING_CONFIRMATION = "pending_confirmation"
CONFIRMED = "confirmed"
UNSUBSCRIBED = "unsubscribed"

def generate_token() -> str:
    return secrets.token_hex(32)

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def get_subscriber_by_email(db: Session, email: str) -> Optional[model.NewsletterSub]:
    return db.query(model.NewsletterSub).filter(model.NewsletterSub.email == email).first()

def subscribe(db: Session, email: str) -> Tuple[str, model.NewsletterSub]:
    """Apply a subscribe request and return (outcome, subscriber).

    - confirmed and still subscribed: nothing changes
    - previously unsubscribed: fresh tokens, back to pending
    - pending: a new confirmation token replaces the old one
    - unknown email: a new pending row with both tokens
    """
    existing = get_subscriber_by_email(db, email)

    if existing and existing.is_active:
        return ALREADY_SUBSCRIBED, existing

    if existing and existing.unsub_at is not None:
        existing.confirmed = False
        existing.confirm_token = generate_token()
        existing.unsub_token = generate_token()
        existing.confirmed_at = None
        existing.unsub_at = None
        db.commit()
        db.refresh(existing)
        return RESUBSCRIBED, existing

    if existing:
        existing.confirm_token = generate_token()
        db.commit()
        db.refresh(existing)
        return CONFIRMATION_RESENT, existing

    subscriber = model.NewsletterSub(
        email=email,
        confirmed=False,
        confirm_token=generate_token(),
        unsub_token=generate_token()
    )
    db.add(subscriber)
    db.commit()
    db.refresh(subscriber)
    return PENDING_CONFIRMATION, subscriber

def confirm(db: Session, token: str) -> Optional[model.NewsletterSub]:
    """Confirm the pending subscription holding this token; None if there is none."""
    subscriber = db.query(model.NewsletterSub)\
        .filter(model.NewsletterSub.confirm_token == token, model.NewsletterSub.confirmed.is_(False))\
        .first()
    if not subscriber:
        return None

    subscriber.confirmed = True
    subscriber.confirmed_at = utcnow()
    subscriber.confirm_token = None  # Single use
    db.commit()
    db.refresh(subscriber)
    return subscriber

def unsubscribe(db: Session, token: str) -> Optional[model.NewsletterSub]:
    subscriber = db.query(model.NewsletterSub)\
        .filter(model.NewsletterSub.unsub_token == token, model.NewsletterSub.unsub_at.is_(None))\
        .first()
    if not subscriber:
        return None

    subscriber.unsub_at = utcnow()
    db.commit()
    db.refresh(subscriber)
    return subscriber

def list_subscribers(db: Session):
    return db.query(model.NewsletterSub)\
        .order_by(model.NewsletterSub.created_at.desc(), model.NewsletterSub.id.desc())\
        .all()

def delete_subscriber(db: Session, subscriber_id: int) -> bool:
    subscriber = db.query(model.NewsletterSub).filter(model.NewsletterSub.id == subscriber_id).first()
    if not subscriber:
        return False
    db.delete(subscriber)
    db.commit()
    return True
