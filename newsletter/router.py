from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging
from database import get_db
from security.ratelimit import general_limit, newsletter_limit
from . import crud, schema

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/newsletter",
    tags=["newsletter"]
)

SUBSCRIBE_MESSAGES = {
    crud.ALREADY_SUBSCRIBED: "You're already subscribed! До скоро! (See you soon!)",
    crud.RESUBSCRIBED: "Welcome back! Please check your email to re-confirm.",
    crud.CONFIRMATION_RESENT: "Confirmation email re-sent! Check your inbox.",
    crud.PENDING_CONFIRMATION: "Almost there! Check your email to confirm your subscription.",
}

@router.post("", response_model=schema.SubscriptionStatus)
@general_limit
@newsletter_limit
def create_subscription(request: Request, subscription: schema.SubscriptionCreate, db: Session = Depends(get_db)):
    try:
        outcome, subscriber = crud.subscribe(db, subscription.email)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[Newsletter POST] Error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to process subscription.")

    logger.info(f"Newsletter subscribe: subscriber {subscriber.id} -> {outcome}")

    code = status.HTTP_201_CREATED if outcome == crud.PENDING_CONFIRMATION else status.HTTP_200_OK
    return JSONResponse(
        status_code=code,
        content={"message": SUBSCRIBE_MESSAGES[outcome], "status": outcome}
    )

@router.get("/confirm/{token}", response_model=schema.SubscriptionStatus)
@general_limit
def confirm_subscription(request: Request, token: str, db: Session = Depends(get_db)):
    try:
        subscriber = crud.confirm(db, token)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[Newsletter CONFIRM] Error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to confirm subscription.")

    if not subscriber:
        raise HTTPException(status_code=404, detail="Invalid or expired confirmation link.")

    return {"message": "Welcome aboard! 🐾 До скоро! (See you soon!)", "status": crud.CONFIRMED}

@router.delete("/{token}", response_model=schema.SubscriptionStatus)
@general_limit
def unsubscribe(request: Request, token: str, db: Session = Depends(get_db)):
    try:
        subscriber = crud.unsubscribe(db, token)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[Newsletter DELETE] Error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to process unsubscription.")

    if not subscriber:
        raise HTTPException(status_code=404, detail="Invalid unsubscribe link or already unsubscribed.")

    return {"message": "You've been unsubscribed. Sorry to see you go!", "status": crud.UNSUBSCRIBED}
