from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging
from database import get_db
from security.ratelimit import general_limit, contact_limit
from . import model, schema

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/contact",
    tags=["contact"]
)

# Contact form route
@router.post("", status_code=status.HTTP_201_CREATED, response_model=schema.ContactFormResponse)
@general_limit
@contact_limit
def submit_contact_form(request: Request, form_data: schema.ContactFormCreate, db: Session = Depends(get_db)):
    new_submission = model.ContactMessage(**form_data.model_dump())
    try:
        db.add(new_submission)
        db.commit()
        db.refresh(new_submission)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[Contact POST] Error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to send message.")

    logger.info(f"Contact message {new_submission.id} received: {new_submission.subject!r}")
    return {
        "message": "Message received! I'll get back to you soon. До скоро! 🐾",
        "contact": new_submission
    }
