from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.sql import func
from database import Base

class GuestbookEntry(Base):
    __tablename__ = "guestbook_entries"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(80), nullable=False)
    message = Column(String(200), nullable=False)
    visible = Column(Boolean, default=True, nullable=False)  # Soft-hide flag for moderation
    ip_hash = Column(String(64), nullable=False)  # SHA-256 of submitter IP, never public
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
