from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.sql import func
from database import Base

class NewsletterSub(Base):
    __tablename__ = "newsletter_subs"
    
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    confirmed = Column(Boolean, default=False, nullable=False)
    confirm_token = Column(String(64), unique=True, nullable=True)  # Cleared once confirmed
    unsub_token = Column(String(64), unique=True, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    unsub_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def is_active(self):
        return self.confirmed and self.unsub_at is None
