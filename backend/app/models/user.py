"""Marketplace user. Settlement reads only the contact fields (email mandatory for winners)."""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    business_name = Column(String(255), nullable=True)  # display name in winner messages
    email = Column(String(255), nullable=True)
    whatsapp = Column(String(32), nullable=True)  # also used for the SMS fallback
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
