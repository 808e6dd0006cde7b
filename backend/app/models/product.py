"""Listed product. environment: MARKETPLACE (fixed price) | AUCTION (has a live auction room)."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.constants import PRODUCT_ENV_MARKETPLACE
from app.db.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), ForeignKey("users.id", onupdate="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    category = Column(String(64), nullable=True)
    description = Column(Text, nullable=True)
    quantity = Column(Integer, nullable=True)
    unit = Column(String(32), nullable=True)
    environment = Column(String(16), nullable=False, default=PRODUCT_ENV_MARKETPLACE, server_default=PRODUCT_ENV_MARKETPLACE)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    auction_room = relationship("AuctionRoom", back_populates="product", uselist=False, passive_deletes=True)
