"""One auction room per auctioned product.

status: scheduled | active | ended | winner_notified (forward only).
total_bids / total_participants are a cache recomputed at settlement, not the source of truth.
winner_id is set only at settlement.
"""
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.constants import AUCTION_STATUS_SCHEDULED
from app.db.base import Base


class AuctionRoom(Base):
    __tablename__ = "auction_rooms"
    __table_args__ = (
        Index("ix_auction_rooms_status_end_time", "status", "end_time"),
        CheckConstraint("end_time > start_time", name="ck_auction_rooms_end_after_start"),
    )

    id = Column(String(64), primary_key=True)
    product_id = Column(
        String(64),
        ForeignKey("products.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
        unique=True,
    )
    starting_bid = Column(Float, nullable=False)
    current_highest_bid = Column(Float, nullable=True)
    current_highest_bidder_id = Column(String(64), nullable=True)
    winner_id = Column(String(64), nullable=True)
    reserve_price = Column(Float, nullable=True, default=0.0)
    min_bid_increment = Column(Float, nullable=False, default=50.0)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(32), nullable=False, default=AUCTION_STATUS_SCHEDULED)
    total_bids = Column(Integer, nullable=False, default=0)
    total_participants = Column(Integer, nullable=False, default=0)
    is_reserve_reached = Column(Boolean, nullable=False, default=False)
    buy_now_price = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    product = relationship("Product", back_populates="auction_room")
    bids = relationship("AuctionBid", back_populates="auction_room", passive_deletes=True)
    participants = relationship("AuctionParticipant", back_populates="auction_room", passive_deletes=True)
