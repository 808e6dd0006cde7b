"""Durable bid ledger. id is the live-store bid key, so re-inserting the same bid is a no-op."""
from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.constants import BID_TYPE_REGULAR
from app.db.base import Base


class AuctionBid(Base):
    __tablename__ = "auction_bids"
    __table_args__ = (Index("ix_auction_bids_room_timestamp", "auction_room_id", "timestamp"),)

    id = Column(String(128), primary_key=True)
    auction_room_id = Column(
        String(64),
        ForeignKey("auction_rooms.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
    )
    bidder_id = Column(String(64), nullable=False, index=True)
    bidder_name = Column(String(255), nullable=True)
    amount = Column(Float, nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    is_winning_bid = Column(Boolean, nullable=False, default=False)
    previous_bid_amount = Column(Float, nullable=True)  # audit
    bid_type = Column(String(32), nullable=False, default=BID_TYPE_REGULAR)
    is_active = Column(Boolean, nullable=False, default=True)

    auction_room = relationship("AuctionRoom", back_populates="bids")
