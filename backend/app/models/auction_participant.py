"""One row per (room, user). Maintained by the live bidding path; settlement flags the winner."""
from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base import Base


class AuctionParticipant(Base):
    __tablename__ = "auction_participants"
    __table_args__ = (UniqueConstraint("auction_room_id", "user_id", name="uq_auction_participants_room_user"),)

    id = Column(String(64), primary_key=True)
    auction_room_id = Column(
        String(64),
        ForeignKey("auction_rooms.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
    )
    user_id = Column(String(64), nullable=False, index=True)
    user_name = Column(String(255), nullable=True)
    first_joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_seen_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    total_bids_placed = Column(Integer, nullable=False, default=0)
    highest_bid_amount = Column(Float, nullable=True)
    is_winner = Column(Boolean, nullable=False, default=False)
    has_left_room = Column(Boolean, nullable=False, default=False)

    auction_room = relationship("AuctionRoom", back_populates="participants")
