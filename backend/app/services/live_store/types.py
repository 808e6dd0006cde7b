"""Normalized live auction types. Same shape regardless of how the bidding client wrote the room."""
from datetime import datetime, timezone
from typing import Any


def parse_timestamp(value: Any) -> datetime:
    """ISO string, epoch milliseconds or datetime -> aware datetime (UTC). Unparseable -> now."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool):
        return datetime.now(timezone.utc)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return datetime.now(timezone.utc)
    if isinstance(value, str) and value.strip():
        s = value.strip()
        if s.isdigit():
            return parse_timestamp(int(s))
        try:
            parsed = datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError:
            return datetime.now(timezone.utc)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return datetime.now(timezone.utc)


class LiveBid:
    """One bid from the live room. id is the live-store key and is reused as the durable bid id."""

    __slots__ = ("id", "user_name", "amount", "bidder_id", "user_id", "timestamp")

    def __init__(
        self,
        *,
        id: str,
        amount: float,
        user_name: str = "",
        bidder_id: str = "",
        user_id: str = "",
        timestamp: datetime | None = None,
    ):
        self.id = id
        self.user_name = user_name
        self.amount = amount
        self.bidder_id = bidder_id
        self.user_id = user_id or bidder_id
        self.timestamp = timestamp or datetime.now(timezone.utc)

    @classmethod
    def from_raw(cls, bid_id: str, raw: Any) -> "LiveBid":
        """Missing fields default: userName -> "", amount -> 0, userId -> bidderId, timestamp -> now."""
        data = raw if isinstance(raw, dict) else {}
        bidder_id = str(data.get("bidderId") or "")
        return cls(
            id=str(bid_id),
            user_name=str(data.get("userName") or ""),
            amount=data.get("amount") or 0,
            bidder_id=bidder_id,
            user_id=str(data.get("userId") or bidder_id),
            timestamp=parse_timestamp(data.get("timestamp")),
        )

    @property
    def bidder_key(self) -> str:
        """Identity used for participants and the winner (userId, else bidderId)."""
        return self.user_id or self.bidder_id

    def __repr__(self) -> str:
        return f"LiveBid(id={self.id!r}, bidder={self.bidder_key!r}, amount={self.amount!r})"


class LiveAuctionSnapshot:
    """Projection of auctions/{room_id}: {bids: {bidId: {...}}, totalBids, currentHighestBid}."""

    __slots__ = ("room_id", "bids", "total_bids", "current_highest_bid")

    def __init__(
        self,
        *,
        room_id: str,
        bids: list[LiveBid],
        total_bids: int | None = None,
        current_highest_bid: float | None = None,
    ):
        self.room_id = room_id
        self.bids = bids
        self.total_bids = total_bids
        self.current_highest_bid = current_highest_bid

    @classmethod
    def from_raw(cls, room_id: str, raw: dict[str, Any]) -> "LiveAuctionSnapshot":
        bids_obj = raw.get("bids") or {}
        if isinstance(bids_obj, list):
            # Firebase returns arrays for integer-like keys; holes come back as None
            items = [(str(i), b) for i, b in enumerate(bids_obj) if b is not None]
        else:
            items = list(bids_obj.items())
        total = raw.get("totalBids")
        highest = raw.get("currentHighestBid")
        return cls(
            room_id=room_id,
            bids=[LiveBid.from_raw(bid_id, b) for bid_id, b in items],
            total_bids=int(total) if isinstance(total, (int, float)) and not isinstance(total, bool) else None,
            current_highest_bid=highest if isinstance(highest, (int, float)) and not isinstance(highest, bool) else None,
        )

    @classmethod
    def empty(cls, room_id: str) -> "LiveAuctionSnapshot":
        """Stand-in for a room with no live snapshot (treated as zero bids)."""
        return cls(room_id=room_id, bids=[])
