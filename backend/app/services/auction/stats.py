"""
Auction statistics: a pure reduction over a bid set.

Same bids in any order -> same result. Equal highest amounts: earliest timestamp wins,
then lowest bid id.
"""
from datetime import datetime, timezone
from typing import Any, Iterable


class AuctionStats:
    """Final numbers written to the room at settlement."""

    __slots__ = (
        "total_bids",
        "total_participants",
        "highest_bid",
        "highest_bidder_id",
        "winner_id",
        "winning_bid_id",
    )

    def __init__(
        self,
        *,
        total_bids: int,
        total_participants: int,
        highest_bid: float,
        highest_bidder_id: str | None,
        winner_id: str | None,
        winning_bid_id: str | None,
    ):
        self.total_bids = total_bids
        self.total_participants = total_participants
        self.highest_bid = highest_bid
        self.highest_bidder_id = highest_bidder_id
        self.winner_id = winner_id
        self.winning_bid_id = winning_bid_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_bids": self.total_bids,
            "total_participants": self.total_participants,
            "highest_bid": self.highest_bid,
            "highest_bidder_id": self.highest_bidder_id,
            "winner_id": self.winner_id,
            "winning_bid_id": self.winning_bid_id,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuctionStats):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"AuctionStats({self.to_dict()!r})"


def _utc(ts: datetime | None) -> datetime:
    # SQLite hands back naive datetimes; freshly added rows are aware
    if ts is None:
        return datetime.max.replace(tzinfo=timezone.utc)
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def _rank(bid: Any) -> tuple:
    """Sort key: highest amount first, then earliest timestamp, then lowest id."""
    return (-bid.amount, _utc(bid.timestamp), str(bid.id))


def compute_stats(
    starting_bid: float,
    bids: Iterable[Any],
    *,
    reported_total_bids: int | None = None,
) -> AuctionStats:
    """
    Bids need id, bidder_id, amount and timestamp (AuctionBid rows).
    total_bids prefers the live snapshot's reported count when given, else the local count.
    No bids -> highest_bid = starting_bid and no winner.
    """
    bid_list = list(bids)
    bidders = {b.bidder_id for b in bid_list if b.bidder_id}
    total = reported_total_bids if reported_total_bids is not None else len(bid_list)
    if not bid_list:
        return AuctionStats(
            total_bids=total,
            total_participants=0,
            highest_bid=starting_bid,
            highest_bidder_id=None,
            winner_id=None,
            winning_bid_id=None,
        )
    top = min(bid_list, key=_rank)
    return AuctionStats(
        total_bids=total,
        total_participants=len(bidders),
        highest_bid=top.amount,
        highest_bidder_id=top.bidder_id,
        winner_id=top.bidder_id,
        winning_bid_id=top.id,
    )
