"""
Bid reconciler: one-way, idempotent merge of live-store bids into the durable auction_bids ledger.

Keyed by the live-store bid id, so calling it again after a retry inserts nothing new.
Amounts are carried through exactly as received (no rounding or currency conversion).
"""
import logging
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import BID_TYPE_REGULAR, UNKNOWN_BIDDER_ID
from app.core.errors import ReconciliationError
from app.models.auction_bid import AuctionBid
from app.services.live_store.types import LiveBid

logger = logging.getLogger(__name__)


def _is_winning(amount: float, current_highest_bid: float | None) -> bool:
    # Exact match only, not ">="
    return current_highest_bid is not None and amount == current_highest_bid


def reconcile_bids(
    db: Session,
    room_id: str,
    bids: Iterable[LiveBid],
    current_highest_bid: float | None,
) -> int:
    """
    Insert every bid not already in the ledger; leave existing rows untouched.
    A new bid is flagged is_winning_bid iff its amount equals current_highest_bid.
    Returns the number of rows inserted. On a persistence error the remaining batch is skipped,
    the session is rolled back and ReconciliationError is raised.
    """
    inserted = 0
    for bid in bids:
        try:
            if db.get(AuctionBid, bid.id) is not None:
                continue
            db.add(
                AuctionBid(
                    id=bid.id,
                    auction_room_id=room_id,
                    bidder_id=bid.user_id or bid.bidder_id or UNKNOWN_BIDDER_ID,
                    bidder_name=bid.user_name,
                    amount=bid.amount,
                    timestamp=bid.timestamp,
                    is_winning_bid=_is_winning(bid.amount, current_highest_bid),
                    bid_type=BID_TYPE_REGULAR,
                    is_active=True,
                )
            )
            # Flush per bid so a duplicate id later in the same batch is found by db.get
            db.flush()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Reconciliation aborted for room %s at bid %s: %s", room_id, bid.id, e)
            raise ReconciliationError(room_id, bid.id, e) from e
        inserted += 1
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise ReconciliationError(room_id, "<commit>", e) from e
    if inserted:
        logger.info("Reconciled %s new bids into ledger for room %s", inserted, room_id)
    return inserted
