"""
Auction settlement: close every active room whose end_time has passed.

Per room, in strict order: live snapshot -> reconcile bids -> stats -> room update (ended)
-> winner notification (winner_notified on success) -> product back to MARKETPLACE.

Rooms are isolated: a failure is rolled back, logged with the room id and recorded in the
result. Anything failing before the ended commit leaves the room active, so it is retried
on the next tick. After that commit, a product left in AUCTION is moved by
release_stranded_products on every tick and a missed notification by the retry sweep.
The status == active filter is what makes a second run a no-op.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from sqlalchemy.orm import Session

from app.core.constants import (
    AUCTION_STATUS_ACTIVE,
    AUCTION_STATUS_ENDED,
    AUCTION_STATUS_ORDER,
    AUCTION_STATUS_WINNER_NOTIFIED,
    PRODUCT_ENV_AUCTION,
    PRODUCT_ENV_MARKETPLACE,
)
from app.core.errors import LiveAuctionNotFound, error_message
from app.models.auction_bid import AuctionBid
from app.models.auction_participant import AuctionParticipant
from app.models.auction_room import AuctionRoom
from app.models.product import Product
from app.services.auction.reconcile import reconcile_bids
from app.services.auction.stats import AuctionStats, compute_stats
from app.services.live_store.types import LiveAuctionSnapshot

logger = logging.getLogger(__name__)

# (db, auction_id, winner_id, auction_title, winning_bid) -> {success, ...}
WinnerNotifier = Callable[[Session, str, str, str, float], dict[str, Any]]


class LiveStore(Protocol):
    def fetch_live_auction_snapshot(self, room_id: str) -> LiveAuctionSnapshot:
        ...


def advance_status(room: AuctionRoom, new_status: str) -> None:
    """Move room.status forward. Raises ValueError on a regression (e.g. ended -> active)."""
    current = AUCTION_STATUS_ORDER.index(room.status)
    target = AUCTION_STATUS_ORDER.index(new_status)
    if target < current:
        raise ValueError(f"Room {room.id}: cannot move status from {room.status} to {new_status}")
    room.status = new_status


def get_expired_auctions(db: Session, now: datetime | None = None) -> list[AuctionRoom]:
    """Active rooms with end_time <= now, oldest first."""
    now = now or datetime.now(timezone.utc)
    return (
        db.query(AuctionRoom)
        .filter(AuctionRoom.status == AUCTION_STATUS_ACTIVE, AuctionRoom.end_time <= now)
        .order_by(AuctionRoom.end_time.asc())
        .all()
    )


def _default_live_store() -> LiveStore:
    from app.services.live_store import default_client

    return default_client


def _default_notifier() -> WinnerNotifier:
    from app.services.winner_notify_service import notify_winner

    return notify_winner


def _fetch_snapshot(live_store: LiveStore, room_id: str) -> LiveAuctionSnapshot:
    try:
        return live_store.fetch_live_auction_snapshot(room_id)
    except LiveAuctionNotFound:
        logger.info("No live snapshot for room %s; settling with zero live bids", room_id)
        return LiveAuctionSnapshot.empty(room_id)


def _apply_stats(db: Session, room: AuctionRoom, ledger: list[AuctionBid], stats: AuctionStats) -> None:
    advance_status(room, AUCTION_STATUS_ENDED)
    room.total_bids = stats.total_bids
    room.total_participants = stats.total_participants
    room.current_highest_bid = stats.highest_bid
    room.current_highest_bidder_id = stats.highest_bidder_id
    room.winner_id = stats.winner_id
    room.is_reserve_reached = stats.winner_id is not None and stats.highest_bid >= (room.reserve_price or 0)
    room.updated_at = datetime.now(timezone.utc)

    # Exactly one winning bid per room (ties at the top amount may have been flagged on insert)
    for bid in ledger:
        bid.is_winning_bid = bid.id == stats.winning_bid_id

    if stats.winner_id:
        participant = (
            db.query(AuctionParticipant)
            .filter(
                AuctionParticipant.auction_room_id == room.id,
                AuctionParticipant.user_id == stats.winner_id,
            )
            .first()
        )
        if participant is not None:
            participant.is_winner = True


def transfer_product_to_marketplace(db: Session, room: AuctionRoom) -> None:
    """An ended auction always returns its product to the general marketplace."""
    product = db.get(Product, room.product_id)
    if product is None:
        logger.warning("Room %s: product %s not found; nothing to transfer", room.id, room.product_id)
        return
    logger.debug("Transferring product %s for room %s to %s", product.id, room.id, PRODUCT_ENV_MARKETPLACE)
    product.environment = PRODUCT_ENV_MARKETPLACE


def release_stranded_products(db: Session) -> list[str]:
    """
    Move products of ended / winner_notified rooms still in AUCTION back to MARKETPLACE.
    Covers a transfer that failed after the room's ended commit. Returns the product ids moved.
    """
    rooms = (
        db.query(AuctionRoom)
        .join(Product, Product.id == AuctionRoom.product_id)
        .filter(
            AuctionRoom.status.in_((AUCTION_STATUS_ENDED, AUCTION_STATUS_WINNER_NOTIFIED)),
            Product.environment == PRODUCT_ENV_AUCTION,
        )
        .all()
    )
    for room in rooms:
        transfer_product_to_marketplace(db, room)
    if rooms:
        db.commit()
        logger.warning("Released %s products stranded in %s after settlement", len(rooms), PRODUCT_ENV_AUCTION)
    return [r.product_id for r in rooms]


def _notify(
    notifier: WinnerNotifier,
    db: Session,
    room: AuctionRoom,
    stats: AuctionStats,
) -> dict[str, Any]:
    title = room.product.title if room.product is not None else room.id
    try:
        return notifier(db, room.id, stats.winner_id, title, stats.highest_bid)
    except Exception as e:
        # Notification must not stop the product transfer; the retry sweep picks this room up
        logger.exception("Winner notification raised for room %s: %s", room.id, e)
        db.rollback()
        return {"success": False, "error": error_message(e)}


def process_expired_auction(
    db: Session,
    room: AuctionRoom,
    *,
    live_store: LiveStore | None = None,
    notifier: WinnerNotifier | None = None,
) -> dict[str, Any]:
    """Settle one expired room. Raises on failure; check_expired_auctions isolates rooms."""
    live_store = live_store or _default_live_store()
    notifier = notifier or _default_notifier()
    room_id = room.id

    snapshot = _fetch_snapshot(live_store, room_id)
    reconcile_bids(db, room_id, snapshot.bids, snapshot.current_highest_bid)

    ledger = db.query(AuctionBid).filter(AuctionBid.auction_room_id == room_id).all()
    stats = compute_stats(room.starting_bid, ledger, reported_total_bids=snapshot.total_bids)

    _apply_stats(db, room, ledger, stats)
    db.commit()
    logger.info(
        "Auction %s ended: %s bids, %s participants, winner=%s",
        room_id, stats.total_bids, stats.total_participants, stats.winner_id,
    )

    notification = None
    if stats.winner_id:
        notification = _notify(notifier, db, room, stats)
        if notification.get("success"):
            advance_status(room, AUCTION_STATUS_WINNER_NOTIFIED)
            db.commit()

    transfer_product_to_marketplace(db, room)
    db.commit()

    return {
        "room_id": room_id,
        "status": "settled",
        "room_status": room.status,
        "stats": stats.to_dict(),
        "notification": notification,
    }


def check_expired_auctions(
    db: Session,
    *,
    live_store: LiveStore | None = None,
    notifier: WinnerNotifier | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Settle every expired active room. Never raises.
    Returns {total_processed, settled_count, failure_count, results: [...], released_products},
    plus error when the eligibility query itself failed.
    """
    try:
        rooms = get_expired_auctions(db, now)
    except Exception as e:
        db.rollback()
        logger.exception("Expired auction query failed: %s", e)
        return {
            "total_processed": 0,
            "settled_count": 0,
            "failure_count": 0,
            "results": [],
            "released_products": [],
            "error": error_message(e),
        }
    room_ids = [r.id for r in rooms]
    results: list[dict[str, Any]] = []
    for room_id, room in zip(room_ids, rooms):
        try:
            results.append(process_expired_auction(db, room, live_store=live_store, notifier=notifier))
        except Exception as e:
            db.rollback()
            logger.exception("Error processing expired auction %s: %s", room_id, e)
            results.append({"room_id": room_id, "status": "failed", "error": error_message(e)})

    try:
        released = release_stranded_products(db)
    except Exception as e:
        db.rollback()
        logger.exception("Releasing stranded auction products failed: %s", e)
        released = []

    settled = sum(1 for r in results if r["status"] == "settled")
    if rooms:
        logger.info("Expired auction check: %s processed, %s settled, %s failed", len(rooms), settled, len(rooms) - settled)
    return {
        "total_processed": len(rooms),
        "settled_count": settled,
        "failure_count": len(rooms) - settled,
        "results": results,
        "released_products": released,
    }
