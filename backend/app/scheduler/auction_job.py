"""Runs every AUCTION_CHECK_INTERVAL_SECONDS: settle active auctions whose end time has passed."""
import logging
import threading
from typing import Any

from app.db.session import SessionLocal
from app.services.auction.settlement import check_expired_auctions

logger = logging.getLogger(__name__)

# Held for the whole tick so a manual trigger never overlaps a scheduled one
_lock = threading.Lock()


def run_check_expired_auctions_job() -> dict[str, Any]:
    if not _lock.acquire(blocking=False):
        logger.warning("Expired auction check already running; skipping this tick")
        return {"skipped": True, "reason": "already running"}
    db = SessionLocal()
    try:
        return check_expired_auctions(db)
    except Exception as e:
        # Only the eligibility query can get here; per-room failures are isolated inside
        logger.exception("Expired auction check failed: %s", e)
        db.rollback()
        return {"skipped": False, "error": str(e)}
    finally:
        db.close()
        _lock.release()
