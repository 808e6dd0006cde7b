"""Runs every WINNER_NOTIFICATION_INTERVAL_SECONDS: retry winner notifications for ended rooms not yet notified."""
import logging
import threading
from typing import Any

from app.db.session import SessionLocal
from app.services.winner_notify_service import process_winner_notifications

logger = logging.getLogger(__name__)

_lock = threading.Lock()


def run_winner_notifications_job() -> dict[str, Any]:
    if not _lock.acquire(blocking=False):
        logger.warning("Winner notification sweep already running; skipping this tick")
        return {"skipped": True, "reason": "already running"}
    db = SessionLocal()
    try:
        return process_winner_notifications(db)
    except Exception as e:
        logger.exception("Winner notification sweep failed: %s", e)
        db.rollback()
        return {"skipped": False, "error": str(e)}
    finally:
        db.close()
        _lock.release()
