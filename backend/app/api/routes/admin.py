"""
Operational endpoints: thin wrappers around settlement, winner notification and the job scheduler.

Each route invokes the core operation and reports its structured result.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.core.errors import settlement_error_to_http
from app.db.session import get_db
from app.scheduler.manager import AuctionJobManager
from app.services.auction.settlement import check_expired_auctions
from app.services.winner_notify_service import notify_winner, process_winner_notifications

router = APIRouter()
logger = logging.getLogger(__name__)


def get_job_manager(request: Request) -> AuctionJobManager:
    manager = getattr(request.app.state, "job_manager", None)
    if manager is None:
        raise HTTPException(status_code=503, detail="Scheduler not available")
    return manager


# --- Settlement ---


@router.post("/auctions/check-expired")
def trigger_check_expired_auctions(db: Session = Depends(get_db)) -> dict[str, Any]:
    """Settle every expired active auction now (same work as one scheduler tick)."""
    try:
        result = check_expired_auctions(db)
    except Exception as e:
        logger.exception("Manual expired auction check failed: %s", e)
        raise settlement_error_to_http(e)
    return {"success": True, "message": "Expired auctions check completed", "data": result}


# --- Jobs ---


@router.get("/jobs/status")
def get_jobs_status(manager: AuctionJobManager = Depends(get_job_manager)) -> dict[str, Any]:
    return {"success": True, "jobs": manager.get_status()}


@router.post("/jobs/start")
def start_jobs(manager: AuctionJobManager = Depends(get_job_manager)) -> dict[str, Any]:
    manager.initialize()
    manager.start()
    return {"success": True, "message": "Jobs started", "jobs": manager.get_status()}


@router.post("/jobs/stop")
def stop_jobs(manager: AuctionJobManager = Depends(get_job_manager)) -> dict[str, Any]:
    manager.stop()
    return {"success": True, "message": "Jobs stopped", "jobs": manager.get_status()}


@router.post("/jobs/restart")
def restart_jobs(manager: AuctionJobManager = Depends(get_job_manager)) -> dict[str, Any]:
    manager.initialize()
    manager.restart()
    return {"success": True, "message": "Jobs restarted", "jobs": manager.get_status()}


@router.post("/jobs/{job_id}/trigger")
def trigger_job(job_id: str, manager: AuctionJobManager = Depends(get_job_manager)) -> dict[str, Any]:
    """Run one job immediately. Skipped (not queued) if a tick of that job is already running."""
    try:
        result = manager.trigger(job_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]) if e.args else job_id)
    return {"success": True, "job_id": job_id, "data": result}


# --- Winner notifications ---


class NotifyWinnerBody(BaseModel):
    auction_id: str = Field(..., min_length=1)
    winner_id: str = Field(..., min_length=1)
    auction_title: str = Field(..., min_length=1)
    winning_bid: float = Field(..., gt=0)


@router.post("/notify-winner")
def trigger_single_winner_notification(body: NotifyWinnerBody, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Send the winner notification for one auction. Does not change the room's status."""
    result = notify_winner(db, body.auction_id, body.winner_id, body.auction_title, body.winning_bid)
    return {
        "success": result["success"],
        "message": "Winner notification sent" if result["success"] else "Winner notification failed",
        "data": result,
    }


@router.post("/process-winner-notifications")
def trigger_winner_notifications(db: Session = Depends(get_db)) -> dict[str, Any]:
    """Run the winner notification retry sweep now."""
    try:
        result = process_winner_notifications(db)
    except Exception as e:
        logger.exception("Manual winner notification sweep failed: %s", e)
        raise settlement_error_to_http(e)
    return {"success": True, "message": "Winner notification processing completed", "data": result}
