"""
Scheduler wrapper for the auction jobs: initialize once, start/stop/restart, status and manual trigger.

Jobs run on APScheduler's thread pool, so a slow or failing job never blocks the other.
max_instances=1 + coalesce keep ticks of the same job from overlapping or piling up.
"""
import logging
import threading
from typing import Any, Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import STATE_RUNNING, STATE_STOPPED

from app.config import settings
from app.core.constants import (
    AUCTION_CHECK_INTERVAL_SECONDS,
    AUCTION_CHECK_JOB_ID,
    WINNER_NOTIFICATION_INTERVAL_SECONDS,
    WINNER_NOTIFICATION_JOB_ID,
)
from app.scheduler.auction_job import run_check_expired_auctions_job
from app.scheduler.winner_notification_job import run_winner_notifications_job

logger = logging.getLogger(__name__)


class AuctionJobManager:
    def __init__(self, scheduler: BackgroundScheduler | None = None) -> None:
        self._scheduler = scheduler or BackgroundScheduler(timezone="UTC")
        self._jobs: dict[str, Callable[[], Any]] = {}
        self._initialized = False
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def _add_job(self, job_id: str, func: Callable[[], Any], seconds: int) -> None:
        self._scheduler.add_job(
            func,
            "interval",
            seconds=seconds,
            id=job_id,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._jobs[job_id] = func

    def initialize(self) -> None:
        """Register the recurring jobs. Safe to call more than once; only the first call adds jobs."""
        with self._lock:
            if self._initialized:
                return
            self._add_job(AUCTION_CHECK_JOB_ID, run_check_expired_auctions_job, AUCTION_CHECK_INTERVAL_SECONDS)
            if settings.winner_notification_job_enabled:
                self._add_job(
                    WINNER_NOTIFICATION_JOB_ID,
                    run_winner_notifications_job,
                    WINNER_NOTIFICATION_INTERVAL_SECONDS,
                )
            self._initialized = True
            logger.info("Auction jobs initialized: %s", ", ".join(self._jobs))

    def start(self) -> None:
        if not self._initialized:
            raise RuntimeError("Auction jobs must be initialized before starting")
        if self._scheduler.state == STATE_STOPPED:
            self._scheduler.start()
        elif self._scheduler.state != STATE_RUNNING:
            self._scheduler.resume()
        logger.info("Auction jobs started")

    def stop(self) -> None:
        """Pause job processing; in-flight ticks finish on their own."""
        if self._scheduler.state == STATE_RUNNING:
            self._scheduler.pause()
            logger.info("Auction jobs stopped")

    def restart(self) -> None:
        self.stop()
        self.start()

    def get_status(self) -> list[dict[str, Any]]:
        running = self._scheduler.state == STATE_RUNNING
        status = []
        for index, job in enumerate(self._scheduler.get_jobs()):
            next_run = getattr(job, "next_run_time", None)
            status.append({
                "index": index,
                "id": job.id,
                "running": running and next_run is not None,
                "next_run_time": next_run.isoformat() if next_run else None,
            })
        return status

    def trigger(self, job_id: str) -> Any:
        """Run one job now in the calling thread. Raises KeyError for an unknown job id."""
        if job_id not in self._jobs:
            raise KeyError(f"Unknown job: {job_id}. Available: {list(self._jobs)}")
        logger.info("Manual trigger: %s", job_id)
        return self._jobs[job_id]()

    def shutdown(self, wait: bool = True) -> None:
        """Stop the scheduler and wait for running ticks to complete."""
        if self._scheduler.state != STATE_STOPPED:
            self._scheduler.shutdown(wait=wait)
            logger.info("Auction jobs shut down")


job_manager = AuctionJobManager()
