import threading

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from app.core.constants import AUCTION_CHECK_JOB_ID, WINNER_NOTIFICATION_JOB_ID
from app.scheduler import auction_job, winner_notification_job
from app.scheduler.manager import AuctionJobManager


@pytest.fixture
def manager():
    m = AuctionJobManager(BackgroundScheduler(timezone="UTC"))
    yield m
    m.shutdown(wait=False)


def test_initialize_registers_both_jobs_once(manager):
    manager.initialize()
    manager.initialize()

    ids = [job["id"] for job in manager.get_status()]
    assert sorted(ids) == sorted([AUCTION_CHECK_JOB_ID, WINNER_NOTIFICATION_JOB_ID])


def test_start_requires_initialize(manager):
    with pytest.raises(RuntimeError):
        manager.start()


def test_start_stop_restart_reflected_in_status(manager):
    manager.initialize()
    manager.start()
    assert all(job["running"] for job in manager.get_status())
    assert all(job["next_run_time"] for job in manager.get_status())

    manager.stop()
    assert not any(job["running"] for job in manager.get_status())

    manager.restart()
    assert all(job["running"] for job in manager.get_status())


def test_trigger_unknown_job(manager):
    manager.initialize()

    with pytest.raises(KeyError):
        manager.trigger("nope")


def test_trigger_runs_job_in_calling_thread(manager, monkeypatch):
    manager.initialize()
    monkeypatch.setitem(manager._jobs, AUCTION_CHECK_JOB_ID, lambda: {"total_processed": 0})

    assert manager.trigger(AUCTION_CHECK_JOB_ID) == {"total_processed": 0}


def test_auction_job_uses_fresh_session(session_factory, monkeypatch):
    seen = {}

    def fake_check(db):
        seen["db"] = db
        return {"total_processed": 0, "settled_count": 0, "failure_count": 0, "results": []}

    monkeypatch.setattr(auction_job, "SessionLocal", session_factory)
    monkeypatch.setattr(auction_job, "check_expired_auctions", fake_check)

    result = auction_job.run_check_expired_auctions_job()

    assert result["total_processed"] == 0
    assert seen["db"] is not None


def test_overlapping_tick_is_skipped(session_factory, monkeypatch):
    entered = threading.Event()
    release = threading.Event()

    def slow_check(db):
        entered.set()
        release.wait(timeout=5)
        return {"total_processed": 0}

    monkeypatch.setattr(auction_job, "SessionLocal", session_factory)
    monkeypatch.setattr(auction_job, "check_expired_auctions", slow_check)

    worker = threading.Thread(target=auction_job.run_check_expired_auctions_job)
    worker.start()
    try:
        assert entered.wait(timeout=5)
        assert auction_job.run_check_expired_auctions_job() == {"skipped": True, "reason": "already running"}
    finally:
        release.set()
        worker.join(timeout=5)

    assert auction_job.run_check_expired_auctions_job() == {"total_processed": 0}


def test_job_failure_is_reported_not_raised(session_factory, monkeypatch):
    def broken(db):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(winner_notification_job, "SessionLocal", session_factory)
    monkeypatch.setattr(winner_notification_job, "process_winner_notifications", broken)

    result = winner_notification_job.run_winner_notifications_job()

    assert result == {"skipped": False, "error": "database is locked"}
    assert winner_notification_job._lock.locked() is False
