import pytest
from fastapi.testclient import TestClient

from app.api.routes import admin
from app.db.session import get_db
from app.main import app


class StubManager:
    def __init__(self):
        self.actions = []

    def initialize(self):
        self.actions.append("initialize")

    def start(self):
        self.actions.append("start")

    def stop(self):
        self.actions.append("stop")

    def restart(self):
        self.actions.append("restart")

    def get_status(self):
        return [{"index": 0, "id": "check_expired_auctions", "running": True, "next_run_time": None}]

    def trigger(self, job_id):
        if job_id != "check_expired_auctions":
            raise KeyError(f"Unknown job: {job_id}")
        return {"total_processed": 0}


@pytest.fixture
def manager():
    return StubManager()


@pytest.fixture
def client(db, manager):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[admin.get_job_manager] = lambda: manager
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_job_status_and_control(client, manager):
    assert client.get("/admin/jobs/status").json()["jobs"][0]["id"] == "check_expired_auctions"
    assert client.post("/admin/jobs/stop").json()["success"] is True
    assert client.post("/admin/jobs/start").json()["success"] is True
    assert client.post("/admin/jobs/restart").json()["success"] is True
    assert manager.actions == ["stop", "initialize", "start", "initialize", "restart"]


def test_trigger_known_and_unknown_job(client):
    r = client.post("/admin/jobs/check_expired_auctions/trigger")
    assert r.status_code == 200
    assert r.json()["data"] == {"total_processed": 0}

    r = client.post("/admin/jobs/nope/trigger")
    assert r.status_code == 404


def test_check_expired_with_nothing_due(client, monkeypatch):
    monkeypatch.setattr(admin, "check_expired_auctions", lambda db: {"total_processed": 0, "settled_count": 0,
                                                                       "failure_count": 0, "results": []})
    r = client.post("/admin/auctions/check-expired")
    assert r.status_code == 200
    assert r.json()["data"]["total_processed"] == 0


def test_process_winner_notifications_route(client):
    r = client.post("/admin/process-winner-notifications")
    assert r.status_code == 200
    assert r.json()["data"]["total_processed"] == 0


def test_notify_winner_validates_body(client):
    r = client.post("/admin/notify-winner", json={"auction_id": "r1", "winner_id": "B"})
    assert r.status_code == 422

    r = client.post(
        "/admin/notify-winner",
        json={"auction_id": "r1", "winner_id": "B", "auction_title": "Rice", "winning_bid": 0},
    )
    assert r.status_code == 422


def test_notify_winner_reports_result(client, monkeypatch):
    calls = []

    def fake_notify(db, auction_id, winner_id, auction_title, winning_bid):
        calls.append((auction_id, winner_id, auction_title, winning_bid))
        return {"success": False, "auction_id": auction_id, "error": "Failed to notify auction winner: no email"}

    monkeypatch.setattr(admin, "notify_winner", fake_notify)

    r = client.post(
        "/admin/notify-winner",
        json={"auction_id": "r1", "winner_id": "B", "auction_title": "Rice", "winning_bid": 1500},
    )

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Winner notification failed"
    assert calls == [("r1", "B", "Rice", 1500.0)]


def test_scheduler_unavailable_without_manager(db):
    app.dependency_overrides[get_db] = lambda: db
    try:
        r = TestClient(app).get("/admin/jobs/status")
    finally:
        app.dependency_overrides.clear()
    assert r.status_code == 503
