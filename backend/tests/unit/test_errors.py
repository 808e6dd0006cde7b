import pytest

from app.core.errors import (
    LiveAuctionNotFound,
    LiveStoreError,
    ReconciliationError,
    WinnerValidationError,
    error_message,
    settlement_error_to_http,
)


@pytest.mark.parametrize(
    "exc, status",
    [
        (WinnerValidationError("no email"), 422),
        (LiveAuctionNotFound("r1"), 404),
        (LiveStoreError("timeout"), 503),
        (ReconciliationError("r1", "b1", RuntimeError("x")), 500),
        (RuntimeError("boom"), 500),
    ],
)
def test_settlement_error_to_http(exc, status):
    http_exc = settlement_error_to_http(exc)
    assert http_exc.status_code == status
    assert http_exc.detail == str(exc)


def test_reconciliation_error_keeps_context():
    cause = RuntimeError("disk full")
    e = ReconciliationError("r1", "b7", cause)
    assert e.room_id == "r1"
    assert e.bid_id == "b7"
    assert e.cause is cause
    assert "b7" in str(e) and "r1" in str(e)


def test_error_message_never_empty():
    assert error_message(ValueError()) == "ValueError"
    assert error_message(ValueError("bad")) == "bad"
