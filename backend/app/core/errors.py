"""
Centralized error types for auction settlement and their HTTP mapping.
Constants and a reusable helper so routes stay thin and new error types are easy to add.
"""
from __future__ import annotations

from fastapi import HTTPException


class SettlementError(Exception):
    """Base class for auction settlement failures."""


class LiveAuctionNotFound(SettlementError):
    """No live snapshot exists for the room (zero bids, or snapshot evicted)."""

    def __init__(self, room_id: str):
        super().__init__(f"No live auction snapshot for room {room_id}")
        self.room_id = room_id


class LiveStoreError(SettlementError):
    """Live bid store unreachable or returned an unusable response. Retried next tick."""


class ReconciliationError(SettlementError):
    """Persisting a live bid into the durable ledger failed; the rest of the batch was skipped."""

    def __init__(self, room_id: str, bid_id: str, cause: Exception):
        super().__init__(f"Failed to reconcile bid {bid_id} for room {room_id}: {cause}")
        self.room_id = room_id
        self.bid_id = bid_id
        self.cause = cause


class WinnerValidationError(SettlementError):
    """Winner cannot be notified: user missing or no email on file."""


# ---------------------------------------------------------------------------
# Constants: HTTP status codes for known error categories
# ---------------------------------------------------------------------------

STATUS_NOT_FOUND = 404
STATUS_UNPROCESSABLE = 422
STATUS_SERVICE_UNAVAILABLE = 503  # live store / transport down
STATUS_INTERNAL_ERROR = 500


# ---------------------------------------------------------------------------
# Error rules: (exception type, status_code). First match wins.
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

SETTLEMENT_ERROR_RULES: list[tuple[type[Exception], int]] = [
    (WinnerValidationError, STATUS_UNPROCESSABLE),
    (LiveAuctionNotFound, STATUS_NOT_FOUND),
    (LiveStoreError, STATUS_SERVICE_UNAVAILABLE),
]


def settlement_error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception from a settlement/notification operation into an HTTPException.
    Uses SETTLEMENT_ERROR_RULES for known error types; otherwise returns 500 with the exception message.
    """
    for exc_type, status_code in SETTLEMENT_ERROR_RULES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=str(exc))


def error_message(exc: BaseException) -> str:
    """Non-empty message for result payloads."""
    return str(exc) or exc.__class__.__name__
