"""
Winner notifications: email is mandatory, WhatsApp (then SMS as fallback) is best-effort.

Channels run as an ordered list of attempts, each producing a tagged result
{channel, success, message_id|sid, error}. Overall success is an OR over the mandatory
channels only; a failed secondary channel is recorded, never escalated.

Safe to call more than once for the same auction: nothing here deduplicates sends, the
room status gate (ended -> winner_notified) at the call sites does.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.orm import Session

from app.core.constants import (
    AUCTION_STATUS_ENDED,
    AUCTION_STATUS_WINNER_NOTIFIED,
    DEFAULT_WINNER_NAME,
)
from app.core.errors import WinnerValidationError, error_message
from app.models.auction_room import AuctionRoom
from app.models.user import User
from app.services import email_notify, twilio_notify
from app.services.auction.settlement import advance_status

logger = logging.getLogger(__name__)

PRIMARY_CHANNEL = "email"


class WinnerChannels:
    """Transport functions used by notify_winner. Swap in fakes for tests."""

    __slots__ = ("send_email", "send_whatsapp_winner", "send_sms")

    def __init__(
        self,
        *,
        send_email: Callable[..., dict[str, Any]] | None = None,
        send_whatsapp_winner: Callable[..., dict[str, Any]] | None = None,
        send_sms: Callable[..., dict[str, Any]] | None = None,
    ):
        self.send_email = send_email or email_notify.send_email
        self.send_whatsapp_winner = send_whatsapp_winner or twilio_notify.send_whatsapp_winner_notification
        self.send_sms = send_sms or twilio_notify.send_sms


def format_amount(amount: float) -> str:
    """1500 -> '1,500'; 1500.5 -> '1,500.50'."""
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def create_winner_message(winner_name: str, auction_title: str, formatted_bid: str) -> str:
    return (
        f"Congratulations {winner_name}!\n"
        f"You have WON the auction for \"{auction_title}\" with your bid of Rs {formatted_bid}."
    )


def get_winner_data(db: Session, winner_id: str) -> User:
    """Load the winner; raises WinnerValidationError when missing or without an email."""
    winner = db.get(User, winner_id)
    if winner is None:
        raise WinnerValidationError(f"Winner not found for user {winner_id}")
    if not (winner.email or "").strip():
        raise WinnerValidationError(
            f"Winner email is required for notifications but not available for user {winner_id}"
        )
    return winner


def _tag(channel: str, raw: dict[str, Any]) -> dict[str, Any]:
    result = {"channel": channel, "success": bool(raw.get("success"))}
    for key in ("message_id", "sid", "error"):
        if raw.get(key) is not None:
            result[key] = raw[key]
    if not result["success"] and "error" not in result:
        result["error"] = "Unknown error"
    return result


def _send_mandatory_email(
    channels: WinnerChannels,
    winner: User,
    winner_name: str,
    auction_title: str,
    message: str,
    formatted_bid: str,
) -> dict[str, Any]:
    subject = f"Congratulations! You won the auction for \"{auction_title}\""
    html_body = email_notify.create_winner_notification_html(winner_name, auction_title, formatted_bid)
    try:
        result = _tag(PRIMARY_CHANNEL, channels.send_email(winner.email, subject, message, html_body))
    except Exception as e:
        result = _tag(PRIMARY_CHANNEL, {"success": False, "error": error_message(e)})
    if result["success"]:
        logger.info("Mandatory email sent to winner %s", winner.id)
    else:
        logger.error("Mandatory email failed for winner %s: %s", winner.id, result["error"])
    return result


def _secondary_attempts(
    channels: WinnerChannels,
    winner: User,
    winner_name: str,
    auction_title: str,
    message: str,
    formatted_bid: str,
) -> list[tuple[str, Callable[[], dict[str, Any]]]]:
    """Ordered secondary channels; each later one is a fallback for the previous. Empty without a phone."""
    phone = (winner.whatsapp or "").strip()
    if not phone:
        return []
    return [
        ("whatsapp", lambda: channels.send_whatsapp_winner(phone, winner_name, auction_title, formatted_bid)),
        ("sms", lambda: channels.send_sms(phone, message)),
    ]


def _send_additional_notifications(
    attempts: list[tuple[str, Callable[[], dict[str, Any]]]],
    winner_id: str,
) -> dict[str, Any]:
    results: dict[str, Any] = {"whatsapp": None, "sms": None}
    for channel, send in attempts:
        try:
            result = _tag(channel, send())
        except Exception as e:
            result = _tag(channel, {"success": False, "error": error_message(e)})
        results[channel] = result
        if result["success"]:
            logger.info("Additional %s notification sent to winner %s", channel, winner_id)
            break
        logger.warning("Additional %s notification failed for winner %s: %s", channel, winner_id, result["error"])
    return results


def notify_winner(
    db: Session,
    auction_id: str,
    winner_id: str,
    auction_title: str,
    winning_bid: float,
    *,
    channels: WinnerChannels | None = None,
) -> dict[str, Any]:
    """
    Notify one auction winner. Never raises.
    Returns {success, auction_id, method, recipient, message_id, additional_channels: {whatsapp, sms}}
    or {success: False, auction_id, error} when validation fails before any send.
    """
    channels = channels or WinnerChannels()
    try:
        winner = get_winner_data(db, winner_id)
    except WinnerValidationError as e:
        logger.warning("Cannot notify winner for auction %s: %s", auction_id, e)
        return {"success": False, "auction_id": auction_id, "error": f"Failed to notify auction winner: {e}"}

    winner_name = winner.business_name or DEFAULT_WINNER_NAME
    formatted_bid = format_amount(winning_bid)
    message = create_winner_message(winner_name, auction_title, formatted_bid)

    primary = [_send_mandatory_email(channels, winner, winner_name, auction_title, message, formatted_bid)]
    additional = _send_additional_notifications(
        _secondary_attempts(channels, winner, winner_name, auction_title, message, formatted_bid),
        winner.id,
    )

    success = any(r["success"] for r in primary)
    result: dict[str, Any] = {
        "success": success,
        "auction_id": auction_id,
        "method": PRIMARY_CHANNEL,
        "recipient": winner.email,
        "message_id": primary[0].get("message_id"),
        "additional_channels": additional,
    }
    if not success:
        result["error"] = primary[0].get("error")
    return result


def get_ended_auctions_for_notification(db: Session, now: datetime | None = None) -> list[AuctionRoom]:
    """Ended rooms with a winner that have not reached winner_notified."""
    now = now or datetime.now(timezone.utc)
    return (
        db.query(AuctionRoom)
        .filter(
            AuctionRoom.status == AUCTION_STATUS_ENDED,
            AuctionRoom.winner_id.isnot(None),
            AuctionRoom.end_time < now,
        )
        .order_by(AuctionRoom.end_time.asc())
        .all()
    )


def process_single_auction_winner(
    db: Session,
    room: AuctionRoom,
    *,
    channels: WinnerChannels | None = None,
) -> dict[str, Any]:
    if not room.winner_id:
        return {"auction_id": room.id, "status": "skipped", "reason": "No winner found"}
    title = room.product.title if room.product is not None else room.id
    result = notify_winner(
        db, room.id, room.winner_id, title, room.current_highest_bid or 0, channels=channels
    )
    if not result["success"]:
        return {"auction_id": room.id, "status": "failed", "error": result.get("error") or "Notification failed"}
    advance_status(room, AUCTION_STATUS_WINNER_NOTIFIED)
    db.commit()
    return {
        "auction_id": room.id,
        "status": "success",
        "method": result["method"],
        "message_id": result.get("message_id"),
        "recipient": result.get("recipient"),
        "additional_channels": result["additional_channels"],
    }


def process_winner_notifications(
    db: Session,
    *,
    channels: WinnerChannels | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Retry sweep for rooms that ended but whose winner was never notified.
    Each room is isolated; returns {message, total_processed, success_count, failure_count, results}.
    """
    rooms = get_ended_auctions_for_notification(db, now)
    if not rooms:
        logger.debug("No ended auctions requiring winner notifications")
        return {"message": "No ended auctions requiring winner notifications", "total_processed": 0,
                "success_count": 0, "failure_count": 0, "results": []}

    room_ids = [r.id for r in rooms]
    results: list[dict[str, Any]] = []
    for room_id, room in zip(room_ids, rooms):
        try:
            results.append(process_single_auction_winner(db, room, channels=channels))
        except Exception as e:
            db.rollback()
            logger.exception("Error notifying winner for auction %s: %s", room_id, e)
            results.append({"auction_id": room_id, "status": "failed", "error": error_message(e)})

    success_count = sum(1 for r in results if r["status"] == "success")
    failure_count = sum(1 for r in results if r["status"] == "failed")
    logger.info(
        "Winner notification processing completed: %s success, %s failed", success_count, failure_count
    )
    return {
        "message": "Winner notification processing completed",
        "total_processed": len(rooms),
        "success_count": success_count,
        "failure_count": failure_count,
        "results": results,
    }
