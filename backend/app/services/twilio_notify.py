"""
Send WhatsApp and SMS messages via the Twilio REST API.
Requires TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, TWILIO_PHONE_NUMBER in env.
If not configured, every send returns {"success": False, "error": ...} without a request.
"""
import json
import logging
from typing import Any

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


def format_phone_number(number: str, country_code: str | None = None) -> str:
    """E.164-ish: keep '+...' as is, else drop a leading 0 and prefix the default country code."""
    number = (number or "").strip().replace(" ", "")
    if number.startswith("+"):
        return number
    code = country_code or settings.default_country_code
    return f"{code}{number[1:] if number.startswith('0') else number}"


class TwilioClient:
    """Minimal Messages.json client. transport is injectable for tests."""

    def __init__(
        self,
        *,
        account_sid: str | None = None,
        auth_token: str | None = None,
        from_number: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.account_sid = (account_sid or settings.twilio_account_sid).strip()
        self.auth_token = (auth_token or settings.twilio_auth_token).strip()
        self.from_number = (from_number or settings.twilio_phone_number).strip()
        self.timeout = timeout if timeout is not None else settings.external_call_timeout_seconds
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    def create_message(self, data: dict[str, str]) -> dict[str, Any]:
        """POST one message. Returns {"success": True, "sid": ...} or {"success": False, "error": ...}."""
        if not self.is_configured():
            return {"success": False, "error": "Twilio credentials not configured"}
        url = f"{TWILIO_API_BASE}/Accounts/{self.account_sid}/Messages.json"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as c:
                r = c.post(url, data=data, auth=(self.account_sid, self.auth_token))
        except httpx.HTTPError as e:
            return {"success": False, "error": f"Twilio request failed: {e}"}
        try:
            body = r.json() if r.content else {}
        except ValueError:
            body = {}
        if not r.is_success:
            detail = body.get("message") if isinstance(body, dict) else None
            return {"success": False, "error": f"Twilio error {r.status_code}: {detail or r.text[:200]}"}
        return {"success": True, "sid": body.get("sid")}

    def send_sms(self, to: str, message: str) -> dict[str, Any]:
        return self.create_message({"To": format_phone_number(to), "From": self.from_number, "Body": message})

    def send_whatsapp(
        self,
        to: str,
        message: str = "",
        *,
        content_sid: str | None = None,
        content_variables: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Template message when content_sid is given (required outside the 24h session window), else freeform."""
        data = {
            "To": f"whatsapp:{format_phone_number(to)}",
            "From": f"whatsapp:{self.from_number}",
        }
        if content_sid:
            data["ContentSid"] = content_sid
            data["ContentVariables"] = json.dumps(content_variables or {})
        else:
            data["Body"] = message
        return self.create_message(data)


default_client = TwilioClient()


def send_sms(to: str, message: str) -> dict[str, Any]:
    result = default_client.send_sms(to, message)
    if not result["success"]:
        logger.warning("SMS to %s failed: %s", to, result.get("error"))
    return result


def send_whatsapp_winner_notification(
    to: str,
    winner_name: str,
    product_name: str,
    bid_amount: str,
) -> dict[str, Any]:
    """Winner WhatsApp via the approved template when WHATSAPP_WINNER_TEMPLATE_SID is set, else freeform."""
    template_sid = settings.whatsapp_winner_template_sid
    if template_sid:
        result = default_client.send_whatsapp(
            to,
            content_sid=template_sid,
            content_variables={"1": winner_name, "2": product_name, "3": bid_amount},
        )
    else:
        message = (
            f"Congratulations {winner_name}! You won the auction for \"{product_name}\" "
            f"with a bid of Rs {bid_amount}. Please contact us to complete your purchase."
        )
        result = default_client.send_whatsapp(to, message)
    if not result["success"]:
        logger.warning("WhatsApp winner notification to %s failed: %s", to, result.get("error"))
    return result
