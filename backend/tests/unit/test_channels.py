import json
from urllib.parse import parse_qs

import httpx

from app.config import settings
from app.services import email_notify, twilio_notify
from app.services.twilio_notify import TwilioClient, format_phone_number


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.started_tls = False
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, user, password):
        self.user = user

    def sendmail(self, from_addr, to_addrs, msg):
        self.sent.append((from_addr, to_addrs, msg))


class RefusingSMTP(FakeSMTP):
    def login(self, user, password):
        raise OSError("535 authentication failed")


def _email_settings(monkeypatch, user="auctions@example.com", password="app-pass"):
    monkeypatch.setattr(settings, "email_user", user)
    monkeypatch.setattr(settings, "email_password", password)
    monkeypatch.setattr(settings, "smtp_use_tls", True)


def test_send_email_without_credentials_skips_smtp(monkeypatch):
    _email_settings(monkeypatch, user="", password="")
    FakeSMTP.instances = []
    monkeypatch.setattr(email_notify.smtplib, "SMTP", FakeSMTP)

    result = email_notify.send_email("winner@example.com", "Hi", "body")

    assert result == {"success": False, "error": "Email credentials not configured"}
    assert FakeSMTP.instances == []


def test_send_email_success(monkeypatch):
    _email_settings(monkeypatch)
    FakeSMTP.instances = []
    monkeypatch.setattr(email_notify.smtplib, "SMTP", FakeSMTP)

    result = email_notify.send_email("winner@example.com", "You won", "Congrats", "<p>Congrats</p>")

    assert result["success"] is True
    assert result["message_id"]
    smtp = FakeSMTP.instances[0]
    assert smtp.started_tls is True
    from_addr, to_addrs, raw = smtp.sent[0]
    assert from_addr == "auctions@example.com"
    assert to_addrs == ["winner@example.com"]
    assert "Subject: You won" in raw


def test_send_email_smtp_error_is_returned(monkeypatch):
    _email_settings(monkeypatch)
    monkeypatch.setattr(email_notify.smtplib, "SMTP", RefusingSMTP)

    result = email_notify.send_email("winner@example.com", "You won", "Congrats")

    assert result["success"] is False
    assert "535" in result["error"]


def test_winner_html_escapes_user_text():
    html = email_notify.create_winner_notification_html("<b>Ali</b>", "Rice & Wheat", "1,500")
    assert "&lt;b&gt;Ali&lt;/b&gt;" in html
    assert "Rice &amp; Wheat" in html
    assert "Rs 1,500" in html


def test_format_phone_number():
    assert format_phone_number("+923001234567") == "+923001234567"
    assert format_phone_number("03001234567", "+92") == "+923001234567"
    assert format_phone_number("300 1234567", "+92") == "+923001234567"


def _twilio(handler):
    return TwilioClient(
        account_sid="AC123",
        auth_token="secret",
        from_number="+14155550100",
        transport=httpx.MockTransport(handler),
    )


def test_twilio_sms_posts_form(monkeypatch):
    monkeypatch.setattr(settings, "default_country_code", "+92")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["form"] = parse_qs(request.content.decode())
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(201, json={"sid": "SM1"})

    result = _twilio(handler).send_sms("03001234567", "You won")

    assert result == {"success": True, "sid": "SM1"}
    assert seen["url"].endswith("/Accounts/AC123/Messages.json")
    assert seen["form"] == {"To": ["+923001234567"], "From": ["+14155550100"], "Body": ["You won"]}
    assert seen["auth"].startswith("Basic ")


def test_twilio_whatsapp_template(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "WA1"})

    result = _twilio(handler).send_whatsapp(
        "+923001234567", content_sid="HX1", content_variables={"1": "Ali", "2": "Rice", "3": "1,500"}
    )

    assert result["success"] is True
    assert seen["form"]["To"] == ["whatsapp:+923001234567"]
    assert seen["form"]["From"] == ["whatsapp:+14155550100"]
    assert seen["form"]["ContentSid"] == ["HX1"]
    assert json.loads(seen["form"]["ContentVariables"][0]) == {"1": "Ali", "2": "Rice", "3": "1,500"}
    assert "Body" not in seen["form"]


def test_twilio_error_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "Invalid 'To' Phone Number"})

    result = _twilio(handler).send_sms("+920000", "hi")

    assert result["success"] is False
    assert "400" in result["error"]
    assert "Invalid 'To' Phone Number" in result["error"]


def test_twilio_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = _twilio(handler).send_sms("+923001234567", "hi")

    assert result["success"] is False
    assert "connection refused" in result["error"]


def test_twilio_unconfigured_sends_nothing(monkeypatch):
    monkeypatch.setattr(settings, "twilio_account_sid", "")
    monkeypatch.setattr(settings, "twilio_auth_token", "")
    monkeypatch.setattr(settings, "twilio_phone_number", "")
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(201, json={})

    client = TwilioClient(transport=httpx.MockTransport(handler))

    assert client.is_configured() is False
    assert client.send_sms("+923001234567", "hi")["success"] is False
    assert calls == []


def test_winner_whatsapp_uses_freeform_without_template(monkeypatch):
    monkeypatch.setattr(settings, "whatsapp_winner_template_sid", "")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "WA2"})

    monkeypatch.setattr(twilio_notify, "default_client", _twilio(handler))

    result = twilio_notify.send_whatsapp_winner_notification("+923001234567", "Ali", "Rice", "1,500")

    assert result["success"] is True
    assert "Rice" in seen["form"]["Body"][0]
    assert "Rs 1,500" in seen["form"]["Body"][0]
