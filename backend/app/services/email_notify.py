"""
Send auction-winner emails via SMTP (Google Gmail or other).
Set EMAIL_USER, EMAIL_PASSWORD (and SMTP_HOST/SMTP_PORT for non-Gmail) in .env. Use a Gmail App Password.
"""
import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import Any

from app.config import settings

logger = logging.getLogger(__name__)


def _from_address() -> str:
    user = (settings.email_user or "").strip()
    return formataddr((settings.email_from_name or "Aarath Auctions", user or "noreply@localhost"))


def send_email(
    to_email: str,
    subject: str,
    message: str,
    html_message: str | None = None,
) -> dict[str, Any]:
    """
    Send one email (plain text + HTML alternative).
    Returns {"success": True, "message_id": ...} or {"success": False, "error": ...}. Never raises.
    """
    to_email = (to_email or "").strip()
    if not to_email:
        return {"success": False, "error": "Recipient email is required"}
    user = (settings.email_user or "").strip()
    password = (settings.email_password or "").strip()
    if not user or not password:
        logger.debug("EMAIL_USER or EMAIL_PASSWORD not set; skipping email")
        return {"success": False, "error": "Email credentials not configured"}
    message_id = make_msgid(domain=user.rsplit("@", 1)[-1] if "@" in user else None)
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = _from_address()
    msg["To"] = to_email
    msg["Message-ID"] = message_id
    msg.attach(MIMEText(message, "plain", "utf-8"))
    body_html = html_message or "<p>{}</p>".format(html.escape(message).replace("\n", "<br>"))
    msg.attach(MIMEText(body_html, "html", "utf-8"))
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.external_call_timeout_seconds) as server:
            if settings.smtp_use_tls:
                server.starttls()
            server.login(user, password)
            server.sendmail(user, [to_email], msg.as_string())
        logger.info("Email sent to %s (%s)", to_email, message_id)
        return {"success": True, "message_id": message_id}
    except Exception as e:
        logger.error("Failed to send email to %s: %s", to_email, e)
        return {"success": False, "error": str(e) or e.__class__.__name__}


def create_winner_notification_html(winner_name: str, auction_title: str, winning_bid: str) -> str:
    """HTML body for the winner email. winning_bid is already formatted (e.g. 1,500)."""
    name = html.escape(winner_name)
    title = html.escape(auction_title)
    bid = html.escape(winning_bid)
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Congratulations! You Won the Auction</title>
  <style>
    body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .header {{ background: #5a67d8; color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }}
    .content {{ background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }}
    .highlight {{ background: #e8f5e8; padding: 15px; border-left: 4px solid #4caf50; margin: 20px 0; }}
    .footer {{ text-align: center; padding: 20px; color: #666; font-size: 14px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>Congratulations {name}!</h1>
      <p>You have won the auction!</p>
    </div>
    <div class="content">
      <div class="highlight">
        <h2>Auction Won: {title}</h2>
        <p><strong>Your Winning Bid: Rs {bid}</strong></p>
      </div>
      <h3>Next Steps</h3>
      <ul>
        <li>Contact us to arrange payment and delivery</li>
        <li><strong>Payment deadline: 24 hours from now</strong></li>
      </ul>
      <p>Thank you for using Aarath!</p>
    </div>
    <div class="footer">
      <p>This email was sent because you won an auction on Aarath.</p>
    </div>
  </div>
</body>
</html>
"""
