#!/usr/bin/env python3
"""
Quick checks so the backend can start. Run from repo root or backend/:
  cd backend && python scripts/check_backend.py
"""
import os
import sys
from pathlib import Path

# Run from backend/
backend_dir = Path(__file__).resolve().parent.parent
os.chdir(backend_dir)
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def main():
    errors = []
    warnings = []

    # 1) .env
    env_file = backend_dir / ".env"
    if not env_file.exists():
        errors.append("backend/.env missing. Create it and set DATABASE_URL, FIREBASE_DATABASE_URL, EMAIL_USER, etc.")
    else:
        print("OK  .env exists")

    # 2) DB connection
    try:
        from sqlalchemy import text
        from app.db.session import engine
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("OK  Database connection (DATABASE_URL)")
    except Exception as e:
        errors.append(f"Database: {e}")
        print("FAIL Database:", e)

    # 3) Channels and live store (missing config degrades, does not block startup)
    from app.config import settings
    if not settings.firebase_database_url:
        warnings.append("FIREBASE_DATABASE_URL not set: expired auctions stay active and fail on every tick until configured.")
    if not (settings.email_user and settings.email_password):
        warnings.append("EMAIL_USER/EMAIL_PASSWORD not set: winner emails (mandatory channel) will fail and be retried.")
    if not (settings.twilio_account_sid and settings.twilio_auth_token and settings.twilio_phone_number):
        warnings.append("Twilio not configured: WhatsApp/SMS winner messages are skipped as failed.")
    for w in warnings:
        print("WARN", w)

    # 4) App import (catches missing deps, bad imports)
    try:
        from app.main import app  # noqa: F401
        print("OK  App import (app.main)")
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)

    if errors:
        print("\n---")
        for e in errors:
            print("•", e)
        print("\nThen start backend: cd backend && uvicorn app.main:app --reload --port 8000")
        return 1

    print("\nAll checks passed. Start with: cd backend && uvicorn app.main:app --reload --port 8000")
    return 0


if __name__ == "__main__":
    sys.exit(main())
