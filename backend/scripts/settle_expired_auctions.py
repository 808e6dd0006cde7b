#!/usr/bin/env python3
"""Run one settlement pass (and optionally the winner notification sweep) without the API server.
Run from backend: python scripts/settle_expired_auctions.py [--notify]
"""
import argparse
import json
import logging
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from app.db.session import SessionLocal
from app.services.auction.settlement import check_expired_auctions
from app.services.winner_notify_service import process_winner_notifications


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--notify", action="store_true", help="also retry pending winner notifications")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    db = SessionLocal()
    try:
        out = {"settlement": check_expired_auctions(db)}
        if args.notify:
            out["winner_notifications"] = process_winner_notifications(db)
        print(json.dumps(out, indent=2, default=str))
    except Exception as e:
        db.rollback()
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
