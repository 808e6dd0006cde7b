"""Live bid store client: read-only REST lookup of auctions/{room_id}. Never writes."""
import logging

import httpx

from app.core.errors import LiveAuctionNotFound, LiveStoreError
from app.services.live_store.config import LiveStoreConfig
from app.services.live_store.types import LiveAuctionSnapshot

logger = logging.getLogger(__name__)


class LiveStoreClient:
    """Firebase Realtime Database reader for live auction rooms."""

    def __init__(self, config: LiveStoreConfig | None = None, *, transport: httpx.BaseTransport | None = None) -> None:
        self._config = config or LiveStoreConfig()
        self._transport = transport

    def fetch_live_auction_snapshot(self, room_id: str) -> LiveAuctionSnapshot:
        """
        Read the live snapshot for one room. Side-effect free.
        Raises LiveAuctionNotFound when the key path is empty, LiveStoreError on transport/HTTP failure.
        """
        if not self._config.is_configured():
            raise LiveStoreError("Live store not configured. Add FIREBASE_DATABASE_URL to .env.")
        url = self._config.room_url(room_id)
        try:
            with httpx.Client(timeout=self._config.timeout, transport=self._transport) as c:
                r = c.get(url, params=self._config.params())
        except httpx.HTTPError as e:
            raise LiveStoreError(f"Live store request failed for room {room_id}: {e}") from e
        if not r.is_success:
            raise LiveStoreError(f"Live store error {r.status_code} for room {room_id}: {r.text[:500] if r.text else ''}")
        try:
            raw = r.json() if r.content else None
        except ValueError as e:
            raise LiveStoreError(f"Live store returned invalid JSON for room {room_id}") from e
        if not raw or not isinstance(raw, dict):
            logger.debug("No live snapshot for room %s", room_id)
            raise LiveAuctionNotFound(room_id)
        return LiveAuctionSnapshot.from_raw(room_id, raw)
