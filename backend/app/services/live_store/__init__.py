"""Live bid store adapter: fetch_live_auction_snapshot(room_id) -> LiveAuctionSnapshot | LiveAuctionNotFound."""
from app.services.live_store.client import LiveStoreClient
from app.services.live_store.config import LiveStoreConfig
from app.services.live_store.types import LiveAuctionSnapshot, LiveBid, parse_timestamp

default_client = LiveStoreClient()


def fetch_live_auction_snapshot(room_id: str) -> LiveAuctionSnapshot:
    """Read auctions/{room_id} from the live store with the default client."""
    return default_client.fetch_live_auction_snapshot(room_id)


__all__ = [
    "LiveAuctionSnapshot",
    "LiveBid",
    "LiveStoreClient",
    "LiveStoreConfig",
    "default_client",
    "fetch_live_auction_snapshot",
    "parse_timestamp",
]
