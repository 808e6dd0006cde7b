"""
Centralized constants for the auction lifecycle and scheduler.

Change job IDs, statuses or intervals here instead of scattering literals across main and routes.
Intervals come from settings (env-driven).
"""
from app.config import settings

# Auction room status. Transitions only move forward in this order.
AUCTION_STATUS_SCHEDULED = "scheduled"
AUCTION_STATUS_ACTIVE = "active"
AUCTION_STATUS_ENDED = "ended"
AUCTION_STATUS_WINNER_NOTIFIED = "winner_notified"
AUCTION_STATUS_ORDER = (
    AUCTION_STATUS_SCHEDULED,
    AUCTION_STATUS_ACTIVE,
    AUCTION_STATUS_ENDED,
    AUCTION_STATUS_WINNER_NOTIFIED,
)

# Product environment: where a listing lives
PRODUCT_ENV_MARKETPLACE = "MARKETPLACE"
PRODUCT_ENV_AUCTION = "AUCTION"

# Bid defaults
BID_TYPE_REGULAR = "regular"
UNKNOWN_BIDDER_ID = "unknown"
DEFAULT_WINNER_NAME = "Winner"

# Scheduler job IDs (must match ids used in AuctionJobManager.initialize)
AUCTION_CHECK_JOB_ID = "check_expired_auctions"
WINNER_NOTIFICATION_JOB_ID = "winner_notifications"
AUCTION_CHECK_INTERVAL_SECONDS = settings.auction_check_interval_seconds
WINNER_NOTIFICATION_INTERVAL_SECONDS = settings.winner_notification_interval_seconds
