from app.services.auction.reconcile import reconcile_bids
from app.services.auction.settlement import (
    advance_status,
    check_expired_auctions,
    get_expired_auctions,
    process_expired_auction,
    release_stranded_products,
    transfer_product_to_marketplace,
)
from app.services.auction.stats import AuctionStats, compute_stats

__all__ = [
    "AuctionStats",
    "advance_status",
    "check_expired_auctions",
    "compute_stats",
    "get_expired_auctions",
    "process_expired_auction",
    "release_stranded_products",
    "reconcile_bids",
    "transfer_product_to_marketplace",
]
