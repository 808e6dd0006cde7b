from app.models.auction_bid import AuctionBid
from app.models.auction_participant import AuctionParticipant
from app.models.auction_room import AuctionRoom
from app.models.product import Product
from app.models.user import User

__all__ = [
    "AuctionBid",
    "AuctionParticipant",
    "AuctionRoom",
    "Product",
    "User",
]
