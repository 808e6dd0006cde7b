import pytest

from app.core.errors import ReconciliationError
from app.models.auction_bid import AuctionBid
from app.services.auction.reconcile import reconcile_bids
from app.services.live_store.types import LiveBid
from tests.fixtures.auctions import BASE_TIME, make_room


def _bids():
    return [
        LiveBid(id="b1", user_name="A", amount=1200, bidder_id="A", timestamp=BASE_TIME),
        LiveBid(id="b2", user_name="B", amount=1500, bidder_id="B", timestamp=BASE_TIME),
        LiveBid(id="b3", user_name="C", amount=1400, bidder_id="C", timestamp=BASE_TIME),
    ]


def test_reconcile_inserts_new_bids_and_flags_exact_highest(db):
    make_room(db, "r1")

    inserted = reconcile_bids(db, "r1", _bids(), 1500)

    assert inserted == 3
    rows = {b.id: b for b in db.query(AuctionBid).all()}
    assert rows["b2"].is_winning_bid is True
    assert rows["b1"].is_winning_bid is False
    assert rows["b3"].is_winning_bid is False
    assert rows["b1"].bidder_name == "A"
    assert rows["b1"].auction_room_id == "r1"


def test_reconcile_is_idempotent(db):
    make_room(db, "r1")

    reconcile_bids(db, "r1", _bids(), 1500)
    second = reconcile_bids(db, "r1", _bids(), 1500)

    assert second == 0
    assert db.query(AuctionBid).count() == 3


def test_reconcile_leaves_existing_rows_untouched(db):
    make_room(db, "r1")
    reconcile_bids(db, "r1", _bids()[:1], None)

    changed = [LiveBid(id="b1", user_name="A", amount=9999, bidder_id="A", timestamp=BASE_TIME)]
    reconcile_bids(db, "r1", changed, 9999)

    row = db.get(AuctionBid, "b1")
    assert row.amount == 1200
    assert row.is_winning_bid is False


def test_reconcile_duplicate_ids_in_one_batch_insert_once(db):
    make_room(db, "r1")
    bid = _bids()[0]

    assert reconcile_bids(db, "r1", [bid, bid], None) == 1


def test_reconcile_does_not_round_amounts(db):
    make_room(db, "r1")

    reconcile_bids(db, "r1", [LiveBid(id="x", amount=1250.75, bidder_id="A")], 1250.75)

    row = db.get(AuctionBid, "x")
    assert row.amount == 1250.75
    assert row.is_winning_bid is True


def test_reconcile_missing_bidder_falls_back_to_unknown(db):
    make_room(db, "r1")

    reconcile_bids(db, "r1", [LiveBid(id="x", amount=1100)], None)

    assert db.get(AuctionBid, "x").bidder_id == "unknown"


def test_reconcile_persistence_error_aborts_batch(db):
    make_room(db, "r1")
    bids = [
        LiveBid(id="ok", amount=1100, bidder_id="A"),
        LiveBid(id="bad", amount=None, bidder_id="B"),  # NOT NULL violation
        LiveBid(id="never", amount=1300, bidder_id="C"),
    ]

    with pytest.raises(ReconciliationError) as exc:
        reconcile_bids(db, "r1", bids, None)

    assert exc.value.room_id == "r1"
    assert exc.value.bid_id == "bad"
    assert db.get(AuctionBid, "never") is None
