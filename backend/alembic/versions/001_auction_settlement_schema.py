"""Users, products (with environment) and the auction room system: rooms, bids, participants."""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("business_name", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("whatsapp", sa.String(32), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id", onupdate="CASCADE"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.Column("unit", sa.String(32), nullable=True),
        sa.Column("environment", sa.String(16), nullable=False, server_default="MARKETPLACE"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_products_user_id", "products", ["user_id"])

    op.create_table(
        "auction_rooms",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "product_id",
            sa.String(64),
            sa.ForeignKey("products.id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("starting_bid", sa.Float(), nullable=False),
        sa.Column("current_highest_bid", sa.Float(), nullable=True),
        sa.Column("current_highest_bidder_id", sa.String(64), nullable=True),
        sa.Column("winner_id", sa.String(64), nullable=True),
        sa.Column("reserve_price", sa.Float(), nullable=True, server_default="0"),
        sa.Column("min_bid_increment", sa.Float(), nullable=False, server_default="50"),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default="scheduled"),
        sa.Column("total_bids", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_participants", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_reserve_reached", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("buy_now_price", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("end_time > start_time", name="ck_auction_rooms_end_after_start"),
    )
    op.create_index("ix_auction_rooms_status_end_time", "auction_rooms", ["status", "end_time"])

    op.create_table(
        "auction_bids",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column(
            "auction_room_id",
            sa.String(64),
            sa.ForeignKey("auction_rooms.id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        ),
        sa.Column("bidder_id", sa.String(64), nullable=False),
        sa.Column("bidder_name", sa.String(255), nullable=True),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("is_winning_bid", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("previous_bid_amount", sa.Float(), nullable=True),
        sa.Column("bid_type", sa.String(32), nullable=False, server_default="regular"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_auction_bids_room_timestamp", "auction_bids", ["auction_room_id", "timestamp"])
    op.create_index("ix_auction_bids_bidder_id", "auction_bids", ["bidder_id"])

    op.create_table(
        "auction_participants",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "auction_room_id",
            sa.String(64),
            sa.ForeignKey("auction_rooms.id", ondelete="CASCADE", onupdate="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("user_name", sa.String(255), nullable=True),
        sa.Column("first_joined_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("total_bids_placed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("highest_bid_amount", sa.Float(), nullable=True),
        sa.Column("is_winner", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("has_left_room", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.UniqueConstraint("auction_room_id", "user_id", name="uq_auction_participants_room_user"),
    )
    op.create_index("ix_auction_participants_user_id", "auction_participants", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_auction_participants_user_id", table_name="auction_participants")
    op.drop_table("auction_participants")
    op.drop_index("ix_auction_bids_bidder_id", table_name="auction_bids")
    op.drop_index("ix_auction_bids_room_timestamp", table_name="auction_bids")
    op.drop_table("auction_bids")
    op.drop_index("ix_auction_rooms_status_end_time", table_name="auction_rooms")
    op.drop_table("auction_rooms")
    op.drop_index("ix_products_user_id", table_name="products")
    op.drop_table("products")
    op.drop_table("users")
