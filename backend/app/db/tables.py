"""
Single source of truth for database tables that exist after migrations.

Use these names when writing raw SQL (e.g. TRUNCATE). Alembic env.py asserts the
registered models match this list.
"""
# All tables that exist in the DB. Must match models and migrations.
ALL_TABLE_NAMES = (
    "users",
    "products",
    "auction_rooms",
    "auction_bids",
    "auction_participants",
)
