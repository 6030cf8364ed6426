"""004: create auctions and bids tables

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # No ON DELETE CASCADE: admin deletion removes children explicitly.
    op.execute("""
        CREATE TABLE auctions (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            item_id         UUID            NOT NULL REFERENCES items (id),
            start_price     BIGINT          NOT NULL,
            current_price   BIGINT          NOT NULL,
            reserve_price   BIGINT          NOT NULL,
            end_time        TIMESTAMPTZ     NOT NULL,
            is_active       BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_auctions_item_id          UNIQUE (item_id),
            CONSTRAINT ck_auctions_start_price      CHECK (start_price > 0),
            CONSTRAINT ck_auctions_current_gte_start CHECK (current_price >= start_price),
            CONSTRAINT ck_auctions_reserve_price    CHECK (reserve_price > 0)
        );
    """)
    op.execute("""
        CREATE INDEX idx_auctions_sweep
        ON auctions (end_time)
        WHERE is_active = TRUE;
    """)
    op.execute("""
        CREATE TRIGGER trg_auctions_updated_at
            BEFORE UPDATE ON auctions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    # Bids are append-only.
    op.execute("""
        CREATE TABLE bids (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            auction_id      UUID            NOT NULL REFERENCES auctions (id),
            bidder_id       UUID            NOT NULL REFERENCES users (id),
            amount          BIGINT          NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_bids_amount CHECK (amount > 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_bids_auction_amount ON bids (auction_id, amount DESC, created_at ASC);"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bids CASCADE;")
    op.execute("DROP TABLE IF EXISTS auctions CASCADE;")
