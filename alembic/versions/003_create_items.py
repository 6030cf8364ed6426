"""003: create items table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE items (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            title           VARCHAR(100)    NOT NULL,
            description     TEXT            NOT NULL,
            price           BIGINT,
            images          TEXT[]          NOT NULL,
            category        VARCHAR(50)     NOT NULL,
            condition       VARCHAR(50)     NOT NULL,
            listing_type    VARCHAR(10)     NOT NULL DEFAULT 'REGULAR',
            status          VARCHAR(10)     NOT NULL DEFAULT 'ACTIVE',
            seller_id       UUID            NOT NULL REFERENCES users (id),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_items_listing_type    CHECK (listing_type IN ('REGULAR', 'AUCTION')),
            CONSTRAINT ck_items_status          CHECK (status IN ('ACTIVE', 'SOLD', 'CANCELLED')),
            CONSTRAINT ck_items_price_by_type   CHECK (
                (listing_type = 'REGULAR' AND price IS NOT NULL AND price > 0) OR
                (listing_type = 'AUCTION' AND price IS NULL)
            ),
            CONSTRAINT ck_items_images_count    CHECK (cardinality(images) BETWEEN 1 AND 5)
        );
    """)
    op.execute(
        "CREATE INDEX idx_items_active_feed ON items (created_at DESC, id DESC) "
        "WHERE status = 'ACTIVE';"
    )
    op.execute("CREATE INDEX idx_items_seller ON items (seller_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_items_updated_at
            BEFORE UPDATE ON items
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS items CASCADE;")
