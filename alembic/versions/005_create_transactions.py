"""005: create transactions table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # item_id is a weak reference (no FK): the sale record outlives an admin-deleted item.
    op.execute("""
        CREATE TABLE transactions (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            item_id             UUID            NOT NULL,
            buyer_id            UUID            NOT NULL REFERENCES users (id),
            seller_id           UUID            NOT NULL REFERENCES users (id),
            amount              BIGINT          NOT NULL,
            commission_amount   BIGINT          NOT NULL DEFAULT 0,
            payment_method      VARCHAR(20)     NOT NULL DEFAULT 'CASH_ON_MEET',
            status              VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            payment_reference   VARCHAR(255),
            meeting_scheduled   TIMESTAMPTZ,
            completed_at        TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_amount           CHECK (amount > 0),
            CONSTRAINT ck_transactions_commission       CHECK (
                commission_amount >= 0 AND commission_amount <= amount
            ),
            CONSTRAINT ck_transactions_payment_method   CHECK (
                payment_method IN ('CASH_ON_MEET', 'CARD')
            ),
            CONSTRAINT ck_transactions_status           CHECK (
                status IN ('PENDING', 'FUNDS_HELD', 'COMPLETED', 'CANCELLED')
            ),
            CONSTRAINT ck_transactions_not_self         CHECK (buyer_id <> seller_id),
            CONSTRAINT ck_transactions_completed_at     CHECK (
                (status = 'COMPLETED') = (completed_at IS NOT NULL)
            )
        );
    """)
    # At most one open sale per item.
    op.execute("""
        CREATE UNIQUE INDEX uq_transactions_open_item
        ON transactions (item_id)
        WHERE status IN ('PENDING', 'FUNDS_HELD');
    """)
    op.execute("CREATE INDEX idx_transactions_buyer ON transactions (buyer_id, created_at DESC);")
    op.execute("CREATE INDEX idx_transactions_seller ON transactions (seller_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_transactions_updated_at
            BEFORE UPDATE ON transactions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
