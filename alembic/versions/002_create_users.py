"""002: create users table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE users (
            id                          UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            email                       VARCHAR(255)    NOT NULL,
            name                        VARCHAR(100)    NOT NULL,
            room_number                 VARCHAR(20),
            is_active                   BOOLEAN         NOT NULL DEFAULT TRUE,
            auctions_used_this_month    INT             NOT NULL DEFAULT 0,
            auction_limit_reset_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_email               UNIQUE (email),
            CONSTRAINT ck_users_auctions_used_gte_0 CHECK (auctions_used_this_month >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE users IS 'Dorm residents; accounts are provisioned by the auth service';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
