"""006: create reports table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE reports (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            item_id         UUID            NOT NULL REFERENCES items (id),
            reporter_id     UUID            NOT NULL REFERENCES users (id),
            reason          VARCHAR(20)     NOT NULL,
            description     TEXT,
            status          VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_reports_item_reporter UNIQUE (item_id, reporter_id),
            CONSTRAINT ck_reports_reason        CHECK (
                reason IN ('INAPPROPRIATE', 'SCAM', 'FAKE', 'SPAM', 'OTHER')
            ),
            CONSTRAINT ck_reports_status        CHECK (
                status IN ('PENDING', 'REVIEWED', 'RESOLVED', 'DISMISSED')
            )
        );
    """)
    op.execute("CREATE INDEX idx_reports_status ON reports (status, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_reports_updated_at
            BEFORE UPDATE ON reports
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS reports CASCADE;")
