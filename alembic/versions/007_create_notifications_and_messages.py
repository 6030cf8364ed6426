"""007: create notifications and messages tables

Revision ID: 007
Revises: 006
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # related_* are weak references so a notification survives item deletion.
    op.execute("""
        CREATE TABLE notifications (
            id                      UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id                 UUID            NOT NULL REFERENCES users (id),
            type                    VARCHAR(30)     NOT NULL,
            title                   VARCHAR(200)    NOT NULL,
            message                 TEXT            NOT NULL,
            related_item_id         UUID,
            related_transaction_id  UUID,
            is_read                 BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_notifications_type CHECK (
                type IN ('AUCTION_ENDED', 'ITEM_SOLD', 'TRANSACTION_COMPLETED',
                         'TRANSACTION_CANCELLED', 'ITEM_REMOVED', 'MESSAGE')
            )
        );
    """)
    op.execute("CREATE INDEX idx_notifications_user ON notifications (user_id, created_at DESC);")

    op.execute("""
        CREATE TABLE messages (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            sender_id       UUID            NOT NULL REFERENCES users (id),
            receiver_id     UUID            NOT NULL REFERENCES users (id),
            content         TEXT            NOT NULL,
            item_id         UUID,
            is_read         BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_messages_content      CHECK (char_length(content) BETWEEN 1 AND 1000),
            CONSTRAINT ck_messages_not_self     CHECK (sender_id <> receiver_id)
        );
    """)
    op.execute("CREATE INDEX idx_messages_receiver ON messages (receiver_id, created_at DESC);")
    op.execute("CREATE INDEX idx_messages_sender ON messages (sender_id, created_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS messages CASCADE;")
    op.execute("DROP TABLE IF EXISTS notifications CASCADE;")
