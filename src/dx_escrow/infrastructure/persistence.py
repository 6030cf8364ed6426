"""TransactionRepository — concrete implementation of TransactionRepositoryProtocol.

All queries use raw text() SQL (no ORM).

Concurrency:
  - mark_item_sold is the purchase gate: only one of N concurrent buyers gets
    the ACTIVE -> SOLD row back; the rest see None.
  - A partial unique index on transactions(item_id) WHERE status IN
    ('PENDING', 'FUNDS_HELD') backs that up at the storage level.
  - transition_status only matches the expected prior status, so a second
    confirm (or a confirm racing a cancel) updates nothing.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_escrow.domain.models import PurchaseTarget, Transaction

_TXN_COLUMNS = """
    t.id, t.item_id, t.buyer_id, t.seller_id, t.amount, t.commission_amount,
    t.payment_method, t.status, t.payment_reference, t.meeting_scheduled,
    t.completed_at, t.created_at, t.updated_at
"""

# ---------------------------------------------------------------------------
# SQL: reads
# ---------------------------------------------------------------------------

_GET_PURCHASE_TARGET_SQL = text("""
    SELECT i.id AS item_id, i.seller_id, i.title, i.status, i.listing_type, i.price,
           a.id AS auction_id, a.current_price AS auction_current_price,
           a.is_active AS auction_is_active
    FROM items i
    LEFT JOIN auctions a ON a.item_id = i.id
    WHERE i.id = CAST(:item_id AS UUID)
""")

_GET_TRANSACTION_SQL = text(f"""
    SELECT {_TXN_COLUMNS}, i.title AS item_title
    FROM transactions t
    LEFT JOIN items i ON i.id = t.item_id
    WHERE t.id = CAST(:transaction_id AS UUID)
""")

_LIST_FOR_USER_SQL = text(f"""
    SELECT {_TXN_COLUMNS}, i.title AS item_title
    FROM transactions t
    LEFT JOIN items i ON i.id = t.item_id
    WHERE
        (
            (CAST(:role AS TEXT) IS NULL
                AND (t.buyer_id = CAST(:user_id AS UUID) OR t.seller_id = CAST(:user_id AS UUID)))
            OR (CAST(:role AS TEXT) = 'buyer' AND t.buyer_id = CAST(:user_id AS UUID))
            OR (CAST(:role AS TEXT) = 'seller' AND t.seller_id = CAST(:user_id AS UUID))
        )
    ORDER BY t.created_at DESC, t.id DESC
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# SQL: conditional mutations
# ---------------------------------------------------------------------------

_MARK_ITEM_SOLD_SQL = text("""
    UPDATE items
    SET status = 'SOLD',
        updated_at = NOW()
    WHERE id = CAST(:item_id AS UUID)
      AND status = 'ACTIVE'
    RETURNING id AS item_id, seller_id, title, status, listing_type, price
""")

_DEACTIVATE_AUCTION_SQL = text("""
    UPDATE auctions
    SET is_active = FALSE,
        updated_at = NOW()
    WHERE item_id = CAST(:item_id AS UUID)
    RETURNING current_price
""")

_REACTIVATE_AUCTION_SQL = text("""
    UPDATE auctions a
    SET is_active = TRUE,
        updated_at = NOW()
    FROM items i
    WHERE a.item_id = CAST(:item_id AS UUID)
      AND i.id = a.item_id
      AND i.listing_type = 'AUCTION'
""")

_RESTORE_ITEM_ACTIVE_SQL = text("""
    UPDATE items
    SET status = 'ACTIVE',
        updated_at = NOW()
    WHERE id = CAST(:item_id AS UUID)
      AND status = 'SOLD'
""")

_INSERT_TRANSACTION_SQL = text("""
    INSERT INTO transactions (item_id, buyer_id, seller_id, amount, commission_amount,
                              payment_method, status, payment_reference,
                              meeting_scheduled, created_at)
    VALUES (CAST(:item_id AS UUID), CAST(:buyer_id AS UUID), CAST(:seller_id AS UUID),
            :amount, :commission_amount, :payment_method, :status, :payment_reference,
            :meeting_scheduled, :now)
    RETURNING id, item_id, buyer_id, seller_id, amount, commission_amount,
              payment_method, status, payment_reference, meeting_scheduled,
              completed_at, created_at, updated_at
""")

_TRANSITION_STATUS_SQL = text("""
    UPDATE transactions
    SET status = :to_status,
        completed_at = COALESCE(CAST(:completed_at AS TIMESTAMPTZ), completed_at),
        updated_at = NOW()
    WHERE id = CAST(:transaction_id AS UUID)
      AND status = :from_status
    RETURNING id, item_id, buyer_id, seller_id, amount, commission_amount,
              payment_method, status, payment_reference, meeting_scheduled,
              completed_at, created_at, updated_at
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_transaction(row: Any) -> Transaction:
    return Transaction(
        id=str(row.id),
        item_id=str(row.item_id),
        buyer_id=str(row.buyer_id),
        seller_id=str(row.seller_id),
        amount=row.amount,
        commission_amount=row.commission_amount,
        payment_method=row.payment_method,
        status=row.status,
        created_at=row.created_at,
        payment_reference=row.payment_reference,
        meeting_scheduled=row.meeting_scheduled,
        completed_at=row.completed_at,
        updated_at=row.updated_at,
        item_title=getattr(row, "item_title", None),
    )


def _row_to_target(row: Any) -> PurchaseTarget:
    auction_id = getattr(row, "auction_id", None)
    return PurchaseTarget(
        item_id=str(row.item_id),
        seller_id=str(row.seller_id),
        title=row.title,
        status=row.status,
        listing_type=row.listing_type,
        price=row.price,
        auction_id=str(auction_id) if auction_id is not None else None,
        auction_current_price=getattr(row, "auction_current_price", None),
        auction_is_active=getattr(row, "auction_is_active", None),
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class TransactionRepository:
    async def get_purchase_target(
        self, db: AsyncSession, item_id: str
    ) -> PurchaseTarget | None:
        result = await db.execute(_GET_PURCHASE_TARGET_SQL, {"item_id": item_id})
        row = result.fetchone()
        return _row_to_target(row) if row else None

    async def mark_item_sold(self, db: AsyncSession, item_id: str) -> PurchaseTarget | None:
        result = await db.execute(_MARK_ITEM_SOLD_SQL, {"item_id": item_id})
        row = result.fetchone()
        return _row_to_target(row) if row else None

    async def deactivate_auction(self, db: AsyncSession, item_id: str) -> int | None:
        result = await db.execute(_DEACTIVATE_AUCTION_SQL, {"item_id": item_id})
        row = result.fetchone()
        return row.current_price if row else None

    async def reactivate_auction(self, db: AsyncSession, item_id: str) -> bool:
        result = await db.execute(_REACTIVATE_AUCTION_SQL, {"item_id": item_id})
        return result.rowcount > 0

    async def restore_item_active(self, db: AsyncSession, item_id: str) -> bool:
        result = await db.execute(_RESTORE_ITEM_ACTIVE_SQL, {"item_id": item_id})
        return result.rowcount > 0

    async def insert_transaction(
        self,
        db: AsyncSession,
        item_id: str,
        buyer_id: str,
        seller_id: str,
        amount: int,
        commission_amount: int,
        payment_method: str,
        status: str,
        payment_reference: str | None,
        meeting_scheduled: datetime | None,
        now: datetime,
    ) -> Transaction:
        result = await db.execute(
            _INSERT_TRANSACTION_SQL,
            {
                "item_id": item_id,
                "buyer_id": buyer_id,
                "seller_id": seller_id,
                "amount": amount,
                "commission_amount": commission_amount,
                "payment_method": payment_method,
                "status": status,
                "payment_reference": payment_reference,
                "meeting_scheduled": meeting_scheduled,
                "now": now,
            },
        )
        return _row_to_transaction(result.fetchone())

    async def get_transaction(
        self, db: AsyncSession, transaction_id: str
    ) -> Transaction | None:
        result = await db.execute(_GET_TRANSACTION_SQL, {"transaction_id": transaction_id})
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def transition_status(
        self,
        db: AsyncSession,
        transaction_id: str,
        from_status: str,
        to_status: str,
        completed_at: datetime | None,
    ) -> Transaction | None:
        result = await db.execute(
            _TRANSITION_STATUS_SQL,
            {
                "transaction_id": transaction_id,
                "from_status": from_status,
                "to_status": to_status,
                "completed_at": completed_at,
            },
        )
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def list_for_user(
        self, db: AsyncSession, user_id: str, role: str | None, limit: int
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_FOR_USER_SQL, {"user_id": user_id, "role": role, "limit": limit}
        )
        return [_row_to_transaction(row) for row in result.fetchall()]
