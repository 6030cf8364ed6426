"""ListingRepository — concrete implementation of ListingRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

Status changes are conditional UPDATEs guarded by the expected current status;
0 rows returned means another request got there first.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_auction.domain.models import Auction
from src.dx_listing.domain.models import (
    DeletedListing,
    Item,
    ListingDraft,
    SellerListing,
    SellerQuota,
)

_ITEM_COLUMNS = """
    id, title, description, price, images, category, condition,
    listing_type, status, seller_id, created_at, updated_at
"""

# ---------------------------------------------------------------------------
# SQL: reads
# ---------------------------------------------------------------------------

_GET_ITEM_SQL = text(f"""
    SELECT {_ITEM_COLUMNS}
    FROM items
    WHERE id = CAST(:item_id AS UUID)
""")

_GET_AUCTION_FOR_ITEM_SQL = text("""
    SELECT a.id, a.item_id, a.start_price, a.current_price, a.reserve_price,
           a.end_time, a.is_active, a.created_at,
           i.seller_id, i.title AS item_title
    FROM auctions a
    JOIN items i ON i.id = a.item_id
    WHERE a.item_id = CAST(:item_id AS UUID)
""")

_LIST_ACTIVE_ITEMS_SQL = text(f"""
    SELECT {_ITEM_COLUMNS}
    FROM items
    WHERE
        status = 'ACTIVE'
        AND (CAST(:category AS TEXT) IS NULL OR category = CAST(:category AS TEXT))
        AND (CAST(:listing_type AS TEXT) IS NULL OR listing_type = CAST(:listing_type AS TEXT))
        AND (
            CAST(:search AS TEXT) IS NULL
            OR title ILIKE '%' || CAST(:search AS TEXT) || '%'
            OR description ILIKE '%' || CAST(:search AS TEXT) || '%'
        )
        AND (
            CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
            OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
            OR (
                created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
                AND id < CAST(:cursor_id AS UUID)
            )
        )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_SELLER_ITEMS_SQL = text("""
    SELECT i.id, i.title, i.description, i.price, i.images, i.category, i.condition,
           i.listing_type, i.status, i.seller_id, i.created_at, i.updated_at,
           a.current_price AS auction_current_price,
           a.is_active AS auction_active,
           (SELECT COUNT(*) FROM bids b WHERE b.auction_id = a.id) AS bid_count,
           (
               SELECT t.id FROM transactions t
               WHERE t.item_id = i.id AND t.status IN ('PENDING', 'FUNDS_HELD')
               LIMIT 1
           ) AS open_transaction_id
    FROM items i
    LEFT JOIN auctions a ON a.item_id = i.id
    WHERE i.seller_id = CAST(:seller_id AS UUID)
      AND (CAST(:status AS TEXT) IS NULL OR i.status = CAST(:status AS TEXT))
    ORDER BY i.created_at DESC, i.id DESC
    LIMIT :limit
""")

_LOCK_QUOTA_SQL = text("""
    SELECT id, auctions_used_this_month, auction_limit_reset_at
    FROM users
    WHERE id = CAST(:seller_id AS UUID)
    FOR UPDATE
""")

_COUNT_BIDS_FOR_ITEM_SQL = text("""
    SELECT COUNT(b.id) AS bid_count
    FROM auctions a
    JOIN bids b ON b.auction_id = a.id
    WHERE a.item_id = CAST(:item_id AS UUID)
""")

_HAS_OPEN_TRANSACTION_SQL = text("""
    SELECT 1
    FROM transactions
    WHERE item_id = CAST(:item_id AS UUID)
      AND status IN ('PENDING', 'FUNDS_HELD')
    LIMIT 1
""")

# ---------------------------------------------------------------------------
# SQL: mutations
# ---------------------------------------------------------------------------

_RESET_QUOTA_SQL = text("""
    UPDATE users
    SET auctions_used_this_month = 0,
        auction_limit_reset_at = :now,
        updated_at = NOW()
    WHERE id = CAST(:seller_id AS UUID)
""")

_INCREMENT_QUOTA_SQL = text("""
    UPDATE users
    SET auctions_used_this_month = auctions_used_this_month + 1,
        updated_at = NOW()
    WHERE id = CAST(:seller_id AS UUID)
""")

_INSERT_ITEM_SQL = text(f"""
    INSERT INTO items (title, description, price, images, category, condition,
                       listing_type, status, seller_id, created_at)
    VALUES (:title, :description, :price, CAST(:images AS TEXT[]), :category, :condition,
            :listing_type, 'ACTIVE', CAST(:seller_id AS UUID), :now)
    RETURNING {_ITEM_COLUMNS}
""")

_INSERT_AUCTION_SQL = text("""
    INSERT INTO auctions (item_id, start_price, current_price, reserve_price, end_time, is_active)
    VALUES (CAST(:item_id AS UUID), :start_price, :start_price, :reserve_price, :end_time, TRUE)
    RETURNING id, item_id, start_price, current_price, reserve_price,
              end_time, is_active, created_at
""")

_TRANSITION_STATUS_SQL = text(f"""
    UPDATE items
    SET status = :to_status,
        updated_at = NOW()
    WHERE id = CAST(:item_id AS UUID)
      AND status = ANY(CAST(:from_statuses AS TEXT[]))
    RETURNING {_ITEM_COLUMNS}
""")

_SET_AUCTION_ACTIVE_SQL = text("""
    UPDATE auctions
    SET is_active = :is_active,
        updated_at = NOW()
    WHERE item_id = CAST(:item_id AS UUID)
""")

# Admin deletion: explicit fan-out, children first, all in the caller's transaction.
_LOCK_ITEM_SQL = text("""
    SELECT id, title, seller_id
    FROM items
    WHERE id = CAST(:item_id AS UUID)
    FOR UPDATE
""")

_DELETE_BIDS_SQL = text("""
    DELETE FROM bids b
    USING auctions a
    WHERE b.auction_id = a.id
      AND a.item_id = CAST(:item_id AS UUID)
""")

_DELETE_AUCTION_SQL = text("""
    DELETE FROM auctions
    WHERE item_id = CAST(:item_id AS UUID)
""")

_DELETE_REPORTS_SQL = text("""
    DELETE FROM reports
    WHERE item_id = CAST(:item_id AS UUID)
""")

_DELETE_ITEM_SQL = text("""
    DELETE FROM items
    WHERE id = CAST(:item_id AS UUID)
""")

_RESOLVE_SURVIVING_REPORTS_SQL = text("""
    UPDATE reports
    SET status = 'RESOLVED',
        updated_at = NOW()
    WHERE item_id = CAST(:item_id AS UUID)
      AND status <> 'RESOLVED'
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_item(row: Any) -> Item:
    return Item(
        id=str(row.id),
        title=row.title,
        description=row.description,
        price=row.price,
        images=list(row.images or []),
        category=row.category,
        condition=row.condition,
        listing_type=row.listing_type,
        status=row.status,
        seller_id=str(row.seller_id),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_auction(row: Any) -> Auction:
    seller_id = getattr(row, "seller_id", None)
    return Auction(
        id=str(row.id),
        item_id=str(row.item_id),
        start_price=row.start_price,
        current_price=row.current_price,
        reserve_price=row.reserve_price,
        end_time=row.end_time,
        is_active=row.is_active,
        created_at=row.created_at,
        seller_id=str(seller_id) if seller_id is not None else None,
        item_title=getattr(row, "item_title", None),
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ListingRepository:
    async def get_item(self, db: AsyncSession, item_id: str) -> Item | None:
        result = await db.execute(_GET_ITEM_SQL, {"item_id": item_id})
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def get_auction_for_item(self, db: AsyncSession, item_id: str) -> Auction | None:
        result = await db.execute(_GET_AUCTION_FOR_ITEM_SQL, {"item_id": item_id})
        row = result.fetchone()
        return _row_to_auction(row) if row else None

    async def list_active_items(
        self,
        db: AsyncSession,
        category: str | None,
        listing_type: str | None,
        search: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Item]:
        # asyncpg binds TIMESTAMPTZ only from a datetime, never an ISO string
        cursor_ts_dt: datetime | None = None
        if cursor_ts is not None:
            cursor_ts_dt = datetime.fromisoformat(cursor_ts)

        result = await db.execute(
            _LIST_ACTIVE_ITEMS_SQL,
            {
                "category": category,
                "listing_type": listing_type,
                "search": search,
                "cursor_ts": cursor_ts_dt,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_item(row) for row in result.fetchall()]

    async def list_seller_items(
        self, db: AsyncSession, seller_id: str, status: str | None, limit: int
    ) -> list[SellerListing]:
        result = await db.execute(
            _LIST_SELLER_ITEMS_SQL, {"seller_id": seller_id, "status": status, "limit": limit}
        )
        return [
            SellerListing(
                item=_row_to_item(row),
                auction_current_price=row.auction_current_price,
                auction_active=row.auction_active,
                bid_count=int(row.bid_count or 0),
                open_transaction_id=(
                    str(row.open_transaction_id) if row.open_transaction_id else None
                ),
            )
            for row in result.fetchall()
        ]

    async def lock_seller_quota(self, db: AsyncSession, seller_id: str) -> SellerQuota | None:
        result = await db.execute(_LOCK_QUOTA_SQL, {"seller_id": seller_id})
        row = result.fetchone()
        if row is None:
            return None
        return SellerQuota(
            user_id=str(row.id),
            auctions_used_this_month=row.auctions_used_this_month,
            auction_limit_reset_at=row.auction_limit_reset_at,
        )

    async def reset_seller_quota(self, db: AsyncSession, seller_id: str, now: datetime) -> None:
        await db.execute(_RESET_QUOTA_SQL, {"seller_id": seller_id, "now": now})

    async def increment_seller_quota(self, db: AsyncSession, seller_id: str) -> None:
        await db.execute(_INCREMENT_QUOTA_SQL, {"seller_id": seller_id})

    async def insert_item(
        self, db: AsyncSession, seller_id: str, draft: ListingDraft, now: datetime
    ) -> Item:
        result = await db.execute(
            _INSERT_ITEM_SQL,
            {
                "title": draft.title.strip(),
                "description": draft.description.strip(),
                "price": draft.price,
                "images": list(draft.images),
                "category": draft.category,
                "condition": draft.condition,
                "listing_type": draft.listing_type,
                "seller_id": seller_id,
                "now": now,
            },
        )
        return _row_to_item(result.fetchone())

    async def insert_auction(
        self,
        db: AsyncSession,
        item_id: str,
        start_price: int,
        reserve_price: int,
        end_time: datetime,
    ) -> Auction:
        result = await db.execute(
            _INSERT_AUCTION_SQL,
            {
                "item_id": item_id,
                "start_price": start_price,
                "reserve_price": reserve_price,
                "end_time": end_time,
            },
        )
        return _row_to_auction(result.fetchone())

    async def transition_item_status(
        self,
        db: AsyncSession,
        item_id: str,
        from_statuses: frozenset[str],
        to_status: str,
    ) -> Item | None:
        result = await db.execute(
            _TRANSITION_STATUS_SQL,
            {
                "item_id": item_id,
                "from_statuses": sorted(from_statuses),
                "to_status": to_status,
            },
        )
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def set_auction_active(self, db: AsyncSession, item_id: str, is_active: bool) -> int:
        result = await db.execute(
            _SET_AUCTION_ACTIVE_SQL, {"item_id": item_id, "is_active": is_active}
        )
        return result.rowcount

    async def count_bids_for_item(self, db: AsyncSession, item_id: str) -> int:
        result = await db.execute(_COUNT_BIDS_FOR_ITEM_SQL, {"item_id": item_id})
        row = result.fetchone()
        return int(row.bid_count) if row else 0

    async def has_open_transaction(self, db: AsyncSession, item_id: str) -> bool:
        result = await db.execute(_HAS_OPEN_TRANSACTION_SQL, {"item_id": item_id})
        return result.fetchone() is not None

    async def delete_item_cascade(self, db: AsyncSession, item_id: str) -> DeletedListing | None:
        params = {"item_id": item_id}
        locked = (await db.execute(_LOCK_ITEM_SQL, params)).fetchone()
        if locked is None:
            return None
        bids = await db.execute(_DELETE_BIDS_SQL, params)
        auction = await db.execute(_DELETE_AUCTION_SQL, params)
        reports = await db.execute(_DELETE_REPORTS_SQL, params)
        await db.execute(_DELETE_ITEM_SQL, params)
        resolved = await db.execute(_RESOLVE_SURVIVING_REPORTS_SQL, params)
        return DeletedListing(
            item_id=str(locked.id),
            title=locked.title,
            seller_id=str(locked.seller_id),
            bids_deleted=bids.rowcount,
            auction_deleted=auction.rowcount > 0,
            reports_deleted=reports.rowcount,
            reports_resolved=resolved.rowcount,
        )
