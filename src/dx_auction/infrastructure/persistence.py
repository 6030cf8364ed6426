"""AuctionRepository — concrete implementation of AuctionRepositoryProtocol.

All queries use raw text() SQL (no ORM).

The two contended writes are single conditional UPDATEs:
  - _RAISE_PRICE_SQL re-checks is_active, end_time and current_price on the
    locked row, so concurrent bids serialize and a late bid always loses.
  - _DEACTIVATE_EXPIRED_SQL only matches while is_active is still TRUE, so
    of two racing sweeps exactly one gets a row back.
Lock order is items then auctions on every path. The sweep takes the item
row first with _LOCK_ITEM_FOR_AUCTION_SQL before flipping the auction.
A result of 0 rows means the precondition no longer holds.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_auction.domain.models import Auction, Bid

# ---------------------------------------------------------------------------
# SQL: reads
# ---------------------------------------------------------------------------

_GET_AUCTION_SQL = text("""
    SELECT a.id, a.item_id, a.start_price, a.current_price, a.reserve_price,
           a.end_time, a.is_active, a.created_at,
           i.seller_id, i.title AS item_title
    FROM auctions a
    JOIN items i ON i.id = a.item_id
    WHERE a.id = CAST(:auction_id AS UUID)
""")

_LIST_BIDS_SQL = text("""
    SELECT b.id, b.auction_id, b.bidder_id, b.amount, b.created_at,
           u.name AS bidder_name
    FROM bids b
    LEFT JOIN users u ON u.id = b.bidder_id
    WHERE b.auction_id = CAST(:auction_id AS UUID)
    ORDER BY b.created_at DESC, b.id DESC
""")

_WINNING_BID_SQL = text("""
    SELECT b.id, b.auction_id, b.bidder_id, b.amount, b.created_at,
           u.name AS bidder_name
    FROM bids b
    LEFT JOIN users u ON u.id = b.bidder_id
    WHERE b.auction_id = CAST(:auction_id AS UUID)
    ORDER BY b.amount DESC, b.created_at ASC, b.id ASC
    LIMIT 1
""")

_LIST_EXPIRED_SQL = text("""
    SELECT id
    FROM auctions
    WHERE is_active = TRUE AND end_time < :now
    ORDER BY end_time ASC
    LIMIT :limit
""")

_COUNT_EXPIRED_SQL = text("""
    SELECT COUNT(*) AS pending
    FROM auctions
    WHERE is_active = TRUE AND end_time < :now
""")

# ---------------------------------------------------------------------------
# SQL: conditional mutations
# ---------------------------------------------------------------------------

_RAISE_PRICE_SQL = text("""
    UPDATE auctions
    SET current_price = :amount,
        updated_at = NOW()
    WHERE id = CAST(:auction_id AS UUID)
      AND is_active = TRUE
      AND end_time >= :now
      AND current_price < :amount
    RETURNING id, item_id, start_price, current_price, reserve_price,
              end_time, is_active, created_at
""")

_INSERT_BID_SQL = text("""
    INSERT INTO bids (auction_id, bidder_id, amount, created_at)
    VALUES (CAST(:auction_id AS UUID), CAST(:bidder_id AS UUID), :amount, :created_at)
    RETURNING id, auction_id, bidder_id, amount, created_at
""")

_LOCK_ITEM_FOR_AUCTION_SQL = text("""
    SELECT i.id
    FROM items i
    JOIN auctions a ON a.item_id = i.id
    WHERE a.id = CAST(:auction_id AS UUID)
    FOR UPDATE OF i
""")

_DEACTIVATE_EXPIRED_SQL = text("""
    UPDATE auctions a
    SET is_active = FALSE,
        updated_at = NOW()
    FROM items i
    WHERE a.id = CAST(:auction_id AS UUID)
      AND i.id = a.item_id
      AND a.is_active = TRUE
      AND a.end_time < :now
    RETURNING a.id, a.item_id, a.start_price, a.current_price, a.reserve_price,
              a.end_time, a.is_active, a.created_at,
              i.seller_id, i.title AS item_title
""")

_CONVERT_TO_REGULAR_SQL = text("""
    UPDATE items
    SET listing_type = 'REGULAR',
        price = :price,
        status = 'ACTIVE',
        updated_at = NOW()
    WHERE id = CAST(:item_id AS UUID)
""")

_INSERT_MESSAGE_SQL = text("""
    INSERT INTO messages (sender_id, receiver_id, content, item_id)
    VALUES (CAST(:sender_id AS UUID), CAST(:receiver_id AS UUID), :content,
            CAST(:item_id AS UUID))
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


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


def _row_to_bid(row: Any) -> Bid:
    return Bid(
        id=str(row.id),
        auction_id=str(row.auction_id),
        bidder_id=str(row.bidder_id),
        amount=row.amount,
        created_at=row.created_at,
        bidder_name=getattr(row, "bidder_name", None),
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AuctionRepository:
    async def get_auction(self, db: AsyncSession, auction_id: str) -> Auction | None:
        result = await db.execute(_GET_AUCTION_SQL, {"auction_id": auction_id})
        row = result.fetchone()
        return _row_to_auction(row) if row else None

    async def list_bids(self, db: AsyncSession, auction_id: str) -> list[Bid]:
        result = await db.execute(_LIST_BIDS_SQL, {"auction_id": auction_id})
        return [_row_to_bid(row) for row in result.fetchall()]

    async def raise_current_price(
        self, db: AsyncSession, auction_id: str, amount: int, now: datetime
    ) -> Auction | None:
        result = await db.execute(
            _RAISE_PRICE_SQL, {"auction_id": auction_id, "amount": amount, "now": now}
        )
        row = result.fetchone()
        return _row_to_auction(row) if row else None

    async def insert_bid(
        self,
        db: AsyncSession,
        auction_id: str,
        bidder_id: str,
        amount: int,
        created_at: datetime,
    ) -> Bid:
        result = await db.execute(
            _INSERT_BID_SQL,
            {
                "auction_id": auction_id,
                "bidder_id": bidder_id,
                "amount": amount,
                "created_at": created_at,
            },
        )
        return _row_to_bid(result.fetchone())

    async def list_expired_ids(
        self, db: AsyncSession, now: datetime, limit: int
    ) -> list[str]:
        result = await db.execute(_LIST_EXPIRED_SQL, {"now": now, "limit": limit})
        return [str(row.id) for row in result.fetchall()]

    async def count_expired(self, db: AsyncSession, now: datetime) -> int:
        result = await db.execute(_COUNT_EXPIRED_SQL, {"now": now})
        row = result.fetchone()
        return int(row.pending) if row else 0

    async def lock_item_for_auction(self, db: AsyncSession, auction_id: str) -> bool:
        result = await db.execute(_LOCK_ITEM_FOR_AUCTION_SQL, {"auction_id": auction_id})
        return result.fetchone() is not None

    async def deactivate_expired(
        self, db: AsyncSession, auction_id: str, now: datetime
    ) -> Auction | None:
        result = await db.execute(
            _DEACTIVATE_EXPIRED_SQL, {"auction_id": auction_id, "now": now}
        )
        row = result.fetchone()
        return _row_to_auction(row) if row else None

    async def get_winning_bid(self, db: AsyncSession, auction_id: str) -> Bid | None:
        result = await db.execute(_WINNING_BID_SQL, {"auction_id": auction_id})
        row = result.fetchone()
        return _row_to_bid(row) if row else None

    async def convert_item_to_regular(
        self, db: AsyncSession, item_id: str, price: int
    ) -> None:
        await db.execute(_CONVERT_TO_REGULAR_SQL, {"item_id": item_id, "price": price})

    async def insert_message(
        self,
        db: AsyncSession,
        sender_id: str,
        receiver_id: str,
        content: str,
        item_id: str | None,
    ) -> None:
        await db.execute(
            _INSERT_MESSAGE_SQL,
            {
                "sender_id": sender_id,
                "receiver_id": receiver_id,
                "content": content,
                "item_id": item_id,
            },
        )
