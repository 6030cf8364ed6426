# src/dx_listing/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_auction.domain.models import Auction
from src.dx_listing.domain.models import (
    DeletedListing,
    Item,
    ListingDraft,
    SellerListing,
    SellerQuota,
)


class ListingRepositoryProtocol(Protocol):
    async def get_item(self, db: AsyncSession, item_id: str) -> Item | None: ...

    async def get_auction_for_item(self, db: AsyncSession, item_id: str) -> Auction | None: ...

    async def list_active_items(
        self,
        db: AsyncSession,
        category: str | None,
        listing_type: str | None,
        search: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Item]: ...

    async def list_seller_items(
        self, db: AsyncSession, seller_id: str, status: str | None, limit: int
    ) -> list[SellerListing]:
        """Every item of one seller, any status, newest first."""
        ...

    async def lock_seller_quota(self, db: AsyncSession, seller_id: str) -> SellerQuota | None:
        """SELECT ... FOR UPDATE on the seller row; held until the caller commits."""
        ...

    async def reset_seller_quota(self, db: AsyncSession, seller_id: str, now: datetime) -> None: ...

    async def increment_seller_quota(self, db: AsyncSession, seller_id: str) -> None: ...

    async def insert_item(
        self, db: AsyncSession, seller_id: str, draft: ListingDraft, now: datetime
    ) -> Item: ...

    async def insert_auction(
        self,
        db: AsyncSession,
        item_id: str,
        start_price: int,
        reserve_price: int,
        end_time: datetime,
    ) -> Auction: ...

    async def transition_item_status(
        self,
        db: AsyncSession,
        item_id: str,
        from_statuses: frozenset[str],
        to_status: str,
    ) -> Item | None:
        """Conditional status change: None when the item is not in from_statuses."""
        ...

    async def set_auction_active(self, db: AsyncSession, item_id: str, is_active: bool) -> int: ...

    async def count_bids_for_item(self, db: AsyncSession, item_id: str) -> int: ...

    async def has_open_transaction(self, db: AsyncSession, item_id: str) -> bool: ...

    async def delete_item_cascade(self, db: AsyncSession, item_id: str) -> DeletedListing | None:
        """Remove bids, auction, reports and the item itself; None when the item is gone."""
        ...
