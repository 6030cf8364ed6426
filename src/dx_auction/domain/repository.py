# src/dx_auction/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_auction.domain.models import Auction, Bid


class AuctionRepositoryProtocol(Protocol):
    async def get_auction(self, db: AsyncSession, auction_id: str) -> Auction | None: ...

    async def list_bids(self, db: AsyncSession, auction_id: str) -> list[Bid]: ...

    async def raise_current_price(
        self, db: AsyncSession, auction_id: str, amount: int, now: datetime
    ) -> Auction | None:
        """Conditional ratchet: None when closed, expired, or amount <= current_price."""
        ...

    async def insert_bid(
        self,
        db: AsyncSession,
        auction_id: str,
        bidder_id: str,
        amount: int,
        created_at: datetime,
    ) -> Bid: ...

    async def list_expired_ids(
        self, db: AsyncSession, now: datetime, limit: int
    ) -> list[str]: ...

    async def count_expired(self, db: AsyncSession, now: datetime) -> int: ...

    async def lock_item_for_auction(self, db: AsyncSession, auction_id: str) -> bool:
        """Row-lock the auction's item; False when the item is gone."""
        ...

    async def deactivate_expired(
        self, db: AsyncSession, auction_id: str, now: datetime
    ) -> Auction | None:
        """Flip is_active off; None when another sweep already did."""
        ...

    async def get_winning_bid(self, db: AsyncSession, auction_id: str) -> Bid | None: ...

    async def convert_item_to_regular(
        self, db: AsyncSession, item_id: str, price: int
    ) -> None: ...

    async def insert_message(
        self,
        db: AsyncSession,
        sender_id: str,
        receiver_id: str,
        content: str,
        item_id: str | None,
    ) -> None: ...
