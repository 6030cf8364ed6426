# src/dx_escrow/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_escrow.domain.models import PurchaseTarget, Transaction


class TransactionRepositoryProtocol(Protocol):
    async def get_purchase_target(
        self, db: AsyncSession, item_id: str
    ) -> PurchaseTarget | None: ...

    async def mark_item_sold(self, db: AsyncSession, item_id: str) -> PurchaseTarget | None:
        """Conditional ACTIVE -> SOLD. None when the item is no longer ACTIVE."""
        ...

    async def deactivate_auction(self, db: AsyncSession, item_id: str) -> int | None:
        """Close the item's auction; returns its current_price, None when there is none."""
        ...

    async def reactivate_auction(self, db: AsyncSession, item_id: str) -> bool: ...

    async def restore_item_active(self, db: AsyncSession, item_id: str) -> bool:
        """Conditional SOLD -> ACTIVE. False when the item is gone or not SOLD."""
        ...

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
    ) -> Transaction: ...

    async def get_transaction(
        self, db: AsyncSession, transaction_id: str
    ) -> Transaction | None: ...

    async def transition_status(
        self,
        db: AsyncSession,
        transaction_id: str,
        from_status: str,
        to_status: str,
        completed_at: datetime | None,
    ) -> Transaction | None:
        """Conditional status change: None when status != from_status."""
        ...

    async def list_for_user(
        self, db: AsyncSession, user_id: str, role: str | None, limit: int
    ) -> list[Transaction]: ...
