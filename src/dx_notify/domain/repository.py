"""Repository and Notifier Protocols — dependency inversion for testability."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_notify.domain.models import Notification


class NotificationRepositoryProtocol(Protocol):
    async def insert(
        self,
        db: AsyncSession,
        user_id: str,
        type_: str,
        title: str,
        message: str,
        related_item_id: str | None,
        related_transaction_id: str | None,
    ) -> Notification: ...

    async def list_for_user(
        self, db: AsyncSession, user_id: str, unread_only: bool, limit: int
    ) -> list[Notification]: ...

    async def mark_read(
        self, db: AsyncSession, user_id: str, notification_ids: list[str]
    ) -> int: ...


class NotifierProtocol(Protocol):
    """Fire-and-forget side channel used by the engine modules.

    Implementations must never raise: a failed delivery cannot roll back the
    state change that triggered it.
    """

    async def notify(
        self,
        user_id: str,
        type_: str,
        title: str,
        message: str,
        related_item_id: str | None = None,
        related_transaction_id: str | None = None,
    ) -> None: ...
