"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_messaging.domain.models import Conversation, Message


class MessageRepositoryProtocol(Protocol):
    async def get_user_name(self, db: AsyncSession, user_id: str) -> str | None:
        """Display name of an active user, None when missing or disabled."""
        ...

    async def insert_message(
        self,
        db: AsyncSession,
        sender_id: str,
        receiver_id: str,
        content: str,
        item_id: str | None,
    ) -> Message: ...

    async def list_thread(
        self, db: AsyncSession, user_id: str, partner_id: str, limit: int
    ) -> list[Message]:
        """Both directions between the two users, oldest first."""
        ...

    async def mark_thread_read(self, db: AsyncSession, user_id: str, partner_id: str) -> int: ...

    async def list_conversations(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[Conversation]: ...
