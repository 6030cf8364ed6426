"""MessagingApplicationService — direct messages between residents.

Buyers and sellers arrange meetups here; the auction sweep opens the first
thread on the winner's behalf. Reading a thread marks the partner's messages
as read. The receiver gets a MESSAGE notification after commit.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_common.enums import NotificationType
from src.dx_common.errors import UserNotFoundError, ValidationError
from src.dx_messaging.application.schemas import (
    ConversationListResponse,
    ConversationOut,
    MarkThreadReadResponse,
    MessageOut,
    ThreadResponse,
)
from src.dx_messaging.domain.repository import MessageRepositoryProtocol
from src.dx_messaging.infrastructure.persistence import MessageRepository
from src.dx_notify.application.service import Notifier
from src.dx_notify.domain.repository import NotifierProtocol

logger = logging.getLogger(__name__)

THREAD_LIMIT = 200
CONVERSATION_LIMIT = 100


class MessagingApplicationService:
    def __init__(
        self,
        repo: MessageRepositoryProtocol | None = None,
        notifier: NotifierProtocol | None = None,
    ) -> None:
        self._repo: MessageRepositoryProtocol = repo or MessageRepository()
        self._notifier: NotifierProtocol = notifier or Notifier()

    async def send(
        self,
        db: AsyncSession,
        sender_id: str,
        sender_name: str,
        receiver_id: str,
        content: str,
        item_id: str | None = None,
    ) -> MessageOut:
        content = content.strip()
        if not content:
            raise ValidationError("Message cannot be empty")
        if receiver_id == sender_id:
            raise ValidationError("You cannot message yourself")
        if await self._repo.get_user_name(db, receiver_id) is None:
            raise UserNotFoundError(receiver_id)

        try:
            message = await self._repo.insert_message(
                db, sender_id, receiver_id, content, item_id
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        message.sender_name = sender_name
        logger.debug("Message %s: %s -> %s", message.id, sender_id, receiver_id)
        await self._notifier.notify(
            receiver_id,
            NotificationType.MESSAGE.value,
            "New Message",
            f"You have a new message from {sender_name}",
            related_item_id=item_id,
        )
        return MessageOut.from_domain(message)

    async def get_thread(
        self, db: AsyncSession, user_id: str, partner_id: str
    ) -> ThreadResponse:
        messages = await self._repo.list_thread(db, user_id, partner_id, THREAD_LIMIT)
        marked = await self.mark_thread_read(db, user_id, partner_id)
        return ThreadResponse(
            partner_id=partner_id,
            messages=[MessageOut.from_domain(m) for m in messages],
            marked_read=marked.updated,
        )

    async def mark_thread_read(
        self, db: AsyncSession, user_id: str, partner_id: str
    ) -> MarkThreadReadResponse:
        try:
            updated = await self._repo.mark_thread_read(db, user_id, partner_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return MarkThreadReadResponse(updated=updated)

    async def list_conversations(
        self, db: AsyncSession, user_id: str
    ) -> ConversationListResponse:
        rows = await self._repo.list_conversations(db, user_id, CONVERSATION_LIMIT)
        return ConversationListResponse(
            conversations=[ConversationOut.from_domain(c) for c in rows]
        )
