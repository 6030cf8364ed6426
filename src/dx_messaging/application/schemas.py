"""Pydantic schemas for dx_messaging API."""

import uuid

from pydantic import BaseModel, Field

from src.dx_messaging.domain.models import Conversation, Message


class SendMessageRequest(BaseModel):
    receiver_id: uuid.UUID
    content: str = Field(..., min_length=1, max_length=1000)
    item_id: uuid.UUID | None = None


class MarkThreadReadRequest(BaseModel):
    partner_id: uuid.UUID


class MessageOut(BaseModel):
    id: str
    sender_id: str
    sender_name: str | None
    receiver_id: str
    content: str
    item_id: str | None
    is_read: bool
    created_at: str

    @classmethod
    def from_domain(cls, m: Message) -> "MessageOut":
        return cls(
            id=m.id,
            sender_id=m.sender_id,
            sender_name=m.sender_name,
            receiver_id=m.receiver_id,
            content=m.content,
            item_id=m.item_id,
            is_read=m.is_read,
            created_at=m.created_at.isoformat(),
        )


class ThreadResponse(BaseModel):
    partner_id: str
    messages: list[MessageOut]    # oldest first
    marked_read: int


class ConversationOut(BaseModel):
    partner_id: str
    partner_name: str
    partner_room: str | None
    last_message: MessageOut
    unread_count: int

    @classmethod
    def from_domain(cls, c: Conversation) -> "ConversationOut":
        return cls(
            partner_id=c.partner_id,
            partner_name=c.partner_name,
            partner_room=c.partner_room,
            last_message=MessageOut.from_domain(c.last_message),
            unread_count=c.unread_count,
        )


class ConversationListResponse(BaseModel):
    conversations: list[ConversationOut]


class MarkThreadReadResponse(BaseModel):
    updated: int
