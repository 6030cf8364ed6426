"""Domain models for dx_messaging — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Message:
    id: str
    sender_id: str
    receiver_id: str
    content: str
    item_id: str | None
    is_read: bool
    created_at: datetime
    sender_name: str | None = None


@dataclass
class Conversation:
    """One row per chat partner, carrying the latest message either way."""

    partner_id: str
    partner_name: str
    partner_room: str | None
    last_message: Message
    unread_count: int
