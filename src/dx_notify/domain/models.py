"""Domain models for dx_notify — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Notification:
    id: str
    user_id: str
    type: str                              # NotificationType value
    title: str
    message: str
    related_item_id: str | None
    related_transaction_id: str | None
    is_read: bool
    created_at: datetime
