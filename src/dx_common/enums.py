"""Global enums — must match DB CHECK constraints exactly (see alembic/versions)."""

from enum import Enum


class ListingType(str, Enum):
    REGULAR = "REGULAR"
    AUCTION = "AUCTION"


class ItemStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SOLD = "SOLD"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    CASH_ON_MEET = "CASH_ON_MEET"
    CARD = "CARD"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    FUNDS_HELD = "FUNDS_HELD"  # card path: authorized, not captured
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ReportReason(str, Enum):
    INAPPROPRIATE = "INAPPROPRIATE"
    SCAM = "SCAM"
    FAKE = "FAKE"
    SPAM = "SPAM"
    OTHER = "OTHER"


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


class NotificationType(str, Enum):
    AUCTION_ENDED = "AUCTION_ENDED"
    ITEM_SOLD = "ITEM_SOLD"
    TRANSACTION_COMPLETED = "TRANSACTION_COMPLETED"
    TRANSACTION_CANCELLED = "TRANSACTION_CANCELLED"
    ITEM_REMOVED = "ITEM_REMOVED"
    MESSAGE = "MESSAGE"


# Transactions awaiting the seller (cash handshake or card capture)
OPEN_TRANSACTION_STATUSES: frozenset[str] = frozenset(
    {TransactionStatus.PENDING.value, TransactionStatus.FUNDS_HELD.value}
)

RELISTABLE_ITEM_STATUSES: frozenset[str] = frozenset(
    {ItemStatus.SOLD.value, ItemStatus.CANCELLED.value}
)
