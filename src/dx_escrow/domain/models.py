"""Domain models for dx_escrow — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Transaction:
    id: str
    item_id: str               # weak reference: survives admin deletion of the item
    buyer_id: str
    seller_id: str
    amount: int                # kopecks
    commission_amount: int     # kopecks; 0 for regular sales
    payment_method: str        # PaymentMethod value
    status: str                # TransactionStatus value
    created_at: datetime
    payment_reference: str | None = None
    meeting_scheduled: datetime | None = None
    completed_at: datetime | None = None
    updated_at: datetime | None = None
    item_title: str | None = None


@dataclass
class PurchaseTarget:
    """Snapshot of an item (and its auction, if any) as a buyer sees it."""

    item_id: str
    seller_id: str
    title: str
    status: str
    listing_type: str
    price: int | None
    auction_id: str | None = None
    auction_current_price: int | None = None
    auction_is_active: bool | None = None
