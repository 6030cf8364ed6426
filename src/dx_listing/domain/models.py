"""Domain models for dx_listing — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Item:
    id: str
    title: str
    description: str
    price: int | None          # kopecks; REGULAR only, NULL for AUCTION
    images: list[str]
    category: str
    condition: str
    listing_type: str          # ListingType value
    status: str                # ItemStatus value
    seller_id: str
    created_at: datetime
    updated_at: datetime | None = None


@dataclass
class SellerListing:
    """A seller's own item in any status, with its auction and sale state."""

    item: Item
    auction_current_price: int | None
    auction_active: bool | None
    bid_count: int
    open_transaction_id: str | None


@dataclass
class ListingDraft:
    """Seller input for a new listing, before validation."""

    title: str
    description: str
    category: str
    condition: str
    listing_type: str
    images: list[str] = field(default_factory=list)
    price: int | None = None
    start_price: int | None = None
    reserve_price: int | None = None
    auction_duration_hours: int | None = None


@dataclass
class SellerQuota:
    user_id: str
    auctions_used_this_month: int
    auction_limit_reset_at: datetime


@dataclass
class DeletedListing:
    """What an admin deletion removed, for the seller notification and the audit log."""

    item_id: str
    title: str
    seller_id: str
    bids_deleted: int
    auction_deleted: bool
    reports_deleted: int
    reports_resolved: int
