"""Pydantic schemas for dx_listing API.

Cursor format for items (UUID PK, not sequential):
  {"ts": "<created_at ISO>", "id": "<item_id>"}
  Encoded as Base64 JSON string.
"""

import base64
import binascii
import json

from pydantic import BaseModel, Field

from src.dx_auction.application.schemas import AuctionDetail, AuctionOut
from src.dx_common.enums import ListingType
from src.dx_common.money import kopecks_to_display
from src.dx_listing.domain.models import Item, ListingDraft, SellerListing

# ---------------------------------------------------------------------------
# Cursor utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_item: Item) -> str:
    """Encode composite cursor from last item in page."""
    payload = {"ts": last_item.created_at.isoformat(), "id": last_item.id}
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[str | None, str | None]:
    """Decode composite cursor -> (ts_iso, item_id), or (None, None) on error."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        return data["ts"], data["id"]
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError):
        return None, None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateListingRequest(BaseModel):
    title: str
    description: str
    images: list[str] = Field(default_factory=list)
    category: str
    condition: str
    listing_type: ListingType = ListingType.REGULAR
    price: int | None = Field(None, description="Fixed price in kopecks (REGULAR)")
    start_price: int | None = Field(None, description="Opening price in kopecks (AUCTION)")
    reserve_price: int | None = None
    auction_duration_hours: int | None = None

    def to_draft(self) -> ListingDraft:
        return ListingDraft(
            title=self.title,
            description=self.description,
            images=list(self.images),
            category=self.category,
            condition=self.condition,
            listing_type=self.listing_type.value,
            price=self.price,
            start_price=self.start_price,
            reserve_price=self.reserve_price,
            auction_duration_hours=self.auction_duration_hours,
        )


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ItemOut(BaseModel):
    id: str
    title: str
    description: str
    price: int | None
    price_display: str | None
    images: list[str]
    category: str
    condition: str
    listing_type: str
    status: str
    seller_id: str
    created_at: str

    @classmethod
    def from_domain(cls, item: Item) -> "ItemOut":
        return cls(
            id=item.id,
            title=item.title,
            description=item.description,
            price=item.price,
            price_display=kopecks_to_display(item.price) if item.price is not None else None,
            images=list(item.images),
            category=item.category,
            condition=item.condition,
            listing_type=item.listing_type,
            status=item.status,
            seller_id=item.seller_id,
            created_at=item.created_at.isoformat(),
        )


class ItemListResponse(BaseModel):
    items: list[ItemOut]
    next_cursor: str | None
    has_more: bool


class SellerItemOut(ItemOut):
    auction_current_price: int | None
    auction_active: bool | None
    bid_count: int
    open_transaction_id: str | None

    @classmethod
    def from_seller_listing(cls, listing: SellerListing) -> "SellerItemOut":
        return cls(
            **ItemOut.from_domain(listing.item).model_dump(),
            auction_current_price=listing.auction_current_price,
            auction_active=listing.auction_active,
            bid_count=listing.bid_count,
            open_transaction_id=listing.open_transaction_id,
        )


class SellerItemListResponse(BaseModel):
    items: list[SellerItemOut]


class ItemDetail(ItemOut):
    auction: AuctionDetail | None


class CreateListingResponse(BaseModel):
    item: ItemOut
    auction: AuctionOut | None
    auctions_remaining_this_month: int | None


class ListingStatusResponse(BaseModel):
    item_id: str
    status: str
    auction_active: bool | None
