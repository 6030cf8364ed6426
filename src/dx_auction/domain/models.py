"""Domain models for dx_auction — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Auction:
    id: str
    item_id: str
    start_price: int          # kopecks
    current_price: int        # kopecks, never below start_price, never decreases
    reserve_price: int        # kopecks, stored but not enforced by the sweep
    end_time: datetime
    is_active: bool
    created_at: datetime
    # Joined from items when the query needs them
    seller_id: str | None = None
    item_title: str | None = None


@dataclass
class Bid:
    id: str
    auction_id: str
    bidder_id: str
    amount: int               # kopecks
    created_at: datetime
    bidder_name: str | None = None


@dataclass
class SweepResult:
    processed: int = 0
    converted_to_regular: int = 0
    sold_to_winner: int = 0
    errors: list[str] = field(default_factory=list)
