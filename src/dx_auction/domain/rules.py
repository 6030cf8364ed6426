"""Pure bidding rules.

check_bid is evaluated twice per bid: once against a plain read for a fast,
precise rejection, and again to classify a conditional UPDATE that matched
no row (another bid or the sweep got there first). The UPDATE itself is the
authority; these functions only explain its outcome.
"""

from collections.abc import Iterable
from datetime import datetime

from src.dx_auction.domain.models import Auction, Bid
from src.dx_common.errors import AuctionEndedError, BidTooLowError, SelfBidError


def is_open(auction: Auction, now: datetime) -> bool:
    """Bidding is open while active and not past end_time (end_time itself still counts)."""
    return auction.is_active and now <= auction.end_time


def check_bid(auction: Auction, bidder_id: str, amount: int, now: datetime) -> None:
    if not is_open(auction, now):
        raise AuctionEndedError(auction.id)
    if auction.seller_id is not None and auction.seller_id == bidder_id:
        raise SelfBidError()
    if amount <= auction.current_price:
        raise BidTooLowError(amount, auction.current_price)


def pick_winner(bids: Iterable[Bid]) -> Bid | None:
    """Highest amount wins; ties go to the earliest bid."""
    leader: Bid | None = None
    for bid in bids:
        if leader is None:
            leader = bid
        elif bid.amount > leader.amount or (
            bid.amount == leader.amount and bid.created_at < leader.created_at
        ):
            leader = bid
    return leader
