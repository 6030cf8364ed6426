"""Pydantic schemas for dx_auction API."""

from pydantic import BaseModel, Field

from src.dx_auction.domain.models import Auction, Bid, SweepResult
from src.dx_auction.domain.rules import pick_winner
from src.dx_common.money import kopecks_to_display


class PlaceBidRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Bid amount in kopecks")


class BidOut(BaseModel):
    id: str
    auction_id: str
    bidder_id: str
    bidder_name: str | None
    amount: int
    amount_display: str
    created_at: str

    @classmethod
    def from_domain(cls, bid: Bid) -> "BidOut":
        return cls(
            id=bid.id,
            auction_id=bid.auction_id,
            bidder_id=bid.bidder_id,
            bidder_name=bid.bidder_name,
            amount=bid.amount,
            amount_display=kopecks_to_display(bid.amount),
            created_at=bid.created_at.isoformat(),
        )


class AuctionOut(BaseModel):
    id: str
    item_id: str
    start_price: int
    current_price: int
    current_price_display: str
    reserve_price: int
    end_time: str
    is_active: bool

    @classmethod
    def from_domain(cls, auction: Auction) -> "AuctionOut":
        return cls(
            id=auction.id,
            item_id=auction.item_id,
            start_price=auction.start_price,
            current_price=auction.current_price,
            current_price_display=kopecks_to_display(auction.current_price),
            reserve_price=auction.reserve_price,
            end_time=auction.end_time.isoformat(),
            is_active=auction.is_active,
        )


class AuctionDetail(AuctionOut):
    bids: list[BidOut]                 # newest first
    leading_bid: BidOut | None

    @classmethod
    def from_auction_and_bids(cls, auction: Auction, bids: list[Bid]) -> "AuctionDetail":
        leader = pick_winner(bids)
        base = AuctionOut.from_domain(auction)
        return cls(
            **base.model_dump(),
            bids=[BidOut.from_domain(b) for b in bids],
            leading_bid=BidOut.from_domain(leader) if leader else None,
        )


class PlaceBidResponse(BaseModel):
    bid: BidOut
    current_price: int


class SweepResponse(BaseModel):
    processed: int
    converted_to_regular: int
    sold_to_winner: int
    errors: list[str]

    @classmethod
    def from_result(cls, result: SweepResult) -> "SweepResponse":
        return cls(
            processed=result.processed,
            converted_to_regular=result.converted_to_regular,
            sold_to_winner=result.sold_to_winner,
            errors=list(result.errors),
        )


class PendingSweepResponse(BaseModel):
    pending_ended_auctions: int
