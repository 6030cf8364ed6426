"""AuctionApplicationService — bid placement and auction reads.

place_bid runs in one transaction: the conditional price ratchet and the bid
insert commit together or not at all.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_auction.application.schemas import AuctionDetail, BidOut, PlaceBidResponse
from src.dx_auction.domain.repository import AuctionRepositoryProtocol
from src.dx_auction.domain.rules import check_bid
from src.dx_auction.infrastructure.persistence import AuctionRepository
from src.dx_common.datetime_utils import utc_now
from src.dx_common.errors import AuctionNotFoundError, InvalidStateError, ValidationError

logger = logging.getLogger(__name__)


class AuctionApplicationService:
    def __init__(self, repo: AuctionRepositoryProtocol | None = None) -> None:
        self._repo: AuctionRepositoryProtocol = repo or AuctionRepository()

    async def get_auction(self, db: AsyncSession, auction_id: str) -> AuctionDetail:
        auction = await self._repo.get_auction(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        bids = await self._repo.list_bids(db, auction_id)
        return AuctionDetail.from_auction_and_bids(auction, bids)

    async def place_bid(
        self, db: AsyncSession, bidder_id: str, auction_id: str, amount: int
    ) -> PlaceBidResponse:
        if amount <= 0:
            raise ValidationError(f"Bid amount must be positive, got {amount}")
        now = utc_now()

        auction = await self._repo.get_auction(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        check_bid(auction, bidder_id, amount, now)

        try:
            updated = await self._repo.raise_current_price(db, auction_id, amount, now)
            if updated is None:
                # Lost the race: re-read the committed row to say why.
                fresh = await self._repo.get_auction(db, auction_id)
                if fresh is None:
                    raise AuctionNotFoundError(auction_id)
                check_bid(fresh, bidder_id, amount, now)
                raise InvalidStateError(f"Auction {auction_id} changed, refresh and retry")
            bid = await self._repo.insert_bid(db, auction_id, bidder_id, amount, now)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Bid accepted: auction=%s bidder=%s amount=%d", auction_id, bidder_id, amount
        )
        return PlaceBidResponse(bid=BidOut.from_domain(bid), current_price=updated.current_price)
