"""AuctionSweeper — settles auctions whose end_time has passed.

Deadlines are enforced lazily: place_bid rejects once now > end_time, and
this sweep, run every SWEEP_INTERVAL_SECONDS, settles what has expired.
Settlement therefore happens within one sweep interval of the true end.

Per auction, in its own transaction:
  1. lock the item row, then conditional flip is_active TRUE -> FALSE
     (no row back = another run won)
  2. no bids:  item becomes REGULAR at start_price, stays ACTIVE
     with bids: item stays ACTIVE for the buyer/seller handshake, and a
                starter message from winner to seller is written
  3. commit, then notify (fire-and-forget)

A failure on one auction is logged and recorded in SweepResult.errors and
the sweep moves on to the next one. Reserve price is stored but not checked.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_auction.domain import messages
from src.dx_auction.domain.models import Auction, Bid, SweepResult
from src.dx_auction.domain.repository import AuctionRepositoryProtocol
from src.dx_auction.infrastructure.persistence import AuctionRepository
from src.dx_common.datetime_utils import utc_now
from src.dx_common.enums import NotificationType
from src.dx_notify.application.service import Notifier
from src.dx_notify.domain.repository import NotifierProtocol

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500


class AuctionSweeper:
    def __init__(
        self,
        repo: AuctionRepositoryProtocol | None = None,
        notifier: NotifierProtocol | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self._repo: AuctionRepositoryProtocol = repo or AuctionRepository()
        self._notifier: NotifierProtocol = notifier or Notifier()
        self._batch_size = batch_size

    async def pending_count(self, db: AsyncSession) -> int:
        return await self._repo.count_expired(db, utc_now())

    async def sweep_ended(self, db: AsyncSession) -> SweepResult:
        now = utc_now()
        result = SweepResult()
        auction_ids = await self._repo.list_expired_ids(db, now, self._batch_size)

        for auction_id in auction_ids:
            try:
                settled = await self._settle(db, auction_id, now)
                await db.commit()
            except Exception as exc:
                await db.rollback()
                logger.exception("Error processing auction %s", auction_id)
                result.errors.append(f"Error processing auction {auction_id}: {exc}")
                continue

            if settled is None:
                logger.debug("Auction %s already settled by another sweep", auction_id)
                continue

            auction, winning_bid = settled
            if winning_bid is None:
                await self._notify_no_bids(auction)
                result.converted_to_regular += 1
            else:
                await self._notify_sold(auction, winning_bid)
                result.sold_to_winner += 1
            result.processed += 1

        if auction_ids:
            logger.info(
                "Sweep done: candidates=%d processed=%d converted=%d sold=%d errors=%d",
                len(auction_ids),
                result.processed,
                result.converted_to_regular,
                result.sold_to_winner,
                len(result.errors),
            )
        return result

    async def _settle(
        self, db: AsyncSession, auction_id: str, now: datetime
    ) -> tuple[Auction, Bid | None] | None:
        # Item before auction, same order as purchase and cancel
        if not await self._repo.lock_item_for_auction(db, auction_id):
            return None
        auction = await self._repo.deactivate_expired(db, auction_id, now)
        if auction is None:
            return None

        winning_bid = await self._repo.get_winning_bid(db, auction_id)
        if winning_bid is None:
            await self._repo.convert_item_to_regular(db, auction.item_id, auction.start_price)
            return auction, None

        await self._repo.insert_message(
            db,
            sender_id=winning_bid.bidder_id,
            receiver_id=auction.seller_id or "",
            content=messages.starter_message(auction.item_title or "", winning_bid.amount),
            item_id=auction.item_id,
        )
        return auction, winning_bid

    async def _notify_no_bids(self, auction: Auction) -> None:
        await self._notifier.notify(
            auction.seller_id or "",
            NotificationType.AUCTION_ENDED.value,
            messages.no_bids_title(),
            messages.no_bids_message(auction.item_title or "", auction.start_price),
            related_item_id=auction.item_id,
        )

    async def _notify_sold(self, auction: Auction, winning_bid: Bid) -> None:
        title = auction.item_title or ""
        await self._notifier.notify(
            winning_bid.bidder_id,
            NotificationType.AUCTION_ENDED.value,
            messages.winner_title(),
            messages.winner_message(title, winning_bid.amount),
            related_item_id=auction.item_id,
        )
        await self._notifier.notify(
            auction.seller_id or "",
            NotificationType.AUCTION_ENDED.value,
            messages.seller_sold_title(),
            messages.seller_sold_message(
                title, winning_bid.bidder_name or "The winning bidder", winning_bid.amount
            ),
            related_item_id=auction.item_id,
        )
