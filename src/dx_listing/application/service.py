"""ListingApplicationService — item lifecycle: create, cancel, relist, admin removal.

Every mutating method is one transaction; the Notifier is called only after
commit so a failed notification never rolls back the state change.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.dx_auction.application.schemas import AuctionDetail, AuctionOut
from src.dx_auction.domain.repository import AuctionRepositoryProtocol
from src.dx_auction.infrastructure.persistence import AuctionRepository
from src.dx_common.datetime_utils import utc_now
from src.dx_common.enums import (
    RELISTABLE_ITEM_STATUSES,
    ItemStatus,
    ListingType,
    NotificationType,
)
from src.dx_common.errors import (
    InternalError,
    InvalidStateError,
    ItemNotFoundError,
    NotOwnerError,
)
from src.dx_listing.application.schemas import (
    CreateListingResponse,
    ItemDetail,
    ItemListResponse,
    ItemOut,
    ListingStatusResponse,
    SellerItemListResponse,
    SellerItemOut,
    cursor_decode,
    cursor_encode,
)
from src.dx_listing.domain.models import DeletedListing, ListingDraft
from src.dx_listing.domain.repository import ListingRepositoryProtocol
from src.dx_listing.domain.rules import (
    auction_end_time,
    check_auction_quota,
    validate_admin_reason,
    validate_draft,
)
from src.dx_listing.infrastructure.persistence import ListingRepository
from src.dx_notify.application.service import Notifier
from src.dx_notify.domain.repository import NotifierProtocol

logger = logging.getLogger(__name__)

SELLER_ITEMS_LIMIT = 200


class ListingApplicationService:
    def __init__(
        self,
        repo: ListingRepositoryProtocol | None = None,
        auction_repo: AuctionRepositoryProtocol | None = None,
        notifier: NotifierProtocol | None = None,
        auction_limit_per_month: int | None = None,
        default_duration_hours: int | None = None,
    ) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()
        self._auction_repo: AuctionRepositoryProtocol = auction_repo or AuctionRepository()
        self._notifier: NotifierProtocol = notifier or Notifier()
        self._auction_limit = (
            auction_limit_per_month
            if auction_limit_per_month is not None
            else settings.AUCTION_LIMIT_PER_MONTH
        )
        self._default_duration = (
            default_duration_hours
            if default_duration_hours is not None
            else settings.DEFAULT_AUCTION_DURATION_HOURS
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_item(self, db: AsyncSession, item_id: str) -> ItemDetail:
        item = await self._repo.get_item(db, item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        auction_detail = None
        if item.listing_type == ListingType.AUCTION.value:
            auction = await self._repo.get_auction_for_item(db, item_id)
            if auction is not None:
                bids = await self._auction_repo.list_bids(db, auction.id)
                auction_detail = AuctionDetail.from_auction_and_bids(auction, bids)
        return ItemDetail(**ItemOut.from_domain(item).model_dump(), auction=auction_detail)

    async def list_items(
        self,
        db: AsyncSession,
        category: str | None,
        listing_type: str | None,
        search: str | None,
        cursor: str | None,
        limit: int,
    ) -> ItemListResponse:
        cursor_ts, cursor_id = cursor_decode(cursor)
        # Fetch one extra to detect has_more
        rows = await self._repo.list_active_items(
            db,
            category=category,
            listing_type=listing_type,
            search=search or None,
            cursor_ts=cursor_ts,
            cursor_id=cursor_id,
            limit=limit + 1,
        )
        has_more = len(rows) > limit
        page = rows[:limit]
        return ItemListResponse(
            items=[ItemOut.from_domain(i) for i in page],
            next_cursor=cursor_encode(page[-1]) if has_more and page else None,
            has_more=has_more,
        )

    async def list_seller_items(
        self, db: AsyncSession, seller_id: str, status: str | None = None
    ) -> SellerItemListResponse:
        """The seller's own items in every status, newest first."""
        rows = await self._repo.list_seller_items(db, seller_id, status, SELLER_ITEMS_LIMIT)
        return SellerItemListResponse(
            items=[SellerItemOut.from_seller_listing(r) for r in rows]
        )

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------

    async def create_listing(
        self, db: AsyncSession, seller_id: str, draft: ListingDraft
    ) -> CreateListingResponse:
        """Create an ACTIVE item, plus its auction for AUCTION listings.

        The quota check, the item/auction inserts and the counter increment
        share one transaction; the seller row stays locked until commit so two
        parallel creates cannot both spend the last slot.
        """
        validate_draft(draft)
        if draft.listing_type == ListingType.REGULAR.value:
            draft.start_price = draft.reserve_price = draft.auction_duration_hours = None
        else:
            draft.price = None
        now = utc_now()

        try:
            remaining = None
            if draft.listing_type == ListingType.AUCTION.value:
                quota = await self._repo.lock_seller_quota(db, seller_id)
                if quota is None:
                    raise InternalError(f"Seller record missing: {seller_id}")
                if check_auction_quota(quota, self._auction_limit, now):
                    await self._repo.reset_seller_quota(db, seller_id, now)
                    quota.auctions_used_this_month = 0
                remaining = self._auction_limit - quota.auctions_used_this_month - 1

            item = await self._repo.insert_item(db, seller_id, draft, now)
            auction = None
            if draft.listing_type == ListingType.AUCTION.value:
                start_price = draft.start_price or 0
                reserve = draft.reserve_price or start_price
                hours = draft.auction_duration_hours or self._default_duration
                auction = await self._repo.insert_auction(
                    db, item.id, start_price, reserve, auction_end_time(now, hours)
                )
                await self._repo.increment_seller_quota(db, seller_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Listing created: item=%s seller=%s type=%s",
            item.id, seller_id, item.listing_type,
        )
        return CreateListingResponse(
            item=ItemOut.from_domain(item),
            auction=AuctionOut.from_domain(auction) if auction else None,
            auctions_remaining_this_month=remaining,
        )

    # ------------------------------------------------------------------
    # cancel / relist
    # ------------------------------------------------------------------

    async def cancel_listing(
        self, db: AsyncSession, seller_id: str, item_id: str
    ) -> ListingStatusResponse:
        """ACTIVE -> CANCELLED. Auctions that already have bids cannot be withdrawn."""
        item = await self._repo.get_item(db, item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        if item.seller_id != seller_id:
            raise NotOwnerError(item_id)
        if item.status != ItemStatus.ACTIVE.value:
            raise InvalidStateError(f"Only active listings can be cancelled, item is {item.status}")

        try:
            updated = await self._repo.transition_item_status(
                db, item_id, frozenset({ItemStatus.ACTIVE.value}), ItemStatus.CANCELLED.value
            )
            if updated is None:
                raise InvalidStateError(f"Item {item_id} changed, refresh and retry")
            auction_active = None
            if item.listing_type == ListingType.AUCTION.value:
                # Deactivate first: the row lock makes any in-flight bid wait, then fail.
                await self._repo.set_auction_active(db, item_id, False)
                if await self._repo.count_bids_for_item(db, item_id) > 0:
                    raise InvalidStateError("Cannot cancel an auction that already has bids")
                auction_active = False
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Listing cancelled: item=%s seller=%s", item_id, seller_id)
        return ListingStatusResponse(
            item_id=item_id, status=updated.status, auction_active=auction_active
        )

    async def relist(
        self, db: AsyncSession, seller_id: str, item_id: str
    ) -> ListingStatusResponse:
        """SOLD/CANCELLED -> ACTIVE, reactivating the auction if there is one.

        The auction keeps its original end_time and current_price, so an
        auction relisted after its deadline is swept again on the next run.
        """
        item = await self._repo.get_item(db, item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        if item.seller_id != seller_id:
            raise NotOwnerError(item_id)
        if item.status not in RELISTABLE_ITEM_STATUSES:
            raise InvalidStateError(
                f"Only sold or cancelled items can be relisted, item is {item.status}"
            )

        try:
            if await self._repo.has_open_transaction(db, item_id):
                raise InvalidStateError(
                    "Item has an open transaction; confirm or cancel it before relisting"
                )
            updated = await self._repo.transition_item_status(
                db, item_id, RELISTABLE_ITEM_STATUSES, ItemStatus.ACTIVE.value
            )
            if updated is None:
                raise InvalidStateError(f"Item {item_id} changed, refresh and retry")
            auction_active = None
            if item.listing_type == ListingType.AUCTION.value:
                touched = await self._repo.set_auction_active(db, item_id, True)
                auction_active = True if touched else None
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Listing relisted: item=%s seller=%s", item_id, seller_id)
        return ListingStatusResponse(
            item_id=item_id, status=updated.status, auction_active=auction_active
        )

    # ------------------------------------------------------------------
    # admin removal
    # ------------------------------------------------------------------

    async def admin_delete(
        self, db: AsyncSession, admin_id: str, item_id: str, reason: str
    ) -> DeletedListing:
        """Permanently remove an item and everything it owns.

        Callers are responsible for admin gating (see ModerationApplicationService).
        """
        validate_admin_reason(reason)
        try:
            deleted = await self._repo.delete_item_cascade(db, item_id)
            if deleted is None:
                raise ItemNotFoundError(item_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.warning(
            "Listing removed by admin: item=%s admin=%s bids=%d reports=%d reason=%r",
            item_id, admin_id, deleted.bids_deleted, deleted.reports_deleted, reason,
        )
        await self._notifier.notify(
            deleted.seller_id,
            NotificationType.ITEM_REMOVED.value,
            "Your listing was removed",
            f'Your listing "{deleted.title}" was removed by a moderator. Reason: {reason.strip()}',
            related_item_id=None,
        )
        return deleted
