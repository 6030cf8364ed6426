"""EscrowApplicationService — purchase and the seller-side handshake.

State machine per transaction:
    PENDING | FUNDS_HELD  --confirm-->  COMPLETED
    PENDING | FUNDS_HELD  --cancel-->   CANCELLED  (item back to ACTIVE)

Only the seller moves a transaction out of PENDING: a buyer cannot mark a
cash sale as paid. Each method is a single DB transaction; notifications go
out after commit.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.dx_common.datetime_utils import utc_now
from src.dx_common.enums import (
    OPEN_TRANSACTION_STATUSES,
    ItemStatus,
    ListingType,
    NotificationType,
    PaymentMethod,
    TransactionStatus,
)
from src.dx_common.errors import (
    InvalidStateError,
    ItemNotFoundError,
    ItemUnavailableError,
    NotPartyError,
    NotSellerError,
    SelfPurchaseError,
    TransactionNotFoundError,
)
from src.dx_common.money import kopecks_to_display
from src.dx_escrow.application.schemas import TransactionListResponse, TransactionOut
from src.dx_escrow.domain.gateway import CashOnlyGateway, PaymentGatewayProtocol
from src.dx_escrow.domain.models import Transaction
from src.dx_escrow.domain.repository import TransactionRepositoryProtocol
from src.dx_escrow.domain.rules import initial_status, sale_amount, sale_commission
from src.dx_escrow.infrastructure.persistence import TransactionRepository
from src.dx_notify.application.service import Notifier
from src.dx_notify.domain.repository import NotifierProtocol

logger = logging.getLogger(__name__)

LIST_LIMIT = 100


class EscrowApplicationService:
    def __init__(
        self,
        repo: TransactionRepositoryProtocol | None = None,
        gateway: PaymentGatewayProtocol | None = None,
        notifier: NotifierProtocol | None = None,
        commission_bps: int | None = None,
    ) -> None:
        self._repo: TransactionRepositoryProtocol = repo or TransactionRepository()
        self._gateway: PaymentGatewayProtocol = gateway or CashOnlyGateway()
        self._notifier: NotifierProtocol = notifier or Notifier()
        self._commission_bps = (
            commission_bps if commission_bps is not None else settings.AUCTION_COMMISSION_BPS
        )

    # ------------------------------------------------------------------
    # purchase
    # ------------------------------------------------------------------

    async def purchase(
        self,
        db: AsyncSession,
        buyer_id: str,
        item_id: str,
        payment_method: str = PaymentMethod.CASH_ON_MEET.value,
        meeting_scheduled: datetime | None = None,
    ) -> TransactionOut:
        """Commit a buyer to an item.

        Steps (single DB transaction):
        1. ACTIVE -> SOLD conditional update (the loser of a race stops here)
        2. Close the auction, if any, taking its final current_price
        3. Insert the PENDING / FUNDS_HELD transaction
        """
        now = utc_now()
        target = await self._repo.get_purchase_target(db, item_id)
        if target is None:
            raise ItemNotFoundError(item_id)
        if target.seller_id == buyer_id:
            raise SelfPurchaseError()
        if target.status != ItemStatus.ACTIVE.value:
            raise ItemUnavailableError(item_id)
        quoted = sale_amount(target)

        reference = None
        if payment_method == PaymentMethod.CARD.value:
            reference = await self._gateway.authorize(buyer_id, quoted, item_id)

        try:
            sold = await self._repo.mark_item_sold(db, item_id)
            if sold is None:
                raise ItemUnavailableError(item_id)
            amount = sold.price if sold.price is not None else quoted
            final_price = await self._repo.deactivate_auction(db, item_id)
            if sold.listing_type == ListingType.AUCTION.value and final_price is not None:
                amount = final_price
            if reference is not None and amount != quoted:
                raise InvalidStateError(
                    f"Price changed from {kopecks_to_display(quoted)} to "
                    f"{kopecks_to_display(amount)}, refresh and retry"
                )
            txn = await self._repo.insert_transaction(
                db,
                item_id=item_id,
                buyer_id=buyer_id,
                seller_id=sold.seller_id,
                amount=amount,
                commission_amount=sale_commission(sold.listing_type, amount, self._commission_bps),
                payment_method=payment_method,
                status=initial_status(payment_method),
                payment_reference=reference,
                meeting_scheduled=meeting_scheduled,
                now=now,
            )
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            await self._release_quietly(reference)
            raise ItemUnavailableError(item_id) from exc
        except Exception:
            await db.rollback()
            await self._release_quietly(reference)
            raise

        logger.info(
            "Purchase: txn=%s item=%s buyer=%s amount=%d commission=%d method=%s",
            txn.id, item_id, buyer_id, txn.amount, txn.commission_amount, payment_method,
        )
        await self._notifier.notify(
            txn.seller_id,
            NotificationType.ITEM_SOLD.value,
            "Your item has a buyer!",
            f'Someone committed to buy "{target.title}" for {kopecks_to_display(txn.amount)}. '
            "Arrange a meetup and confirm the sale once you are paid.",
            related_item_id=item_id,
            related_transaction_id=txn.id,
        )
        txn.item_title = target.title
        return TransactionOut.from_domain(txn)

    # ------------------------------------------------------------------
    # confirm / cancel (seller only)
    # ------------------------------------------------------------------

    async def confirm(
        self, db: AsyncSession, seller_id: str, transaction_id: str
    ) -> TransactionOut:
        txn = await self._load_for_seller(db, seller_id, transaction_id)
        now = utc_now()
        try:
            updated = await self._repo.transition_status(
                db, transaction_id, txn.status, TransactionStatus.COMPLETED.value, now
            )
            if updated is None:
                raise InvalidStateError(f"Transaction {transaction_id} changed, refresh and retry")
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        # Capture only once the ledger says COMPLETED
        if txn.status == TransactionStatus.FUNDS_HELD.value and txn.payment_reference:
            try:
                await self._gateway.capture(txn.payment_reference)
            except Exception:
                logger.exception(
                    "Capture failed for completed txn=%s ref=%s, needs reconciliation",
                    transaction_id, txn.payment_reference,
                )
                raise

        logger.info("Transaction completed: txn=%s seller=%s", transaction_id, seller_id)
        title = txn.item_title or "your item"
        await self._notifier.notify(
            txn.buyer_id,
            NotificationType.TRANSACTION_COMPLETED.value,
            "Purchase completed",
            f'The seller confirmed the sale of "{title}". Enjoy!',
            related_item_id=txn.item_id,
            related_transaction_id=transaction_id,
        )
        updated.item_title = txn.item_title
        return TransactionOut.from_domain(updated)

    async def cancel(
        self, db: AsyncSession, seller_id: str, transaction_id: str
    ) -> TransactionOut:
        """Cancel an open transaction and put the item back on sale."""
        txn = await self._load_for_seller(db, seller_id, transaction_id)
        try:
            updated = await self._repo.transition_status(
                db, transaction_id, txn.status, TransactionStatus.CANCELLED.value, None
            )
            if updated is None:
                raise InvalidStateError(f"Transaction {transaction_id} changed, refresh and retry")
            if not await self._repo.restore_item_active(db, txn.item_id):
                logger.warning(
                    "Cancelled txn=%s but item=%s was not SOLD (removed?)",
                    transaction_id, txn.item_id,
                )
            await self._repo.reactivate_auction(db, txn.item_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if txn.status == TransactionStatus.FUNDS_HELD.value:
            await self._release_quietly(txn.payment_reference)

        logger.info("Transaction cancelled: txn=%s seller=%s", transaction_id, seller_id)
        title = txn.item_title or "your item"
        await self._notifier.notify(
            txn.buyer_id,
            NotificationType.TRANSACTION_CANCELLED.value,
            "Purchase cancelled",
            f'The seller cancelled the sale of "{title}".',
            related_item_id=txn.item_id,
            related_transaction_id=transaction_id,
        )
        updated.item_title = txn.item_title
        return TransactionOut.from_domain(updated)

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    async def get_transaction(
        self, db: AsyncSession, user_id: str, transaction_id: str
    ) -> TransactionOut:
        txn = await self._repo.get_transaction(db, transaction_id)
        if txn is None:
            raise TransactionNotFoundError(transaction_id)
        if user_id not in (txn.buyer_id, txn.seller_id):
            raise NotPartyError(transaction_id)
        return TransactionOut.from_domain(txn)

    async def list_transactions(
        self, db: AsyncSession, user_id: str, role: str | None = None
    ) -> TransactionListResponse:
        rows = await self._repo.list_for_user(db, user_id, role, LIST_LIMIT)
        return TransactionListResponse(transactions=[TransactionOut.from_domain(t) for t in rows])

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    async def _load_for_seller(
        self, db: AsyncSession, seller_id: str, transaction_id: str
    ) -> Transaction:
        txn = await self._repo.get_transaction(db, transaction_id)
        if txn is None:
            raise TransactionNotFoundError(transaction_id)
        if txn.seller_id != seller_id:
            raise NotSellerError(transaction_id)
        if txn.status not in OPEN_TRANSACTION_STATUSES:
            raise InvalidStateError(
                f"Transaction {transaction_id} is {txn.status}, only open transactions can change"
            )
        return txn

    async def _release_quietly(self, reference: str | None) -> None:
        if reference is None:
            return
        try:
            await self._gateway.release(reference)
        except Exception:
            logger.exception("Failed to release card authorization %s", reference)
