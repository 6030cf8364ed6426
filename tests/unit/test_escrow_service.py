# tests/unit/test_escrow_service.py
"""Unit tests for EscrowApplicationService — purchase, confirm, cancel."""
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.dx_common.errors import (
    InvalidStateError,
    ItemNotFoundError,
    ItemUnavailableError,
    NotPartyError,
    NotSellerError,
    PaymentMethodUnavailableError,
    SelfPurchaseError,
)
from src.dx_escrow.application.service import EscrowApplicationService
from src.dx_escrow.domain.models import PurchaseTarget, Transaction


def _target(**kwargs) -> PurchaseTarget:
    defaults = dict(
        item_id="item-1", seller_id="seller-1", title="Desk lamp", status="ACTIVE",
        listing_type="REGULAR", price=5000,
    )
    defaults.update(kwargs)
    return PurchaseTarget(**defaults)


def _txn(**kwargs) -> Transaction:
    defaults = dict(
        id="txn-1", item_id="item-1", buyer_id="buyer-1", seller_id="seller-1",
        amount=5000, commission_amount=0, payment_method="CASH_ON_MEET",
        status="PENDING", created_at=datetime.now(UTC), item_title="Desk lamp",
    )
    defaults.update(kwargs)
    return Transaction(**defaults)


def _echo_insert(db, **kwargs) -> Transaction:
    return _txn(
        amount=kwargs["amount"],
        commission_amount=kwargs["commission_amount"],
        payment_method=kwargs["payment_method"],
        status=kwargs["status"],
        payment_reference=kwargs["payment_reference"],
        seller_id=kwargs["seller_id"],
        buyer_id=kwargs["buyer_id"],
    )


@pytest.fixture
def db():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def mock_repo():
    repo = MagicMock()
    repo.deactivate_auction = AsyncMock(return_value=None)
    repo.insert_transaction = AsyncMock(side_effect=_echo_insert)
    repo.restore_item_active = AsyncMock(return_value=True)
    repo.reactivate_auction = AsyncMock(return_value=False)
    return repo


@pytest.fixture
def notifier():
    n = MagicMock()
    n.notify = AsyncMock()
    return n


def _service(mock_repo, notifier, gateway=None) -> EscrowApplicationService:
    return EscrowApplicationService(
        repo=mock_repo, gateway=gateway, notifier=notifier, commission_bps=500
    )


class TestPurchase:
    async def test_cash_regular_sale(self, db, mock_repo, notifier):
        mock_repo.get_purchase_target = AsyncMock(return_value=_target())
        mock_repo.mark_item_sold = AsyncMock(return_value=_target(status="SOLD"))
        svc = _service(mock_repo, notifier)

        txn = await svc.purchase(db, "buyer-1", "item-1", "CASH_ON_MEET")

        assert txn.status == "PENDING"
        assert txn.amount == 5000
        assert txn.commission_amount == 0
        db.commit.assert_awaited_once()
        # Seller hears about the buyer
        args = notifier.notify.call_args.args
        assert args[0] == "seller-1"
        assert args[1] == "ITEM_SOLD"

    async def test_auction_sale_uses_final_price_and_commission(self, db, mock_repo, notifier):
        mock_repo.get_purchase_target = AsyncMock(return_value=_target(
            listing_type="AUCTION", price=None, auction_id="auc-1", auction_current_price=1500,
        ))
        mock_repo.mark_item_sold = AsyncMock(return_value=_target(
            listing_type="AUCTION", price=None, status="SOLD"
        ))
        # A last bid landed between the read and the lock
        mock_repo.deactivate_auction = AsyncMock(return_value=1700)
        svc = _service(mock_repo, notifier)

        txn = await svc.purchase(db, "buyer-1", "item-1")

        assert txn.amount == 1700
        assert txn.commission_amount == 85  # ceil(1700 * 5%)
        assert txn.seller_receives == 1615

    async def test_self_purchase(self, db, mock_repo, notifier):
        mock_repo.get_purchase_target = AsyncMock(return_value=_target())
        svc = _service(mock_repo, notifier)
        with pytest.raises(SelfPurchaseError):
            await svc.purchase(db, "seller-1", "item-1")

    async def test_not_active(self, db, mock_repo, notifier):
        mock_repo.get_purchase_target = AsyncMock(return_value=_target(status="SOLD"))
        svc = _service(mock_repo, notifier)
        with pytest.raises(ItemUnavailableError):
            await svc.purchase(db, "buyer-1", "item-1")

    async def test_missing_item(self, db, mock_repo, notifier):
        mock_repo.get_purchase_target = AsyncMock(return_value=None)
        svc = _service(mock_repo, notifier)
        with pytest.raises(ItemNotFoundError):
            await svc.purchase(db, "buyer-1", "item-1")

    async def test_loser_of_race_sees_unavailable(self, db, mock_repo, notifier):
        mock_repo.get_purchase_target = AsyncMock(return_value=_target())
        mock_repo.mark_item_sold = AsyncMock(return_value=None)
        svc = _service(mock_repo, notifier)

        with pytest.raises(ItemUnavailableError):
            await svc.purchase(db, "buyer-2", "item-1")

        mock_repo.insert_transaction.assert_not_awaited()
        db.rollback.assert_awaited_once()
        notifier.notify.assert_not_awaited()

    async def test_open_transaction_index_violation(self, db, mock_repo, notifier):
        mock_repo.get_purchase_target = AsyncMock(return_value=_target())
        mock_repo.mark_item_sold = AsyncMock(return_value=_target(status="SOLD"))
        mock_repo.insert_transaction = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("uq_transactions_open_item"))
        )
        svc = _service(mock_repo, notifier)

        with pytest.raises(ItemUnavailableError):
            await svc.purchase(db, "buyer-1", "item-1")
        db.rollback.assert_awaited_once()

    async def test_card_without_gateway(self, db, mock_repo, notifier):
        mock_repo.get_purchase_target = AsyncMock(return_value=_target())
        mock_repo.mark_item_sold = AsyncMock()
        svc = _service(mock_repo, notifier)

        with pytest.raises(PaymentMethodUnavailableError):
            await svc.purchase(db, "buyer-1", "item-1", "CARD")
        mock_repo.mark_item_sold.assert_not_awaited()

    async def test_card_holds_funds(self, db, mock_repo, notifier):
        gateway = MagicMock()
        gateway.authorize = AsyncMock(return_value="auth-42")
        gateway.release = AsyncMock()
        mock_repo.get_purchase_target = AsyncMock(return_value=_target())
        mock_repo.mark_item_sold = AsyncMock(return_value=_target(status="SOLD"))
        svc = _service(mock_repo, notifier, gateway=gateway)

        txn = await svc.purchase(db, "buyer-1", "item-1", "CARD")

        assert txn.status == "FUNDS_HELD"
        assert mock_repo.insert_transaction.call_args.kwargs["payment_reference"] == "auth-42"
        gateway.release.assert_not_awaited()

    async def test_card_released_when_purchase_fails(self, db, mock_repo, notifier):
        gateway = MagicMock()
        gateway.authorize = AsyncMock(return_value="auth-42")
        gateway.release = AsyncMock()
        mock_repo.get_purchase_target = AsyncMock(return_value=_target())
        mock_repo.mark_item_sold = AsyncMock(return_value=None)
        svc = _service(mock_repo, notifier, gateway=gateway)

        with pytest.raises(ItemUnavailableError):
            await svc.purchase(db, "buyer-1", "item-1", "CARD")
        gateway.release.assert_awaited_once_with("auth-42")


class TestConfirm:
    async def test_seller_confirms_then_second_confirm_fails(self, db, mock_repo, notifier):
        completed = _txn(status="COMPLETED", completed_at=datetime.now(UTC))
        mock_repo.get_transaction = AsyncMock(side_effect=[_txn(), completed])
        mock_repo.transition_status = AsyncMock(return_value=completed)
        svc = _service(mock_repo, notifier)

        resp = await svc.confirm(db, "seller-1", "txn-1")

        assert resp.status == "COMPLETED"
        assert resp.completed_at is not None
        args = notifier.notify.call_args.args
        assert args[0] == "buyer-1"
        assert args[1] == "TRANSACTION_COMPLETED"

        with pytest.raises(InvalidStateError):
            await svc.confirm(db, "seller-1", "txn-1")
        assert mock_repo.transition_status.await_count == 1

    async def test_buyer_cannot_confirm(self, db, mock_repo, notifier):
        mock_repo.get_transaction = AsyncMock(return_value=_txn())
        mock_repo.transition_status = AsyncMock()
        svc = _service(mock_repo, notifier)

        with pytest.raises(NotSellerError):
            await svc.confirm(db, "buyer-1", "txn-1")
        mock_repo.transition_status.assert_not_awaited()

    async def test_confirm_race_lost(self, db, mock_repo, notifier):
        mock_repo.get_transaction = AsyncMock(return_value=_txn())
        mock_repo.transition_status = AsyncMock(return_value=None)
        svc = _service(mock_repo, notifier)

        with pytest.raises(InvalidStateError):
            await svc.confirm(db, "seller-1", "txn-1")
        db.rollback.assert_awaited_once()
        notifier.notify.assert_not_awaited()

    async def test_funds_held_is_captured(self, db, mock_repo, notifier):
        gateway = MagicMock()
        gateway.capture = AsyncMock()
        held = _txn(status="FUNDS_HELD", payment_method="CARD", payment_reference="auth-42")
        mock_repo.get_transaction = AsyncMock(return_value=held)
        mock_repo.transition_status = AsyncMock(return_value=_txn(
            status="COMPLETED", completed_at=datetime.now(UTC)
        ))
        svc = _service(mock_repo, notifier, gateway=gateway)

        await svc.confirm(db, "seller-1", "txn-1")

        gateway.capture.assert_awaited_once_with("auth-42")
        assert mock_repo.transition_status.call_args.args[2] == "FUNDS_HELD"

    async def test_failed_commit_does_not_capture(self, db, mock_repo, notifier):
        gateway = MagicMock()
        gateway.capture = AsyncMock()
        held = _txn(status="FUNDS_HELD", payment_method="CARD", payment_reference="auth-42")
        mock_repo.get_transaction = AsyncMock(return_value=held)
        mock_repo.transition_status = AsyncMock(return_value=_txn(status="COMPLETED"))
        db.commit = AsyncMock(side_effect=RuntimeError("connection lost"))
        svc = _service(mock_repo, notifier, gateway=gateway)

        with pytest.raises(RuntimeError):
            await svc.confirm(db, "seller-1", "txn-1")

        db.rollback.assert_awaited_once()
        gateway.capture.assert_not_awaited()

    async def test_capture_follows_commit(self, db, mock_repo, notifier):
        order: list[str] = []
        gateway = MagicMock()
        gateway.capture = AsyncMock(side_effect=lambda ref: order.append("capture"))
        db.commit = AsyncMock(side_effect=lambda: order.append("commit"))
        mock_repo.get_transaction = AsyncMock(return_value=_txn(
            status="FUNDS_HELD", payment_method="CARD", payment_reference="auth-42"
        ))
        mock_repo.transition_status = AsyncMock(return_value=_txn(status="COMPLETED"))
        svc = _service(mock_repo, notifier, gateway=gateway)

        await svc.confirm(db, "seller-1", "txn-1")

        assert order == ["commit", "capture"]


class TestCancel:
    async def test_cancel_restores_item_and_auction(self, db, mock_repo, notifier):
        mock_repo.get_transaction = AsyncMock(return_value=_txn())
        mock_repo.transition_status = AsyncMock(return_value=_txn(status="CANCELLED"))
        mock_repo.reactivate_auction = AsyncMock(return_value=True)
        svc = _service(mock_repo, notifier)

        resp = await svc.cancel(db, "seller-1", "txn-1")

        assert resp.status == "CANCELLED"
        mock_repo.restore_item_active.assert_awaited_once_with(db, "item-1")
        mock_repo.reactivate_auction.assert_awaited_once_with(db, "item-1")
        db.commit.assert_awaited_once()
        assert notifier.notify.call_args.args[1] == "TRANSACTION_CANCELLED"

    async def test_cannot_cancel_completed(self, db, mock_repo, notifier):
        mock_repo.get_transaction = AsyncMock(return_value=_txn(status="COMPLETED"))
        svc = _service(mock_repo, notifier)
        with pytest.raises(InvalidStateError):
            await svc.cancel(db, "seller-1", "txn-1")

    async def test_funds_held_released(self, db, mock_repo, notifier):
        gateway = MagicMock()
        gateway.release = AsyncMock()
        mock_repo.get_transaction = AsyncMock(return_value=_txn(
            status="FUNDS_HELD", payment_method="CARD", payment_reference="auth-7"
        ))
        mock_repo.transition_status = AsyncMock(return_value=_txn(status="CANCELLED"))
        svc = _service(mock_repo, notifier, gateway=gateway)

        await svc.cancel(db, "seller-1", "txn-1")
        gateway.release.assert_awaited_once_with("auth-7")

    async def test_failed_commit_keeps_hold(self, db, mock_repo, notifier):
        gateway = MagicMock()
        gateway.release = AsyncMock()
        mock_repo.get_transaction = AsyncMock(return_value=_txn(
            status="FUNDS_HELD", payment_method="CARD", payment_reference="auth-7"
        ))
        mock_repo.transition_status = AsyncMock(return_value=_txn(status="CANCELLED"))
        db.commit = AsyncMock(side_effect=RuntimeError("connection lost"))
        svc = _service(mock_repo, notifier, gateway=gateway)

        with pytest.raises(RuntimeError):
            await svc.cancel(db, "seller-1", "txn-1")

        gateway.release.assert_not_awaited()


class TestReads:
    async def test_party_only(self, db, mock_repo, notifier):
        mock_repo.get_transaction = AsyncMock(return_value=_txn())
        svc = _service(mock_repo, notifier)

        assert (await svc.get_transaction(db, "buyer-1", "txn-1")).id == "txn-1"
        with pytest.raises(NotPartyError):
            await svc.get_transaction(db, "stranger", "txn-1")

    async def test_list_passes_role(self, db, mock_repo, notifier):
        mock_repo.list_for_user = AsyncMock(return_value=[_txn()])
        svc = _service(mock_repo, notifier)

        resp = await svc.list_transactions(db, "buyer-1", "buyer")

        assert len(resp.transactions) == 1
        assert mock_repo.list_for_user.call_args.args[2] == "buyer"
