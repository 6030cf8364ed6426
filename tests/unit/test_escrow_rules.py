"""Tests for purchase pricing rules."""

import pytest

from src.dx_common.errors import InvalidStateError
from src.dx_escrow.domain.models import PurchaseTarget
from src.dx_escrow.domain.rules import initial_status, sale_amount, sale_commission


def _target(**kwargs) -> PurchaseTarget:
    defaults = dict(
        item_id="item-1", seller_id="seller-1", title="Lamp", status="ACTIVE",
        listing_type="REGULAR", price=5000,
    )
    defaults.update(kwargs)
    return PurchaseTarget(**defaults)


def test_regular_uses_item_price() -> None:
    assert sale_amount(_target()) == 5000


def test_auction_uses_current_price() -> None:
    target = _target(listing_type="AUCTION", price=None, auction_current_price=1500)
    assert sale_amount(target) == 1500


def test_auction_without_auction_row() -> None:
    with pytest.raises(InvalidStateError):
        sale_amount(_target(listing_type="AUCTION", price=None))


def test_regular_sale_has_no_commission() -> None:
    assert sale_commission("REGULAR", 5000, 500) == 0


def test_auction_commission_rounds_up() -> None:
    assert sale_commission("AUCTION", 1001, 500) == 51


def test_initial_status() -> None:
    assert initial_status("CASH_ON_MEET") == "PENDING"
    assert initial_status("CARD") == "FUNDS_HELD"
