"""Pure pricing rules for a purchase."""

from src.dx_common.enums import ListingType, PaymentMethod, TransactionStatus
from src.dx_common.errors import InvalidStateError
from src.dx_common.money import calculate_commission
from src.dx_escrow.domain.models import PurchaseTarget


def sale_amount(target: PurchaseTarget) -> int:
    """Auction items sell at the current price, regular items at their fixed price."""
    if target.listing_type == ListingType.AUCTION.value:
        if target.auction_current_price is None:
            raise InvalidStateError(f"Auction item {target.item_id} has no auction")
        return target.auction_current_price
    if target.price is None:
        raise InvalidStateError(f"Item {target.item_id} has no price")
    return target.price


def sale_commission(listing_type: str, amount: int, commission_bps: int) -> int:
    """Only auction-originated sales carry commission."""
    if listing_type != ListingType.AUCTION.value:
        return 0
    return calculate_commission(amount, commission_bps)


def initial_status(payment_method: str) -> str:
    if payment_method == PaymentMethod.CARD.value:
        return TransactionStatus.FUNDS_HELD.value
    return TransactionStatus.PENDING.value
