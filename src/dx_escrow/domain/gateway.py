"""Payment gateway seam for the card path.

A card purchase authorizes funds up front (transaction FUNDS_HELD), captures
them when the seller confirms, and releases them on cancel or on a failed
purchase. The cash path never touches the gateway.
"""

from typing import Protocol

from src.dx_common.enums import PaymentMethod
from src.dx_common.errors import PaymentMethodUnavailableError


class PaymentGatewayProtocol(Protocol):
    async def authorize(self, buyer_id: str, amount: int, item_id: str) -> str:
        """Hold funds; return the gateway reference used for capture/release."""
        ...

    async def capture(self, reference: str) -> None: ...

    async def release(self, reference: str) -> None: ...


class CashOnlyGateway:
    """Default gateway: no card processor is configured."""

    async def authorize(self, buyer_id: str, amount: int, item_id: str) -> str:
        raise PaymentMethodUnavailableError(PaymentMethod.CARD.value)

    async def capture(self, reference: str) -> None:
        raise PaymentMethodUnavailableError(PaymentMethod.CARD.value)

    async def release(self, reference: str) -> None:
        raise PaymentMethodUnavailableError(PaymentMethod.CARD.value)
