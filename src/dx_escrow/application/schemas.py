"""Pydantic schemas for dx_escrow API."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from src.dx_common.enums import PaymentMethod
from src.dx_common.money import kopecks_to_display
from src.dx_escrow.domain.models import Transaction


class PurchaseRequest(BaseModel):
    item_id: uuid.UUID
    payment_method: PaymentMethod = PaymentMethod.CASH_ON_MEET
    meeting_scheduled: datetime | None = None


class TransactionOut(BaseModel):
    id: str
    item_id: str
    item_title: str | None
    buyer_id: str
    seller_id: str
    amount: int
    amount_display: str
    commission_amount: int
    seller_receives: int
    payment_method: str
    status: str
    meeting_scheduled: str | None
    completed_at: str | None
    created_at: str

    @classmethod
    def from_domain(cls, txn: Transaction) -> "TransactionOut":
        return cls(
            id=txn.id,
            item_id=txn.item_id,
            item_title=txn.item_title,
            buyer_id=txn.buyer_id,
            seller_id=txn.seller_id,
            amount=txn.amount,
            amount_display=kopecks_to_display(txn.amount),
            commission_amount=txn.commission_amount,
            seller_receives=txn.amount - txn.commission_amount,
            payment_method=txn.payment_method,
            status=txn.status,
            meeting_scheduled=txn.meeting_scheduled.isoformat() if txn.meeting_scheduled else None,
            completed_at=txn.completed_at.isoformat() if txn.completed_at else None,
            created_at=txn.created_at.isoformat(),
        )


class TransactionListResponse(BaseModel):
    transactions: list[TransactionOut]


TransactionRole = Literal["buyer", "seller"]
