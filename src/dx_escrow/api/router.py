"""dx_escrow REST endpoints.

POST /transactions                            — buy an item (cash on meet, or card if configured)
GET  /transactions                            — my purchases and sales
GET  /transactions/{transaction_id}           — detail (buyer or seller only)
POST /transactions/{transaction_id}/confirm   — seller confirms payment received
POST /transactions/{transaction_id}/cancel    — seller cancels, item goes back on sale
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_common.database import get_db_session
from src.dx_common.response import ApiResponse, success_response
from src.dx_escrow.application.schemas import PurchaseRequest, TransactionRole
from src.dx_escrow.application.service import EscrowApplicationService
from src.dx_gateway.auth.dependencies import get_current_user
from src.dx_gateway.user.db_models import UserModel

router = APIRouter(prefix="/transactions", tags=["transactions"])

_service = EscrowApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def purchase(
    body: PurchaseRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.purchase(
        db,
        str(current_user.id),
        str(body.item_id),
        body.payment_method.value,
        body.meeting_scheduled,
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_transactions(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    role: TransactionRole | None = Query(None),
) -> ApiResponse:
    result = await _service.list_transactions(db, str(current_user.id), role)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_transaction(db, str(current_user.id), str(transaction_id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{transaction_id}/confirm")
async def confirm(
    transaction_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.confirm(db, str(current_user.id), str(transaction_id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{transaction_id}/cancel")
async def cancel(
    transaction_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.cancel(db, str(current_user.id), str(transaction_id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
