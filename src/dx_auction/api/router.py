"""dx_auction REST endpoints.

GET  /auctions/process-ended        — count of expired auctions awaiting the sweep (admin)
POST /auctions/process-ended        — run the sweep now (admin)
GET  /auctions/{auction_id}         — auction detail with bid history
POST /auctions/{auction_id}/bids    — place a bid
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.dx_auction.application.schemas import (
    PendingSweepResponse,
    PlaceBidRequest,
    SweepResponse,
)
from src.dx_auction.application.service import AuctionApplicationService
from src.dx_auction.application.sweep import AuctionSweeper
from src.dx_common.database import get_db_session
from src.dx_common.response import ApiResponse, success_response
from src.dx_gateway.auth.dependencies import admin_dependency, get_current_user
from src.dx_gateway.user.db_models import UserModel
from src.dx_moderation.domain.admin_policy import AdminPolicy

router = APIRouter(prefix="/auctions", tags=["auctions"])

_service = AuctionApplicationService()
_sweeper = AuctionSweeper()
require_admin = admin_dependency(AdminPolicy.from_csv(settings.ADMIN_EMAILS))


# Declared before /{auction_id} so the literal path wins the match.
@router.get("/process-ended")
async def pending_ended(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    pending = await _sweeper.pending_count(db)
    resp = success_response(PendingSweepResponse(pending_ended_auctions=pending).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/process-ended")
async def process_ended(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _sweeper.sweep_ended(db)
    resp = success_response(SweepResponse.from_result(result).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{auction_id}")
async def get_auction(
    auction_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_auction(db, str(auction_id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{auction_id}/bids", status_code=status.HTTP_201_CREATED)
async def place_bid(
    auction_id: uuid.UUID,
    body: PlaceBidRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.place_bid(db, str(current_user.id), str(auction_id), body.amount)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
