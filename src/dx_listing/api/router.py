"""dx_listing REST endpoints.

GET  /items                        — active listings with cursor pagination
POST /items                        — create a listing (auction quota enforced)
GET  /items/mine                   — the caller's own items in every status
GET  /items/{item_id}              — detail, with auction and bids for AUCTION items
POST /items/{item_id}/cancel       — seller withdraws an active listing
POST /items/{item_id}/relist       — seller puts a sold/cancelled item back on sale
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_common.database import get_db_session
from src.dx_common.enums import ItemStatus, ListingType
from src.dx_common.response import ApiResponse, success_response
from src.dx_gateway.auth.dependencies import get_current_user
from src.dx_gateway.user.db_models import UserModel
from src.dx_listing.application.schemas import CreateListingRequest
from src.dx_listing.application.service import ListingApplicationService

router = APIRouter(prefix="/items", tags=["items"])

_service = ListingApplicationService()


@router.get("")
async def list_items(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    category: str | None = Query(None),
    listing_type: ListingType | None = Query(None),
    search: str | None = Query(None, max_length=100),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await _service.list_items(
        db,
        category,
        listing_type.value if listing_type else None,
        search,
        cursor,
        limit,
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_listing(
    body: CreateListingRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_listing(db, str(current_user.id), body.to_draft())
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/mine")
async def list_my_items(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status_filter: ItemStatus | None = Query(None, alias="status"),
) -> ApiResponse:
    result = await _service.list_seller_items(
        db, str(current_user.id), status_filter.value if status_filter else None
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{item_id}")
async def get_item(
    item_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_item(db, str(item_id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{item_id}/cancel")
async def cancel_listing(
    item_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.cancel_listing(db, str(current_user.id), str(item_id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/{item_id}/relist")
async def relist(
    item_id: uuid.UUID,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.relist(db, str(current_user.id), str(item_id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
