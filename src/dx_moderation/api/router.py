"""dx_moderation REST endpoints.

POST   /reports                          — report an item
GET    /admin/reports                    — all reports, newest first (admin)
PATCH  /admin/items/{item_id}/reports    — set status of every report on an item (admin)
DELETE /admin/items/{item_id}            — remove a listing with a reason (admin)
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.dx_common.database import get_db_session
from src.dx_common.enums import ReportStatus
from src.dx_common.response import ApiResponse, success_response
from src.dx_gateway.auth.dependencies import get_current_user
from src.dx_gateway.user.db_models import UserModel
from src.dx_moderation.application.schemas import (
    RemoveListingRequest,
    ReportRequest,
    SetReportStatusRequest,
)
from src.dx_moderation.application.service import ModerationApplicationService
from src.dx_moderation.domain.admin_policy import AdminPolicy

router = APIRouter(tags=["moderation"])

_service = ModerationApplicationService(AdminPolicy.from_csv(settings.ADMIN_EMAILS))


@router.post("/reports", status_code=status.HTTP_201_CREATED)
async def report_item(
    body: ReportRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.report(
        db, str(current_user.id), str(body.item_id), body.reason.value, body.description
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/admin/reports")
async def list_reports(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    report_status: ReportStatus | None = Query(None, alias="status"),
) -> ApiResponse:
    result = await _service.list_reports(
        db, current_user.email, report_status.value if report_status else None
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.patch("/admin/items/{item_id}/reports")
async def set_report_status(
    item_id: uuid.UUID,
    body: SetReportStatusRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.set_report_status(
        db, current_user.email, str(item_id), body.status.value
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/admin/items/{item_id}")
async def remove_listing(
    item_id: uuid.UUID,
    body: RemoveListingRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.remove_listing(
        db, current_user.email, str(current_user.id), str(item_id), body.reason
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
