"""dx_notify REST endpoints.

GET  /notifications         — latest 50, optionally unread only
POST /notifications/read    — mark a batch as read
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_common.database import get_db_session
from src.dx_common.response import ApiResponse, success_response
from src.dx_gateway.auth.dependencies import get_current_user
from src.dx_gateway.user.db_models import UserModel
from src.dx_notify.application.schemas import MarkReadRequest
from src.dx_notify.application.service import NotificationApplicationService

router = APIRouter(prefix="/notifications", tags=["notifications"])

_service = NotificationApplicationService()


@router.get("")
async def list_notifications(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    unread_only: bool = Query(False),
) -> ApiResponse:
    result = await _service.list_notifications(db, str(current_user.id), unread_only)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/read")
async def mark_read(
    body: MarkReadRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    ids = [str(i) for i in body.notification_ids]
    result = await _service.mark_read(db, str(current_user.id), ids)
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
