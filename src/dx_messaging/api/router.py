"""dx_messaging REST endpoints.

GET  /messages/conversations     — one row per chat partner, latest first
GET  /messages?partner_id=...    — thread with one user (marks it read)
POST /messages                   — send a message
POST /messages/read              — mark a thread read without fetching it
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_common.database import get_db_session
from src.dx_common.response import ApiResponse, success_response
from src.dx_gateway.auth.dependencies import get_current_user
from src.dx_gateway.user.db_models import UserModel
from src.dx_messaging.application.schemas import MarkThreadReadRequest, SendMessageRequest
from src.dx_messaging.application.service import MessagingApplicationService

router = APIRouter(prefix="/messages", tags=["messages"])

_service = MessagingApplicationService()


@router.get("/conversations")
async def list_conversations(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_conversations(db, str(current_user.id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def get_thread(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    partner_id: uuid.UUID = Query(...),
) -> ApiResponse:
    result = await _service.get_thread(db, str(current_user.id), str(partner_id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=status.HTTP_201_CREATED)
async def send_message(
    body: SendMessageRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.send(
        db,
        str(current_user.id),
        current_user.name,
        str(body.receiver_id),
        body.content,
        str(body.item_id) if body.item_id else None,
    )
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/read")
async def mark_thread_read(
    body: MarkThreadReadRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.mark_thread_read(db, str(current_user.id), str(body.partner_id))
    resp = success_response(result.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
