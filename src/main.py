"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
The auction sweep runs separately: python -m src.dx_auction.jobs.sweep_runner
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from config.settings import settings
from src.dx_auction.api.router import router as auction_router
from src.dx_common.database import check_connection, engine
from src.dx_common.errors import AppError
from src.dx_common.response import error_response
from src.dx_escrow.api.router import router as transaction_router
from src.dx_gateway.middleware.request_log import RequestLogMiddleware
from src.dx_listing.api.router import router as item_router
from src.dx_messaging.api.router import router as message_router
from src.dx_moderation.api.router import router as moderation_router
from src.dx_notify.api.router import router as notification_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the DB connection and schema. Shutdown: dispose."""
    await check_connection()
    if not settings.ADMIN_EMAILS.strip():
        logger.warning("ADMIN_EMAILS is empty: admin endpoints will reject everyone")
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.retryable)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(item_router, prefix="/api/v1")
app.include_router(auction_router, prefix="/api/v1")
app.include_router(transaction_router, prefix="/api/v1")
app.include_router(moderation_router, prefix="/api/v1")
app.include_router(notification_router, prefix="/api/v1")
app.include_router(message_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
