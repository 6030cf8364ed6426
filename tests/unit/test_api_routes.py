# tests/unit/test_api_routes.py
"""Router-level tests: auth, admin gating and the error envelope.

Services are replaced with mocks; no database is touched.
"""
import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.dx_auction.api import router as auction_router
from src.dx_auction.domain.models import SweepResult
from src.dx_common.database import get_db_session
from src.dx_common.errors import BidTooLowError, SelfBidError
from src.dx_gateway.auth.dependencies import get_current_user
from src.dx_listing.api import router as listing_router
from src.dx_listing.application.schemas import SellerItemListResponse
from src.dx_messaging.api import router as messaging_router
from src.dx_messaging.application.schemas import MessageOut
from src.main import app

USER = SimpleNamespace(
    id=uuid.uuid4(), email="student@dorm.test", name="Alex", is_active=True
)
ADMIN = SimpleNamespace(id=uuid.uuid4(), email="admin@dorm.test", is_active=True)


async def _fake_db():
    yield MagicMock()


@pytest.fixture
def as_user():
    app.dependency_overrides[get_current_user] = lambda: USER
    app.dependency_overrides[get_db_session] = _fake_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def as_admin():
    app.dependency_overrides[get_current_user] = lambda: ADMIN
    app.dependency_overrides[get_db_session] = _fake_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def auction_service(monkeypatch):
    svc = MagicMock()
    monkeypatch.setattr(auction_router, "_service", svc)
    return svc


@pytest.fixture
def sweeper(monkeypatch):
    sw = MagicMock()
    monkeypatch.setattr(auction_router, "_sweeper", sw)
    return sw


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_requires_token(client):
    resp = await client.get(f"/api/v1/items/{uuid.uuid4()}")
    assert resp.status_code == 401


class TestErrorEnvelope:
    async def test_state_conflict_is_409_and_retryable(self, client, as_user, auction_service):
        auction_service.place_bid = AsyncMock(side_effect=BidTooLowError(1200, 1500))

        resp = await client.post(
            f"/api/v1/auctions/{uuid.uuid4()}/bids", json={"amount": 1200}
        )

        assert resp.status_code == 409
        body = resp.json()
        assert body["code"] == 3003
        assert body["data"] == {"retryable": True}
        assert resp.headers["X-Request-ID"] == body["request_id"]

    async def test_authorization_is_403_not_retryable(self, client, as_user, auction_service):
        auction_service.place_bid = AsyncMock(side_effect=SelfBidError())

        resp = await client.post(
            f"/api/v1/auctions/{uuid.uuid4()}/bids", json={"amount": 1200}
        )

        assert resp.status_code == 403
        assert resp.json()["data"] == {"retryable": False}

    async def test_bid_body_validated(self, client, as_user, auction_service):
        resp = await client.post(f"/api/v1/auctions/{uuid.uuid4()}/bids", json={"amount": 0})
        assert resp.status_code == 422

    async def test_success_passes_ids_as_strings(self, client, as_user, auction_service):
        result = MagicMock()
        result.model_dump.return_value = {"current_price": 1500}
        auction_service.place_bid = AsyncMock(return_value=result)
        auction_id = uuid.uuid4()

        resp = await client.post(f"/api/v1/auctions/{auction_id}/bids", json={"amount": 1500})

        assert resp.status_code == 201
        assert resp.json()["data"] == {"current_price": 1500}
        auction_service.place_bid.assert_awaited_once()
        args = auction_service.place_bid.call_args.args
        assert args[1:] == (str(USER.id), str(auction_id), 1500)


class TestSweepEndpoint:
    async def test_non_admin_forbidden(self, client, as_user, sweeper):
        sweeper.sweep_ended = AsyncMock()

        resp = await client.post("/api/v1/auctions/process-ended")

        assert resp.status_code == 403
        assert resp.json()["code"] == 2006
        sweeper.sweep_ended.assert_not_awaited()

    async def test_admin_runs_sweep(self, client, as_admin, sweeper):
        sweeper.sweep_ended = AsyncMock(return_value=SweepResult(
            processed=2, converted_to_regular=1, sold_to_winner=1,
        ))

        resp = await client.post("/api/v1/auctions/process-ended")

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data == {
            "processed": 2, "converted_to_regular": 1, "sold_to_winner": 1, "errors": [],
        }


class TestSellerItems:
    async def test_mine_is_not_taken_for_an_item_id(self, client, as_user, monkeypatch):
        svc = MagicMock()
        svc.list_seller_items = AsyncMock(return_value=SellerItemListResponse(items=[]))
        monkeypatch.setattr(listing_router, "_service", svc)

        resp = await client.get("/api/v1/items/mine", params={"status": "SOLD"})

        assert resp.status_code == 200
        assert resp.json()["data"] == {"items": []}
        svc.list_seller_items.assert_awaited_once()
        assert svc.list_seller_items.call_args.args[1:] == (str(USER.id), "SOLD")


class TestMessages:
    async def test_send_uses_caller_identity(self, client, as_user, monkeypatch):
        receiver = uuid.uuid4()
        svc = MagicMock()
        svc.send = AsyncMock(return_value=MessageOut(
            id="m-1", sender_id=str(USER.id), sender_name="Alex", receiver_id=str(receiver),
            content="Still available?", item_id=None, is_read=False,
            created_at="2026-10-19T12:00:00+00:00",
        ))
        monkeypatch.setattr(messaging_router, "_service", svc)

        resp = await client.post("/api/v1/messages", json={
            "receiver_id": str(receiver), "content": "Still available?",
        })

        assert resp.status_code == 201
        assert svc.send.call_args.args[1:] == (
            str(USER.id), "Alex", str(receiver), "Still available?", None,
        )

    async def test_empty_content_rejected(self, client, as_user, monkeypatch):
        svc = MagicMock()
        monkeypatch.setattr(messaging_router, "_service", svc)

        resp = await client.post("/api/v1/messages", json={
            "receiver_id": str(uuid.uuid4()), "content": "",
        })

        assert resp.status_code == 422
