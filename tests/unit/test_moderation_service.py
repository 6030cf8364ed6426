# tests/unit/test_moderation_service.py
"""Unit tests for ModerationApplicationService."""
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.dx_common.errors import (
    DuplicateReportError,
    ItemNotFoundError,
    NotAdminError,
    SelfReportError,
)
from src.dx_listing.domain.models import DeletedListing
from src.dx_moderation.application.service import ModerationApplicationService
from src.dx_moderation.domain.admin_policy import AdminPolicy
from src.dx_moderation.domain.models import Report

ADMIN = "admin@dorm.test"


def _report(**kwargs) -> Report:
    defaults = dict(
        id="rep-1", item_id="item-1", reporter_id="user-2", reason="SCAM",
        status="PENDING", created_at=datetime.now(UTC),
    )
    defaults.update(kwargs)
    return Report(**defaults)


@pytest.fixture
def db():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def mock_repo():
    return MagicMock()


@pytest.fixture
def listing_service():
    svc = MagicMock()
    svc.admin_delete = AsyncMock()
    return svc


def _service(mock_repo, listing_service) -> ModerationApplicationService:
    return ModerationApplicationService(
        AdminPolicy.from_csv(ADMIN), listing_service=listing_service, repo=mock_repo
    )


class TestReport:
    async def test_creates_pending_report(self, db, mock_repo, listing_service):
        mock_repo.get_item_seller = AsyncMock(return_value="seller-1")
        mock_repo.insert_report = AsyncMock(return_value=_report())
        svc = _service(mock_repo, listing_service)

        resp = await svc.report(db, "user-2", "item-1", "SCAM", "  asks for prepayment  ")

        assert resp.status == "PENDING"
        assert mock_repo.insert_report.call_args.args[4] == "asks for prepayment"
        db.commit.assert_awaited_once()

    async def test_duplicate_report(self, db, mock_repo, listing_service):
        mock_repo.get_item_seller = AsyncMock(return_value="seller-1")
        mock_repo.insert_report = AsyncMock(side_effect=[
            _report(), DuplicateReportError("item-1"),
        ])
        svc = _service(mock_repo, listing_service)

        await svc.report(db, "user-2", "item-1", "SCAM")
        with pytest.raises(DuplicateReportError):
            await svc.report(db, "user-2", "item-1", "SCAM")
        db.rollback.assert_awaited_once()

    async def test_self_report(self, db, mock_repo, listing_service):
        mock_repo.get_item_seller = AsyncMock(return_value="seller-1")
        mock_repo.insert_report = AsyncMock()
        svc = _service(mock_repo, listing_service)

        with pytest.raises(SelfReportError):
            await svc.report(db, "seller-1", "item-1", "SPAM")
        mock_repo.insert_report.assert_not_awaited()

    async def test_missing_item(self, db, mock_repo, listing_service):
        mock_repo.get_item_seller = AsyncMock(return_value=None)
        svc = _service(mock_repo, listing_service)
        with pytest.raises(ItemNotFoundError):
            await svc.report(db, "user-2", "item-x", "FAKE")


class TestAdminOperations:
    async def test_bulk_status(self, db, mock_repo, listing_service):
        mock_repo.set_status_for_item = AsyncMock(return_value=3)
        svc = _service(mock_repo, listing_service)

        resp = await svc.set_report_status(db, ADMIN, "item-1", "REVIEWED")

        assert resp.updated == 3
        mock_repo.set_status_for_item.assert_awaited_once_with(db, "item-1", "REVIEWED")

    async def test_non_admin_rejected_before_any_write(self, db, mock_repo, listing_service):
        mock_repo.set_status_for_item = AsyncMock()
        svc = _service(mock_repo, listing_service)

        with pytest.raises(NotAdminError):
            await svc.set_report_status(db, "student@dorm.test", "item-1", "RESOLVED")
        with pytest.raises(NotAdminError):
            await svc.remove_listing(db, "student@dorm.test", "u-1", "item-1", "Spam listing here")
        mock_repo.set_status_for_item.assert_not_awaited()
        listing_service.admin_delete.assert_not_awaited()

    async def test_empty_allowlist_rejects_everyone(self, db, mock_repo, listing_service):
        svc = ModerationApplicationService(
            AdminPolicy.from_csv(""), listing_service=listing_service, repo=mock_repo
        )
        with pytest.raises(NotAdminError):
            await svc.list_reports(db, ADMIN)

    async def test_remove_listing_delegates(self, db, mock_repo, listing_service):
        listing_service.admin_delete = AsyncMock(return_value=DeletedListing(
            item_id="item-1", title="Fake sneakers", seller_id="seller-1",
            bids_deleted=0, auction_deleted=False, reports_deleted=4, reports_resolved=0,
        ))
        svc = _service(mock_repo, listing_service)

        resp = await svc.remove_listing(db, ADMIN, "admin-id", "item-1", "Counterfeit goods")

        assert resp.reports_deleted == 4
        listing_service.admin_delete.assert_awaited_once_with(
            db, "admin-id", "item-1", "Counterfeit goods"
        )

    async def test_list_reports_filters_status(self, db, mock_repo, listing_service):
        mock_repo.list_reports = AsyncMock(return_value=[_report()])
        svc = _service(mock_repo, listing_service)

        resp = await svc.list_reports(db, ADMIN, "PENDING")

        assert len(resp.reports) == 1
        assert mock_repo.list_reports.call_args.args[1] == "PENDING"
