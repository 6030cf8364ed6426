"""ModerationApplicationService — report intake and admin overrides.

Admin gating goes through the injected AdminPolicy; nothing here reads the
environment. Listing removal is delegated to the Listing Manager.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_common.errors import ItemNotFoundError, SelfReportError
from src.dx_listing.application.service import ListingApplicationService
from src.dx_moderation.application.schemas import (
    RemoveListingResponse,
    ReportListResponse,
    ReportOut,
    SetReportStatusResponse,
)
from src.dx_moderation.domain.admin_policy import AdminPolicy
from src.dx_moderation.domain.repository import ReportRepositoryProtocol
from src.dx_moderation.infrastructure.persistence import ReportRepository

logger = logging.getLogger(__name__)

REPORT_LIST_LIMIT = 200


class ModerationApplicationService:
    def __init__(
        self,
        admin_policy: AdminPolicy,
        listing_service: ListingApplicationService | None = None,
        repo: ReportRepositoryProtocol | None = None,
    ) -> None:
        self._policy = admin_policy
        self._listing = listing_service or ListingApplicationService()
        self._repo: ReportRepositoryProtocol = repo or ReportRepository()

    async def report(
        self,
        db: AsyncSession,
        reporter_id: str,
        item_id: str,
        reason: str,
        description: str | None = None,
    ) -> ReportOut:
        seller_id = await self._repo.get_item_seller(db, item_id)
        if seller_id is None:
            raise ItemNotFoundError(item_id)
        if seller_id == reporter_id:
            raise SelfReportError()

        try:
            report = await self._repo.insert_report(
                db, item_id, reporter_id, reason, (description or "").strip() or None
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Report filed: item=%s reporter=%s reason=%s", item_id, reporter_id, reason)
        return ReportOut.from_domain(report)

    async def set_report_status(
        self, db: AsyncSession, admin_email: str, item_id: str, status: str
    ) -> SetReportStatusResponse:
        """Move every report on the item to the same status."""
        self._policy.ensure_admin(admin_email)
        try:
            updated = await self._repo.set_status_for_item(db, item_id, status)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Reports updated: item=%s status=%s count=%d admin=%s",
            item_id, status, updated, admin_email,
        )
        return SetReportStatusResponse(item_id=item_id, status=status, updated=updated)

    async def list_reports(
        self, db: AsyncSession, admin_email: str, status: str | None = None
    ) -> ReportListResponse:
        self._policy.ensure_admin(admin_email)
        rows = await self._repo.list_reports(db, status, REPORT_LIST_LIMIT)
        return ReportListResponse(reports=[ReportOut.from_domain(r) for r in rows])

    async def remove_listing(
        self,
        db: AsyncSession,
        admin_email: str,
        admin_id: str,
        item_id: str,
        reason: str,
    ) -> RemoveListingResponse:
        self._policy.ensure_admin(admin_email)
        deleted = await self._listing.admin_delete(db, admin_id, item_id, reason)
        return RemoveListingResponse(
            item_id=deleted.item_id,
            bids_deleted=deleted.bids_deleted,
            auction_deleted=deleted.auction_deleted,
            reports_deleted=deleted.reports_deleted,
        )
