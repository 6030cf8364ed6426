"""ReportRepository — concrete implementation of ReportRepositoryProtocol.

Duplicate suppression is the UNIQUE (item_id, reporter_id) constraint; the
repository turns its violation into DuplicateReportError so two simultaneous
reports from one user cannot both land.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_common.errors import DuplicateReportError, ItemNotFoundError
from src.dx_moderation.domain.models import Report

UNIQUE_REPORT_CONSTRAINT = "uq_reports_item_reporter"

_GET_ITEM_SELLER_SQL = text("""
    SELECT seller_id
    FROM items
    WHERE id = CAST(:item_id AS UUID)
""")

_INSERT_REPORT_SQL = text("""
    INSERT INTO reports (item_id, reporter_id, reason, description, status)
    VALUES (CAST(:item_id AS UUID), CAST(:reporter_id AS UUID), :reason, :description, 'PENDING')
    RETURNING id, item_id, reporter_id, reason, description, status, created_at, updated_at
""")

_SET_STATUS_FOR_ITEM_SQL = text("""
    UPDATE reports
    SET status = :status,
        updated_at = NOW()
    WHERE item_id = CAST(:item_id AS UUID)
""")

_LIST_REPORTS_SQL = text("""
    SELECT r.id, r.item_id, r.reporter_id, r.reason, r.description, r.status,
           r.created_at, r.updated_at,
           i.title AS item_title, u.name AS reporter_name
    FROM reports r
    LEFT JOIN items i ON i.id = r.item_id
    LEFT JOIN users u ON u.id = r.reporter_id
    WHERE (CAST(:status AS TEXT) IS NULL OR r.status = CAST(:status AS TEXT))
    ORDER BY r.created_at DESC, r.id DESC
    LIMIT :limit
""")


def _row_to_report(row: Any) -> Report:
    return Report(
        id=str(row.id),
        item_id=str(row.item_id),
        reporter_id=str(row.reporter_id),
        reason=row.reason,
        status=row.status,
        created_at=row.created_at,
        description=row.description,
        updated_at=row.updated_at,
        item_title=getattr(row, "item_title", None),
        reporter_name=getattr(row, "reporter_name", None),
    )


class ReportRepository:
    async def get_item_seller(self, db: AsyncSession, item_id: str) -> str | None:
        result = await db.execute(_GET_ITEM_SELLER_SQL, {"item_id": item_id})
        row = result.fetchone()
        return str(row.seller_id) if row else None

    async def insert_report(
        self,
        db: AsyncSession,
        item_id: str,
        reporter_id: str,
        reason: str,
        description: str | None,
    ) -> Report:
        try:
            result = await db.execute(
                _INSERT_REPORT_SQL,
                {
                    "item_id": item_id,
                    "reporter_id": reporter_id,
                    "reason": reason,
                    "description": description,
                },
            )
        except IntegrityError as exc:
            if UNIQUE_REPORT_CONSTRAINT in str(exc.orig):
                raise DuplicateReportError(item_id) from exc
            # FK violation: the item was deleted between the lookup and the insert
            raise ItemNotFoundError(item_id) from exc
        return _row_to_report(result.fetchone())

    async def set_status_for_item(self, db: AsyncSession, item_id: str, status: str) -> int:
        result = await db.execute(_SET_STATUS_FOR_ITEM_SQL, {"item_id": item_id, "status": status})
        return result.rowcount

    async def list_reports(
        self, db: AsyncSession, status: str | None, limit: int
    ) -> list[Report]:
        result = await db.execute(_LIST_REPORTS_SQL, {"status": status, "limit": limit})
        return [_row_to_report(row) for row in result.fetchall()]
