# src/dx_moderation/domain/repository.py
"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.dx_moderation.domain.models import Report


class ReportRepositoryProtocol(Protocol):
    async def get_item_seller(self, db: AsyncSession, item_id: str) -> str | None: ...

    async def insert_report(
        self,
        db: AsyncSession,
        item_id: str,
        reporter_id: str,
        reason: str,
        description: str | None,
    ) -> Report:
        """Raises DuplicateReportError when (item_id, reporter_id) already exists."""
        ...

    async def set_status_for_item(self, db: AsyncSession, item_id: str, status: str) -> int: ...

    async def list_reports(
        self, db: AsyncSession, status: str | None, limit: int
    ) -> list[Report]: ...
