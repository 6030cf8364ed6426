"""Pydantic schemas for dx_moderation API."""

import uuid

from pydantic import BaseModel, Field

from src.dx_common.enums import ReportReason, ReportStatus
from src.dx_moderation.domain.models import Report


class ReportRequest(BaseModel):
    item_id: uuid.UUID
    reason: ReportReason
    description: str | None = Field(None, max_length=1000)


class SetReportStatusRequest(BaseModel):
    status: ReportStatus


class RemoveListingRequest(BaseModel):
    reason: str = Field(..., min_length=10, max_length=500)


class ReportOut(BaseModel):
    id: str
    item_id: str
    item_title: str | None
    reporter_id: str
    reporter_name: str | None
    reason: str
    description: str | None
    status: str
    created_at: str

    @classmethod
    def from_domain(cls, report: Report) -> "ReportOut":
        return cls(
            id=report.id,
            item_id=report.item_id,
            item_title=report.item_title,
            reporter_id=report.reporter_id,
            reporter_name=report.reporter_name,
            reason=report.reason,
            description=report.description,
            status=report.status,
            created_at=report.created_at.isoformat(),
        )


class ReportListResponse(BaseModel):
    reports: list[ReportOut]


class SetReportStatusResponse(BaseModel):
    item_id: str
    status: str
    updated: int


class RemoveListingResponse(BaseModel):
    item_id: str
    bids_deleted: int
    auction_deleted: bool
    reports_deleted: int
