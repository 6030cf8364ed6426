"""Domain models for dx_moderation — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Report:
    id: str
    item_id: str
    reporter_id: str
    reason: str                # ReportReason value
    status: str                # ReportStatus value
    created_at: datetime
    description: str | None = None
    updated_at: datetime | None = None
    item_title: str | None = None
    reporter_name: str | None = None
