from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel

from placement.models import ApplicationStatus, PostingLevel, PostingStatus
from placement.services.reports import ReportFilter


class ReportFilterRequest(BaseModel):
    major: str | None = None
    year_of_study: int | None = None
    company_name: str | None = None
    level: PostingLevel | None = None
    posting_status: PostingStatus | None = None
    application_status: ApplicationStatus | None = None
    opening_from: date | None = None
    closing_until: date | None = None

    def to_filter(self) -> ReportFilter:
        return ReportFilter(**self.model_dump())


class ReportOut(BaseModel):
    total_applications: int
    applications_by_status: dict[str, int]
    total_postings: int
    postings_by_status: dict[str, int]
    approved_representatives: int
    pending_withdrawals: int
    total_placements: int
    placements_by_company: dict[str, int]
    applications_by_major: dict[str, int]
    applications_by_year: dict[str, int]
    placements: list[dict[str, Any]]

    class Config:
        from_attributes = True
