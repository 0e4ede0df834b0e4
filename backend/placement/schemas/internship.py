from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from placement.models import PostingLevel, PostingStatus
from placement.models.internship import ANY_MAJOR
from placement.services.postings import PostingDraft


class InternshipCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    level: PostingLevel
    preferred_major: str = ANY_MAJOR
    opening_date: date
    closing_date: date
    start_date: date | None = None
    end_date: date | None = None
    slots: int

    def to_draft(self) -> PostingDraft:
        return PostingDraft(
            title=self.title,
            description=self.description,
            level=self.level,
            preferred_major=self.preferred_major,
            opening_date=self.opening_date,
            closing_date=self.closing_date,
            start_date=self.start_date,
            end_date=self.end_date,
            slots=self.slots,
        )


class VisibilityUpdate(BaseModel):
    visible: bool


class InternshipOut(BaseModel):
    id: str
    title: str
    description: str | None = None
    level: PostingLevel
    preferred_major: str
    opening_date: date
    closing_date: date
    start_date: date | None = None
    end_date: date | None = None
    status: PostingStatus
    visible: bool
    slots: int
    filled_slots: int
    available_slots: int
    representative_id: str
    company_name: str | None = None

    class Config:
        from_attributes = True


class RepresentativeInternshipOut(InternshipOut):
    pending_application_count: int = 0
