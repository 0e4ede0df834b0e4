from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from placement.models import ApplicationStatus


class ApplyRequest(BaseModel):
    internship_id: str = Field(min_length=1)


class ApplicationOut(BaseModel):
    id: str
    student_id: str
    posting_id: str
    status: ApplicationStatus
    submitted_at: datetime
    status_updated_at: datetime | None = None
    placement_accepted: bool
    accepted_at: datetime | None = None
    reviewer_comments: str | None = None

    class Config:
        from_attributes = True


class StudentApplicationOut(ApplicationOut):
    internship_title: str | None = None
    company_name: str | None = None


class ApplicantOut(ApplicationOut):
    student_name: str | None = None
    student_major: str | None = None
    student_year: int | None = None
    student_email: str | None = None
