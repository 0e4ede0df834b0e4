from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from placement.models import ApprovalStatus
from placement.services.accounts import NewStudent


class StudentCreate(BaseModel):
    id: str = Field(min_length=1, max_length=32)
    name: str = Field(min_length=1, max_length=255)
    year_of_study: int
    major: str = Field(min_length=1, max_length=120)
    password: str = Field(default="password", min_length=6, max_length=256)
    email: str | None = None

    def to_new_student(self) -> NewStudent:
        return NewStudent(
            id=self.id,
            name=self.name,
            year_of_study=self.year_of_study,
            major=self.major,
            password=self.password,
            email=self.email,
        )


class StudentOut(BaseModel):
    id: str
    name: str
    email: str | None = None
    year_of_study: int
    major: str
    application_ids: list[str] = []
    has_accepted_placement: bool
    accepted_application_id: str | None = None

    class Config:
        from_attributes = True


class RepresentativeOut(BaseModel):
    id: str
    name: str
    email: str
    company_name: str
    department: str | None = None
    position: str | None = None
    status: ApprovalStatus
    authorized: bool
    approved_by: str | None = None
    posting_ids: list[str] = []
    created_at: datetime | None = None

    class Config:
        from_attributes = True
