from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from placement.models import WithdrawalStatus


class WithdrawalCreate(BaseModel):
    application_id: str = Field(min_length=1)
    reason: str


class WithdrawalReason(BaseModel):
    reason: str


class WithdrawalOut(BaseModel):
    id: str
    application_id: str
    student_id: str
    posting_id: str
    reason: str
    status: WithdrawalStatus
    requested_at: datetime
    processed_by: str | None = None
    processed_at: datetime | None = None
    staff_comments: str | None = None

    class Config:
        from_attributes = True
