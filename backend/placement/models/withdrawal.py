from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text

from placement.database import Base
from placement.errors import InvalidState
from placement.models.enums import WithdrawalStatus, enum_type


class WithdrawalRequest(Base):
    __tablename__ = "withdrawal_requests"
    __table_args__ = (
        Index("idx_withdrawal_application", "application_id"),
        Index("idx_withdrawal_status", "status"),
    )
    id_prefix = "WDR"

    id = Column(String(64), primary_key=True)
    application_id = Column(String(64), ForeignKey("applications.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(String(32), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    posting_id = Column(String(64), ForeignKey("internships.id", ondelete="CASCADE"), nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(enum_type(WithdrawalStatus), default=WithdrawalStatus.PENDING, nullable=False)
    requested_at = Column(DateTime, nullable=False)
    processed_by = Column(String(255))
    processed_at = Column(DateTime)
    staff_comments = Column(Text)

    @property
    def blocks_resubmission(self) -> bool:
        return self.status in (WithdrawalStatus.PENDING, WithdrawalStatus.APPROVED)

    def _ensure_pending(self) -> None:
        if self.status != WithdrawalStatus.PENDING:
            raise InvalidState(f"Withdrawal request has already been processed (status is {self.status.value})")

    def _close(self, status: WithdrawalStatus, actor_id: str, comment: str | None, now: datetime) -> None:
        self._ensure_pending()
        self.status = status
        self.processed_by = actor_id
        self.processed_at = now
        self.staff_comments = comment

    def approve(self, staff_id: str, comment: str | None, now: datetime) -> None:
        self._close(WithdrawalStatus.APPROVED, staff_id, comment or "Withdrawal approved by staff", now)

    def reject(self, staff_id: str, comment: str | None, now: datetime) -> None:
        self._close(WithdrawalStatus.REJECTED, staff_id, comment or "Withdrawal rejected by staff", now)

    def cancel(self, student_id: str, reason: str, now: datetime) -> None:
        self._close(WithdrawalStatus.CANCELLED, student_id, f"Cancelled by student. Reason: {reason}", now)

    def update_reason(self, reason: str) -> None:
        self._ensure_pending()
        self.reason = reason
