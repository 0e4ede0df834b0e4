from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text

from placement.database import Base
from placement.errors import BusinessRuleViolation, InvalidState, Rule
from placement.models.enums import ApplicationStatus, enum_type


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        Index("idx_application_student", "student_id"),
        Index("idx_application_posting", "posting_id"),
    )
    id_prefix = "APP"

    id = Column(String(64), primary_key=True)
    student_id = Column(String(32), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    posting_id = Column(String(64), ForeignKey("internships.id", ondelete="CASCADE"), nullable=False)
    status = Column(enum_type(ApplicationStatus), default=ApplicationStatus.PENDING, nullable=False)
    submitted_at = Column(DateTime, nullable=False)
    status_updated_at = Column(DateTime)
    placement_accepted = Column(Boolean, default=False, nullable=False)
    accepted_at = Column(DateTime)
    reviewer_comments = Column(Text)

    @property
    def is_active(self) -> bool:
        """Counts towards the per-student application cap."""
        if self.status == ApplicationStatus.PENDING:
            return True
        return self.status == ApplicationStatus.SUCCESSFUL and not self.placement_accepted

    @property
    def can_be_withdrawn(self) -> bool:
        return self.status in (ApplicationStatus.PENDING, ApplicationStatus.SUCCESSFUL)

    def decide(self, approve: bool, comment: str | None, now: datetime) -> None:
        if self.status != ApplicationStatus.PENDING:
            raise InvalidState(f"Only pending applications can be processed (status is {self.status.value})")
        self.status = ApplicationStatus.SUCCESSFUL if approve else ApplicationStatus.REJECTED
        self.status_updated_at = now
        self.reviewer_comments = comment

    def accept(self, now: datetime) -> None:
        if self.status != ApplicationStatus.SUCCESSFUL:
            raise BusinessRuleViolation(Rule.NOT_SUCCESSFUL, "Can only accept successful applications")
        if self.placement_accepted:
            raise BusinessRuleViolation(Rule.PLACEMENT_ALREADY_ACCEPTED, "This placement has already been accepted")
        self.placement_accepted = True
        self.accepted_at = now

    def withdraw(self, now: datetime) -> None:
        if not self.can_be_withdrawn:
            raise InvalidState(f"Applications with status {self.status.value} cannot be withdrawn")
        self.status = ApplicationStatus.WITHDRAWN
        self.placement_accepted = False
        self.status_updated_at = now
