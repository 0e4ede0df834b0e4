from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, func

from placement.database import Base
from placement.errors import BusinessRuleViolation, Rule
from placement.models.enums import PostingLevel, PostingStatus, enum_type


MAX_SLOTS = 10
ANY_MAJOR = "Any"


class InternshipOpportunity(Base):
    __tablename__ = "internships"
    __table_args__ = (
        Index("idx_internship_status", "status"),
        Index("idx_internship_representative", "representative_id"),
    )
    id_prefix = "INT"

    id = Column(String(64), primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    level = Column(enum_type(PostingLevel), nullable=False)
    preferred_major = Column(String(120), default=ANY_MAJOR, nullable=False)
    opening_date = Column(Date, nullable=False)
    closing_date = Column(Date, nullable=False)
    start_date = Column(Date)
    end_date = Column(Date)
    status = Column(enum_type(PostingStatus), default=PostingStatus.PENDING, nullable=False)
    visible = Column(Boolean, default=False, nullable=False)
    slots = Column(Integer, nullable=False)
    filled_slots = Column(Integer, default=0, nullable=False)
    representative_id = Column(String(255), ForeignKey("representatives.id", ondelete="CASCADE"), nullable=False)
    company_name = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())

    @property
    def available_slots(self) -> int:
        return max(0, self.slots - (self.filled_slots or 0))

    def is_open_on(self, today: date) -> bool:
        return self.opening_date <= today <= self.closing_date

    def accepts_major(self, major: str | None) -> bool:
        preferred = (self.preferred_major or ANY_MAJOR).strip()
        if preferred.lower() == ANY_MAJOR.lower():
            return True
        return bool(major) and preferred.lower() == major.strip().lower()

    def fill_slot(self) -> None:
        if (self.filled_slots or 0) >= self.slots:
            raise BusinessRuleViolation(Rule.NO_SLOTS, "No available slots for this opportunity")
        self.filled_slots = (self.filled_slots or 0) + 1
        if self.filled_slots == self.slots:
            self.status = PostingStatus.FILLED

    def release_slot(self) -> None:
        if not self.filled_slots:
            return
        self.filled_slots -= 1
        if self.status == PostingStatus.FILLED and self.filled_slots < self.slots:
            self.status = PostingStatus.APPROVED
