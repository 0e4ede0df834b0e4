from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.types import JSON

from placement.database import Base
from placement.errors import BusinessRuleViolation, Rule
from placement.models.enums import ApprovalStatus, UserRole, enum_type


MAX_POSTINGS_PER_REPRESENTATIVE = 5


class Student(Base):
    __tablename__ = "students"
    role = UserRole.STUDENT

    id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255))
    password_hash = Column(String(512), nullable=False)
    year_of_study = Column(Integer, nullable=False)
    major = Column(String(120), nullable=False)
    application_ids = Column(MutableList.as_mutable(JSON), nullable=False, default=list)
    has_accepted_placement = Column(Boolean, default=False, nullable=False)
    accepted_application_id = Column(String(64))
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())

    @property
    def is_junior(self) -> bool:
        return self.year_of_study <= 2

    def record_application(self, application_id: str) -> None:
        if self.application_ids is None:
            self.application_ids = []
        if application_id not in self.application_ids:
            self.application_ids.append(application_id)

    def accept_placement(self, application_id: str) -> None:
        if self.has_accepted_placement:
            raise BusinessRuleViolation(Rule.PLACEMENT_ALREADY_ACCEPTED, "You have already accepted a placement")
        self.has_accepted_placement = True
        self.accepted_application_id = application_id


class CompanyRepresentative(Base):
    __tablename__ = "representatives"
    role = UserRole.REPRESENTATIVE

    id = Column(String(255), primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    password_hash = Column(String(512), nullable=False)
    company_name = Column(String(255), nullable=False)
    department = Column(String(255))
    position = Column(String(255))
    status = Column(enum_type(ApprovalStatus), default=ApprovalStatus.PENDING, nullable=False)
    authorized = Column(Boolean, default=False, nullable=False)
    approved_by = Column(String(255))
    posting_ids = Column(MutableList.as_mutable(JSON), nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())

    @property
    def posting_count(self) -> int:
        return len(self.posting_ids or [])

    def set_authorization(self, approve: bool, staff_id: str) -> None:
        self.status = ApprovalStatus.APPROVED if approve else ApprovalStatus.REJECTED
        self.authorized = approve
        self.approved_by = staff_id

    def add_posting(self, posting_id: str) -> None:
        if self.posting_count >= MAX_POSTINGS_PER_REPRESENTATIVE:
            raise BusinessRuleViolation(
                Rule.POSTING_LIMIT,
                f"Representatives can only create up to {MAX_POSTINGS_PER_REPRESENTATIVE} internship opportunities",
            )
        if self.posting_ids is None:
            self.posting_ids = []
        self.posting_ids.append(posting_id)

    def remove_posting(self, posting_id: str) -> None:
        if self.posting_ids and posting_id in self.posting_ids:
            self.posting_ids.remove(posting_id)


class Staff(Base):
    __tablename__ = "staff"
    role = UserRole.STAFF

    id = Column(String(120), primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255))
    password_hash = Column(String(512), nullable=False)
    department = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
