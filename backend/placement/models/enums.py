from __future__ import annotations

from enum import Enum

from sqlalchemy import Enum as SAEnum


class UserRole(str, Enum):
    STUDENT = "student"
    REPRESENTATIVE = "representative"
    STAFF = "staff"


class ApprovalStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class PostingLevel(str, Enum):
    BASIC = "Basic"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class PostingStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    FILLED = "Filled"


class ApplicationStatus(str, Enum):
    PENDING = "Pending"
    SUCCESSFUL = "Successful"
    REJECTED = "Rejected"
    WITHDRAWN = "Withdrawn"


class WithdrawalStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


def enum_type(enum_cls: type[Enum]) -> SAEnum:
    """Store the display value in a plain VARCHAR column."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=32,
        values_callable=lambda members: [member.value for member in members],
    )
