from placement.models.application import Application
from placement.models.enums import (
    ApplicationStatus,
    ApprovalStatus,
    PostingLevel,
    PostingStatus,
    UserRole,
    WithdrawalStatus,
)
from placement.models.internship import InternshipOpportunity
from placement.models.user import CompanyRepresentative, Staff, Student
from placement.models.withdrawal import WithdrawalRequest

__all__ = [
    "Student",
    "CompanyRepresentative",
    "Staff",
    "InternshipOpportunity",
    "Application",
    "WithdrawalRequest",
    "UserRole",
    "ApprovalStatus",
    "PostingLevel",
    "PostingStatus",
    "ApplicationStatus",
    "WithdrawalStatus",
]
