from placement.schemas.account import RepresentativeOut, StudentCreate, StudentOut
from placement.schemas.application import ApplicantOut, ApplicationOut, ApplyRequest, StudentApplicationOut
from placement.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MeResponse,
    RegisterRepresentativeRequest,
)
from placement.schemas.common import ApiResponse, DecisionRequest
from placement.schemas.internship import InternshipCreate, InternshipOut, RepresentativeInternshipOut, VisibilityUpdate
from placement.schemas.report import ReportFilterRequest, ReportOut
from placement.schemas.withdrawal import WithdrawalCreate, WithdrawalOut, WithdrawalReason

__all__ = [
    "ApiResponse",
    "DecisionRequest",
    "LoginRequest",
    "RegisterRepresentativeRequest",
    "ChangePasswordRequest",
    "AuthResponse",
    "MeResponse",
    "StudentCreate",
    "StudentOut",
    "RepresentativeOut",
    "InternshipCreate",
    "InternshipOut",
    "RepresentativeInternshipOut",
    "VisibilityUpdate",
    "ApplyRequest",
    "ApplicationOut",
    "StudentApplicationOut",
    "ApplicantOut",
    "WithdrawalCreate",
    "WithdrawalReason",
    "WithdrawalOut",
    "ReportFilterRequest",
    "ReportOut",
]
