from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from placement.api.deps import get_accounts, get_lifecycle, get_postings, get_reports
from placement.auth import require_staff
from placement.models import Staff
from placement.schemas.account import RepresentativeOut, StudentCreate, StudentOut
from placement.schemas.auth import RegisterRepresentativeRequest
from placement.schemas.common import ApiResponse, DecisionRequest, ok
from placement.schemas.internship import InternshipOut
from placement.schemas.report import ReportFilterRequest, ReportOut
from placement.schemas.withdrawal import WithdrawalOut
from placement.services.accounts import AccountService, NewRepresentative
from placement.services.lifecycle import PlacementLifecycle
from placement.services.postings import PostingService
from placement.services.reports import ReportService


router = APIRouter()


@router.post("/students", response_model=ApiResponse[StudentOut])
def create_student(
    payload: StudentCreate,
    staff: Staff = Depends(require_staff),
    accounts: AccountService = Depends(get_accounts),
) -> ApiResponse:
    student = accounts.create_student(staff, payload.to_new_student())
    return ok(StudentOut.model_validate(student), "Student created")


@router.post("/representatives", response_model=ApiResponse[RepresentativeOut])
def create_representative(
    payload: RegisterRepresentativeRequest,
    staff: Staff = Depends(require_staff),
    accounts: AccountService = Depends(get_accounts),
) -> ApiResponse:
    representative = accounts.create_representative(
        staff,
        NewRepresentative(
            email=payload.email,
            name=payload.name,
            company_name=payload.company_name,
            password=payload.password,
            department=payload.department,
            position=payload.position,
        ),
    )
    return ok(RepresentativeOut.model_validate(representative), "Representative created")


@router.get("/representatives/pending", response_model=ApiResponse[list[RepresentativeOut]])
def pending_representatives(
    staff: Staff = Depends(require_staff),
    postings: PostingService = Depends(get_postings),
) -> ApiResponse:
    return ok([RepresentativeOut.model_validate(rep) for rep in postings.list_pending_representatives()])


@router.post("/representatives/{representative_id}/decision", response_model=ApiResponse[RepresentativeOut])
def decide_representative(
    representative_id: str,
    payload: DecisionRequest,
    staff: Staff = Depends(require_staff),
    postings: PostingService = Depends(get_postings),
) -> ApiResponse:
    representative = postings.authorize_representative(staff, representative_id, payload.approve)
    return ok(RepresentativeOut.model_validate(representative), f"Representative {representative.status.value.lower()}")


@router.get("/companies", response_model=ApiResponse[list[str]])
def list_companies(
    staff: Staff = Depends(require_staff),
    postings: PostingService = Depends(get_postings),
) -> ApiResponse:
    return ok(postings.list_companies())


@router.get("/internships/pending", response_model=ApiResponse[list[InternshipOut]])
def pending_internships(
    staff: Staff = Depends(require_staff),
    postings: PostingService = Depends(get_postings),
) -> ApiResponse:
    return ok([InternshipOut.model_validate(posting) for posting in postings.list_pending_postings()])


@router.post("/internships/{posting_id}/decision", response_model=ApiResponse[InternshipOut])
def decide_internship(
    posting_id: str,
    payload: DecisionRequest,
    staff: Staff = Depends(require_staff),
    postings: PostingService = Depends(get_postings),
) -> ApiResponse:
    posting = postings.decide_posting(staff, posting_id, payload.approve)
    return ok(InternshipOut.model_validate(posting), f"Internship {posting.status.value.lower()}")


@router.get("/withdrawals", response_model=ApiResponse[list[WithdrawalOut]])
def list_withdrawals(
    pending_only: bool = Query(default=True),
    staff: Staff = Depends(require_staff),
    lifecycle: PlacementLifecycle = Depends(get_lifecycle),
) -> ApiResponse:
    requests = lifecycle.list_pending_withdrawals() if pending_only else lifecycle.list_withdrawals()
    return ok([WithdrawalOut.model_validate(request) for request in requests])


@router.post("/withdrawals/{withdrawal_id}/decision", response_model=ApiResponse[WithdrawalOut])
def decide_withdrawal(
    withdrawal_id: str,
    payload: DecisionRequest,
    staff: Staff = Depends(require_staff),
    lifecycle: PlacementLifecycle = Depends(get_lifecycle),
) -> ApiResponse:
    request = lifecycle.decide_withdrawal(staff, withdrawal_id, payload.approve, payload.comment)
    return ok(WithdrawalOut.model_validate(request), f"Withdrawal request {request.status.value.lower()}")


@router.post("/reports", response_model=ApiResponse[ReportOut])
def generate_report(
    payload: ReportFilterRequest,
    staff: Staff = Depends(require_staff),
    reports: ReportService = Depends(get_reports),
) -> ApiResponse:
    return ok(ReportOut.model_validate(reports.generate(payload.to_filter())))
