from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from placement.api.deps import get_lifecycle, get_postings
from placement.auth import require_student
from placement.models import PostingLevel, Student
from placement.schemas.account import StudentOut
from placement.schemas.application import ApplicationOut, ApplyRequest, StudentApplicationOut
from placement.schemas.common import ApiResponse, ok
from placement.schemas.internship import InternshipOut
from placement.schemas.withdrawal import WithdrawalCreate, WithdrawalOut, WithdrawalReason
from placement.services.lifecycle import PlacementLifecycle
from placement.services.postings import PostingService


router = APIRouter()


@router.get("/profile", response_model=ApiResponse[StudentOut])
def profile(student: Student = Depends(require_student)) -> ApiResponse:
    return ok(StudentOut.model_validate(student))


@router.get("/internships", response_model=ApiResponse[list[InternshipOut]])
def browse_internships(
    level: PostingLevel | None = Query(default=None),
    company: str | None = Query(default=None),
    closing_before: date | None = Query(default=None),
    student: Student = Depends(require_student),
    postings: PostingService = Depends(get_postings),
) -> ApiResponse:
    results = postings.browse_postings(student, level=level, company=company, closing_before=closing_before)
    return ok([InternshipOut.model_validate(posting) for posting in results])


@router.post("/applications", response_model=ApiResponse[ApplicationOut])
def apply(
    payload: ApplyRequest,
    student: Student = Depends(require_student),
    lifecycle: PlacementLifecycle = Depends(get_lifecycle),
) -> ApiResponse:
    application = lifecycle.submit_application(student, payload.internship_id)
    return ok(ApplicationOut.model_validate(application), "Application submitted successfully")


@router.get("/applications", response_model=ApiResponse[list[StudentApplicationOut]])
def list_applications(
    student: Student = Depends(require_student),
    lifecycle: PlacementLifecycle = Depends(get_lifecycle),
) -> ApiResponse:
    rows = []
    for application, posting in lifecycle.list_applications_for_student(student):
        row = StudentApplicationOut.model_validate(application)
        if posting is not None:
            row.internship_title = posting.title
            row.company_name = posting.company_name
        rows.append(row)
    return ok(rows)


@router.get("/applications/count", response_model=ApiResponse[int])
def count_active_applications(
    student: Student = Depends(require_student),
    lifecycle: PlacementLifecycle = Depends(get_lifecycle),
) -> ApiResponse:
    return ok(lifecycle.active_application_count(student))


@router.post("/applications/{application_id}/accept", response_model=ApiResponse[ApplicationOut])
def accept_placement(
    application_id: str,
    student: Student = Depends(require_student),
    lifecycle: PlacementLifecycle = Depends(get_lifecycle),
) -> ApiResponse:
    application = lifecycle.accept_placement(student, application_id)
    return ok(ApplicationOut.model_validate(application), "Placement accepted")


@router.post("/withdrawals", response_model=ApiResponse[WithdrawalOut])
def request_withdrawal(
    payload: WithdrawalCreate,
    student: Student = Depends(require_student),
    lifecycle: PlacementLifecycle = Depends(get_lifecycle),
) -> ApiResponse:
    request = lifecycle.request_withdrawal(student, payload.application_id, payload.reason)
    return ok(WithdrawalOut.model_validate(request), "Withdrawal request submitted")


@router.get("/withdrawals", response_model=ApiResponse[list[WithdrawalOut]])
def list_withdrawals(
    student: Student = Depends(require_student),
    lifecycle: PlacementLifecycle = Depends(get_lifecycle),
) -> ApiResponse:
    return ok([WithdrawalOut.model_validate(request) for request in lifecycle.list_withdrawals_for_student(student)])


@router.patch("/withdrawals/{withdrawal_id}", response_model=ApiResponse[WithdrawalOut])
def update_withdrawal(
    withdrawal_id: str,
    payload: WithdrawalReason,
    student: Student = Depends(require_student),
    lifecycle: PlacementLifecycle = Depends(get_lifecycle),
) -> ApiResponse:
    request = lifecycle.update_withdrawal_reason(student, withdrawal_id, payload.reason)
    return ok(WithdrawalOut.model_validate(request), "Withdrawal request updated")


@router.post("/withdrawals/{withdrawal_id}/cancel", response_model=ApiResponse[WithdrawalOut])
def cancel_withdrawal(
    withdrawal_id: str,
    payload: WithdrawalReason,
    student: Student = Depends(require_student),
    lifecycle: PlacementLifecycle = Depends(get_lifecycle),
) -> ApiResponse:
    request = lifecycle.cancel_withdrawal_request(student, withdrawal_id, payload.reason)
    return ok(WithdrawalOut.model_validate(request), "Withdrawal request cancelled")
