from __future__ import annotations

from fastapi import APIRouter, Depends

from placement.api.deps import get_lifecycle, get_postings
from placement.auth import require_representative
from placement.models import CompanyRepresentative
from placement.schemas.application import ApplicantOut, ApplicationOut
from placement.schemas.common import ApiResponse, DecisionRequest, ok
from placement.schemas.internship import (
    InternshipCreate,
    InternshipOut,
    RepresentativeInternshipOut,
    VisibilityUpdate,
)
from placement.services.lifecycle import PlacementLifecycle
from placement.services.postings import PostingService


router = APIRouter()


@router.get("/internships", response_model=ApiResponse[list[RepresentativeInternshipOut]])
def list_my_internships(
    representative: CompanyRepresentative = Depends(require_representative),
    postings: PostingService = Depends(get_postings),
) -> ApiResponse:
    rows = []
    for posting, pending in postings.list_postings_for_representative(representative):
        row = RepresentativeInternshipOut.model_validate(posting)
        row.pending_application_count = pending
        rows.append(row)
    return ok(rows)


@router.post("/internships", response_model=ApiResponse[InternshipOut])
def create_internship(
    payload: InternshipCreate,
    representative: CompanyRepresentative = Depends(require_representative),
    postings: PostingService = Depends(get_postings),
) -> ApiResponse:
    posting = postings.create_posting(representative, payload.to_draft())
    return ok(InternshipOut.model_validate(posting), "Internship submitted for approval")


@router.put("/internships/{posting_id}", response_model=ApiResponse[InternshipOut])
def edit_internship(
    posting_id: str,
    payload: InternshipCreate,
    representative: CompanyRepresentative = Depends(require_representative),
    postings: PostingService = Depends(get_postings),
) -> ApiResponse:
    posting = postings.edit_posting(representative, posting_id, payload.to_draft())
    return ok(InternshipOut.model_validate(posting), "Internship updated")


@router.delete("/internships/{posting_id}", response_model=ApiResponse[None])
def delete_internship(
    posting_id: str,
    representative: CompanyRepresentative = Depends(require_representative),
    postings: PostingService = Depends(get_postings),
) -> ApiResponse:
    postings.delete_posting(representative, posting_id)
    return ok(message="Internship deleted")


@router.patch("/internships/{posting_id}/visibility", response_model=ApiResponse[InternshipOut])
def set_visibility(
    posting_id: str,
    payload: VisibilityUpdate,
    representative: CompanyRepresentative = Depends(require_representative),
    postings: PostingService = Depends(get_postings),
) -> ApiResponse:
    posting = postings.toggle_visibility(representative, posting_id, payload.visible)
    return ok(InternshipOut.model_validate(posting), "Visibility updated")


@router.get("/internships/{posting_id}/applications", response_model=ApiResponse[list[ApplicantOut]])
def list_applicants(
    posting_id: str,
    representative: CompanyRepresentative = Depends(require_representative),
    lifecycle: PlacementLifecycle = Depends(get_lifecycle),
) -> ApiResponse:
    rows = []
    for application, student in lifecycle.list_applications_for_posting(representative, posting_id):
        row = ApplicantOut.model_validate(application)
        if student is not None:
            row.student_name = student.name
            row.student_major = student.major
            row.student_year = student.year_of_study
            row.student_email = student.email
        rows.append(row)
    return ok(rows)


@router.post("/applications/{application_id}/decision", response_model=ApiResponse[ApplicationOut])
def decide_application(
    application_id: str,
    payload: DecisionRequest,
    representative: CompanyRepresentative = Depends(require_representative),
    lifecycle: PlacementLifecycle = Depends(get_lifecycle),
) -> ApiResponse:
    application = lifecycle.decide_application(representative, application_id, payload.approve, payload.comment)
    return ok(ApplicationOut.model_validate(application), f"Application marked {application.status.value}")
