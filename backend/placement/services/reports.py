from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from placement.models import (
    Application,
    ApplicationStatus,
    ApprovalStatus,
    CompanyRepresentative,
    InternshipOpportunity,
    PostingLevel,
    PostingStatus,
    Student,
    WithdrawalRequest,
    WithdrawalStatus,
)
from placement.services.store import CollectionStore


@dataclass
class ReportFilter:
    major: str | None = None
    year_of_study: int | None = None
    company_name: str | None = None
    level: PostingLevel | None = None
    posting_status: PostingStatus | None = None
    application_status: ApplicationStatus | None = None
    opening_from: date | None = None
    closing_until: date | None = None


@dataclass
class PlacementReport:
    total_applications: int = 0
    applications_by_status: dict[str, int] = field(default_factory=dict)
    total_postings: int = 0
    postings_by_status: dict[str, int] = field(default_factory=dict)
    approved_representatives: int = 0
    pending_withdrawals: int = 0
    total_placements: int = 0
    placements_by_company: dict[str, int] = field(default_factory=dict)
    applications_by_major: dict[str, int] = field(default_factory=dict)
    applications_by_year: dict[str, int] = field(default_factory=dict)
    placements: list[dict[str, Any]] = field(default_factory=list)


def _posting_matches(posting: InternshipOpportunity, filters: ReportFilter) -> bool:
    if filters.company_name and (posting.company_name or "").lower() != filters.company_name.strip().lower():
        return False
    if filters.level is not None and posting.level != filters.level:
        return False
    if filters.posting_status is not None and posting.status != filters.posting_status:
        return False
    if filters.opening_from is not None and posting.opening_date < filters.opening_from:
        return False
    if filters.closing_until is not None and posting.closing_date > filters.closing_until:
        return False
    return True


def _student_matches(student: Student | None, filters: ReportFilter) -> bool:
    if filters.major and (student is None or (student.major or "").lower() != filters.major.strip().lower()):
        return False
    if filters.year_of_study and (student is None or student.year_of_study != filters.year_of_study):
        return False
    return True


class ReportService:
    def __init__(self, store: CollectionStore) -> None:
        self.store = store

    def generate(self, filters: ReportFilter | None = None) -> PlacementReport:
        filters = filters or ReportFilter()
        with self.store.unit_of_work() as uow:
            postings = {posting.id: posting for posting in uow.postings.all()}
            students = {student.id: student for student in uow.students.all()}
            applications = uow.applications.all()
            approved_representatives = len(
                uow.representatives.query(CompanyRepresentative.status == ApprovalStatus.APPROVED)
            )
            pending_withdrawals = len(
                uow.withdrawals.query(WithdrawalRequest.status == WithdrawalStatus.PENDING)
            )

        matching_postings = {pid: p for pid, p in postings.items() if _posting_matches(p, filters)}
        selected: list[Application] = [
            app
            for app in applications
            if app.posting_id in matching_postings
            and _student_matches(students.get(app.student_id), filters)
            and (filters.application_status is None or app.status == filters.application_status)
        ]
        placed = [app for app in selected if app.status == ApplicationStatus.SUCCESSFUL and app.placement_accepted]

        report = PlacementReport(
            total_applications=len(selected),
            applications_by_status=dict(Counter(app.status.value for app in selected)),
            total_postings=len(matching_postings),
            postings_by_status=dict(Counter(p.status.value for p in matching_postings.values())),
            approved_representatives=approved_representatives,
            pending_withdrawals=pending_withdrawals,
            total_placements=len({app.student_id for app in placed}),
            placements_by_company=dict(
                Counter(matching_postings[app.posting_id].company_name or "Unknown" for app in placed)
            ),
        )
        report.applications_by_major = dict(
            Counter(students[app.student_id].major for app in selected if app.student_id in students)
        )
        report.applications_by_year = dict(
            Counter(str(students[app.student_id].year_of_study) for app in selected if app.student_id in students)
        )
        report.placements = [self._placement_row(app, students, matching_postings) for app in placed]
        return report

    @staticmethod
    def _placement_row(
        application: Application,
        students: dict[str, Student],
        postings: dict[str, InternshipOpportunity],
    ) -> dict[str, Any]:
        student = students.get(application.student_id)
        posting = postings[application.posting_id]
        return {
            "application_id": application.id,
            "student_id": application.student_id,
            "student_name": student.name if student else None,
            "student_major": student.major if student else None,
            "student_year": student.year_of_study if student else None,
            "internship_id": posting.id,
            "internship_title": posting.title,
            "company_name": posting.company_name,
            "level": posting.level.value,
            "accepted_at": application.accepted_at.isoformat() if application.accepted_at else None,
            "start_date": posting.start_date.isoformat() if posting.start_date else None,
            "end_date": posting.end_date.isoformat() if posting.end_date else None,
        }
