"""Business rules deciding who may apply to what.

Everything here is a pure function of the entities passed in. The caller
supplies the student's existing applications and the reference date so the
rules never reach into storage or the clock on their own.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from placement.errors import Rule
from placement.models import (
    Application,
    CompanyRepresentative,
    InternshipOpportunity,
    PostingLevel,
    PostingStatus,
    Student,
)
from placement.models.user import MAX_POSTINGS_PER_REPRESENTATIVE


MAX_ACTIVE_APPLICATIONS = 3

RULE_MESSAGES = {
    Rule.PLACEMENT_ALREADY_ACCEPTED: "Cannot apply - you have already accepted a placement",
    Rule.APPLICATION_LIMIT: f"Maximum {MAX_ACTIVE_APPLICATIONS} concurrent applications allowed",
    Rule.POSTING_NOT_OPEN: "This internship opportunity is not available for applications",
    Rule.POSTING_CLOSED: "Application period is not open for this opportunity",
    Rule.NO_SLOTS: "No available slots for this opportunity",
    Rule.YEAR_LEVEL: "Year 1-2 students can only apply for Basic level internships",
    Rule.DUPLICATE_APPLICATION: "You have already applied for this opportunity",
}


def active_application_count(applications: Iterable[Application]) -> int:
    return sum(1 for application in applications if application.is_active)


def has_open_slot(posting: InternshipOpportunity) -> bool:
    return (posting.filled_slots or 0) < posting.slots


def meets_year_level(student: Student, posting: InternshipOpportunity) -> bool:
    return not student.is_junior or posting.level == PostingLevel.BASIC


def application_violation(
    student: Student,
    posting: InternshipOpportunity,
    applications: Iterable[Application] = (),
    today: date | None = None,
) -> Rule | None:
    """Return the first rule that blocks ``student`` from applying, if any.

    Major is deliberately not checked here; it only narrows browsing.
    """
    today = today or date.today()
    applications = list(applications)

    if student.has_accepted_placement:
        return Rule.PLACEMENT_ALREADY_ACCEPTED
    if active_application_count(applications) >= MAX_ACTIVE_APPLICATIONS:
        return Rule.APPLICATION_LIMIT
    if posting.status != PostingStatus.APPROVED:
        return Rule.POSTING_NOT_OPEN
    if not posting.is_open_on(today):
        return Rule.POSTING_CLOSED
    if not has_open_slot(posting):
        return Rule.NO_SLOTS
    if not meets_year_level(student, posting):
        return Rule.YEAR_LEVEL
    if any(app.posting_id == posting.id and app.is_active for app in applications):
        return Rule.DUPLICATE_APPLICATION
    return None


def can_apply(
    student: Student,
    posting: InternshipOpportunity,
    applications: Iterable[Application] = (),
    today: date | None = None,
) -> bool:
    return application_violation(student, posting, applications, today) is None


def is_visible_to(posting: InternshipOpportunity, student: Student) -> bool:
    return (
        posting.status == PostingStatus.APPROVED
        and bool(posting.visible)
        and posting.accepts_major(student.major)
        and meets_year_level(student, posting)
    )


def can_create_posting(representative: CompanyRepresentative) -> bool:
    return bool(representative.authorized) and representative.posting_count < MAX_POSTINGS_PER_REPRESENTATIVE
