from __future__ import annotations

from datetime import date, timedelta

from placement.errors import Rule
from placement.models import (
    Application,
    ApplicationStatus,
    ApprovalStatus,
    CompanyRepresentative,
    InternshipOpportunity,
    PostingLevel,
    PostingStatus,
    Student,
)
from placement.services.eligibility import (
    active_application_count,
    application_violation,
    can_apply,
    can_create_posting,
    is_visible_to,
)

TODAY = date(2025, 3, 3)


def _student(year: int = 3, major: str = "Computer Science", accepted: bool = False) -> Student:
    return Student(
        id="U1234567A",
        name="Tan Wei Ming",
        year_of_study=year,
        major=major,
        application_ids=[],
        has_accepted_placement=accepted,
    )


def _posting(
    posting_id: str = "INT-1",
    level: PostingLevel = PostingLevel.BASIC,
    status: PostingStatus = PostingStatus.APPROVED,
    preferred_major: str = "Any",
    slots: int = 2,
    filled: int = 0,
    visible: bool = True,
    opening: date = TODAY - timedelta(days=5),
    closing: date = TODAY + timedelta(days=5),
) -> InternshipOpportunity:
    return InternshipOpportunity(
        id=posting_id,
        title="Backend Intern",
        level=level,
        status=status,
        preferred_major=preferred_major,
        slots=slots,
        filled_slots=filled,
        visible=visible,
        opening_date=opening,
        closing_date=closing,
        representative_id="hr@acme.com",
    )


def _application(
    posting_id: str = "INT-9",
    status: ApplicationStatus = ApplicationStatus.PENDING,
    accepted: bool = False,
) -> Application:
    return Application(
        id=f"APP-{posting_id}",
        student_id="U1234567A",
        posting_id=posting_id,
        status=status,
        placement_accepted=accepted,
    )


def test_eligible_student_has_no_violation():
    assert application_violation(_student(), _posting(), [], TODAY) is None
    assert can_apply(_student(), _posting(), [], TODAY)


def test_accepted_placement_is_checked_first():
    posting = _posting(status=PostingStatus.PENDING, slots=1, filled=1)
    assert application_violation(_student(accepted=True), posting, [], TODAY) == Rule.PLACEMENT_ALREADY_ACCEPTED


def test_application_limit_counts_only_active_applications():
    active = [_application("INT-7"), _application("INT-8"), _application("INT-9", ApplicationStatus.SUCCESSFUL)]
    assert application_violation(_student(), _posting(), active, TODAY) == Rule.APPLICATION_LIMIT

    inactive = [
        _application("INT-7", ApplicationStatus.REJECTED),
        _application("INT-8", ApplicationStatus.WITHDRAWN),
        _application("INT-9", ApplicationStatus.SUCCESSFUL, accepted=True),
        _application("INT-6"),
    ]
    assert active_application_count(inactive) == 1
    assert application_violation(_student(), _posting(), inactive, TODAY) is None


def test_only_approved_postings_accept_applications():
    for status in (PostingStatus.PENDING, PostingStatus.REJECTED, PostingStatus.FILLED):
        assert application_violation(_student(), _posting(status=status), [], TODAY) == Rule.POSTING_NOT_OPEN


def test_application_window_is_inclusive():
    assert application_violation(_student(), _posting(opening=TODAY, closing=TODAY), [], TODAY) is None
    assert (
        application_violation(_student(), _posting(closing=TODAY - timedelta(days=1)), [], TODAY)
        == Rule.POSTING_CLOSED
    )
    assert (
        application_violation(_student(), _posting(opening=TODAY + timedelta(days=1)), [], TODAY)
        == Rule.POSTING_CLOSED
    )


def test_full_posting_has_no_slots():
    assert application_violation(_student(), _posting(slots=2, filled=2), [], TODAY) == Rule.NO_SLOTS


def test_junior_students_limited_to_basic_level():
    for level in (PostingLevel.INTERMEDIATE, PostingLevel.ADVANCED):
        assert application_violation(_student(year=1), _posting(level=level), [], TODAY) == Rule.YEAR_LEVEL
        assert application_violation(_student(year=2), _posting(level=level), [], TODAY) == Rule.YEAR_LEVEL
        assert application_violation(_student(year=3), _posting(level=level), [], TODAY) is None
    assert application_violation(_student(year=1), _posting(level=PostingLevel.BASIC), [], TODAY) is None


def test_duplicate_active_application_blocked_but_reapply_after_rejection_allowed():
    pending = [_application("INT-1")]
    assert application_violation(_student(), _posting("INT-1"), pending, TODAY) == Rule.DUPLICATE_APPLICATION

    rejected = [_application("INT-1", ApplicationStatus.REJECTED)]
    assert application_violation(_student(), _posting("INT-1"), rejected, TODAY) is None


def test_major_does_not_gate_applying():
    posting = _posting(preferred_major="Mechanical Engineering")
    assert application_violation(_student(major="Computer Science"), posting, [], TODAY) is None
    assert not is_visible_to(posting, _student(major="Computer Science"))


def test_visibility_rules():
    student = _student(major="Computer Science")
    assert is_visible_to(_posting(preferred_major="Any"), student)
    assert is_visible_to(_posting(preferred_major="computer science"), student)
    assert not is_visible_to(_posting(visible=False), student)
    assert not is_visible_to(_posting(status=PostingStatus.PENDING), student)
    assert not is_visible_to(_posting(level=PostingLevel.ADVANCED), _student(year=2))


def test_can_create_posting_requires_authorization_and_quota():
    representative = CompanyRepresentative(
        id="hr@acme.com",
        status=ApprovalStatus.APPROVED,
        authorized=True,
        posting_ids=["INT-1", "INT-2", "INT-3", "INT-4"],
    )
    assert can_create_posting(representative)

    representative.posting_ids.append("INT-5")
    assert not can_create_posting(representative)

    pending = CompanyRepresentative(id="new@acme.com", status=ApprovalStatus.PENDING, authorized=False, posting_ids=[])
    assert not can_create_posting(pending)
