from __future__ import annotations

import pytest

from placement.errors import BusinessRuleViolation, InvalidInput, InvalidState, Rule, Unauthorized
from placement.models import ApplicationStatus, PostingStatus, WithdrawalStatus

from conftest import NOW


def test_approving_withdrawal_of_accepted_placement_releases_slot(
    lifecycle, staff, student, make_posting, successful_application, reload
):
    posting = make_posting(slots=1)
    application = successful_application(student, posting)
    lifecycle.accept_placement(student, application.id)
    assert reload("postings", posting.id).status == PostingStatus.FILLED

    request = lifecycle.request_withdrawal(student, application.id, "Family relocation")
    assert request.id.startswith("WDR-")
    assert request.status == WithdrawalStatus.PENDING
    assert request.posting_id == posting.id

    decided = lifecycle.decide_withdrawal(staff, request.id, True)

    assert decided.status == WithdrawalStatus.APPROVED
    assert decided.processed_by == staff.id
    assert decided.processed_at == NOW
    withdrawn = reload("applications", application.id)
    assert withdrawn.status == ApplicationStatus.WITHDRAWN
    assert not withdrawn.placement_accepted
    reopened = reload("postings", posting.id)
    assert reopened.filled_slots == 0
    assert reopened.status == PostingStatus.APPROVED


def test_approving_withdrawal_of_pending_application_keeps_slots(
    lifecycle, staff, student, make_posting, reload
):
    posting = make_posting()
    application = lifecycle.submit_application(student, posting.id)
    request = lifecycle.request_withdrawal(student, application.id, "Changed my mind")

    lifecycle.decide_withdrawal(staff, request.id, True, "OK")

    assert reload("applications", application.id).status == ApplicationStatus.WITHDRAWN
    assert reload("postings", posting.id).filled_slots == 0
    # a withdrawn application no longer blocks a fresh one
    assert lifecycle.submit_application(student, posting.id).status == ApplicationStatus.PENDING


def test_rejected_withdrawal_leaves_application_untouched(lifecycle, staff, student, make_posting, reload):
    application = lifecycle.submit_application(student, make_posting().id)
    request = lifecycle.request_withdrawal(student, application.id, "Changed my mind")

    decided = lifecycle.decide_withdrawal(staff, request.id, False, "Please talk to your advisor")

    assert decided.status == WithdrawalStatus.REJECTED
    assert decided.staff_comments == "Please talk to your advisor"
    assert reload("applications", application.id).status == ApplicationStatus.PENDING
    with pytest.raises(InvalidState):
        lifecycle.decide_withdrawal(staff, request.id, True)


def test_withdrawal_reason_is_required(lifecycle, student, make_posting):
    application = lifecycle.submit_application(student, make_posting().id)

    with pytest.raises(InvalidInput):
        lifecycle.request_withdrawal(student, application.id, "   ")


def test_duplicate_withdrawal_requests_are_blocked(lifecycle, staff, student, make_posting):
    application = lifecycle.submit_application(student, make_posting().id)
    first = lifecycle.request_withdrawal(student, application.id, "Changed my mind")

    with pytest.raises(BusinessRuleViolation) as excinfo:
        lifecycle.request_withdrawal(student, application.id, "Still changed my mind")
    assert excinfo.value.rule == Rule.DUPLICATE_WITHDRAWAL

    lifecycle.decide_withdrawal(staff, first.id, False)
    second = lifecycle.request_withdrawal(student, application.id, "Asking again")
    assert second.status == WithdrawalStatus.PENDING


def test_rejected_applications_cannot_be_withdrawn(lifecycle, representative, student, make_posting):
    application = lifecycle.submit_application(student, make_posting().id)
    lifecycle.decide_application(representative, application.id, False)

    with pytest.raises(InvalidState):
        lifecycle.request_withdrawal(student, application.id, "No longer interested")


def test_withdrawal_of_since_rejected_application_cannot_be_approved(
    lifecycle, representative, staff, student, make_posting, reload
):
    application = lifecycle.submit_application(student, make_posting().id)
    request = lifecycle.request_withdrawal(student, application.id, "Found another offer")
    lifecycle.decide_application(representative, application.id, False, "Not a fit")

    with pytest.raises(InvalidState, match="Rejected cannot be withdrawn"):
        lifecycle.decide_withdrawal(staff, request.id, True)

    assert reload("applications", application.id).status == ApplicationStatus.REJECTED
    assert reload("withdrawals", request.id).status == WithdrawalStatus.PENDING
    assert lifecycle.decide_withdrawal(staff, request.id, False).status == WithdrawalStatus.REJECTED


def test_students_can_only_withdraw_their_own_applications(lifecycle, make_student, make_posting):
    owner = make_student()
    other = make_student("U7654321B", name="Lim Jia Hui")
    application = lifecycle.submit_application(owner, make_posting().id)

    with pytest.raises(Unauthorized):
        lifecycle.request_withdrawal(other, application.id, "Not mine")


def test_cancelled_request_records_reason_and_allows_new_request(lifecycle, staff, student, make_posting):
    application = lifecycle.submit_application(student, make_posting().id)
    request = lifecycle.request_withdrawal(student, application.id, "Changed my mind")

    cancelled = lifecycle.cancel_withdrawal_request(student, request.id, "Sorted it out")

    assert cancelled.status == WithdrawalStatus.CANCELLED
    assert cancelled.staff_comments == "Cancelled by student. Reason: Sorted it out"
    with pytest.raises(InvalidState):
        lifecycle.decide_withdrawal(staff, request.id, True)
    with pytest.raises(InvalidState):
        lifecycle.cancel_withdrawal_request(student, request.id, "Again")
    assert lifecycle.request_withdrawal(student, application.id, "Changed my mind again").status == (
        WithdrawalStatus.PENDING
    )


def test_reason_can_be_updated_while_pending(lifecycle, staff, student, make_posting, make_student):
    application = lifecycle.submit_application(student, make_posting().id)
    request = lifecycle.request_withdrawal(student, application.id, "Changed my mind")

    updated = lifecycle.update_withdrawal_reason(student, request.id, "Accepted an overseas exchange")
    assert updated.reason == "Accepted an overseas exchange"

    other = make_student("U7654321B", name="Lim Jia Hui")
    with pytest.raises(Unauthorized):
        lifecycle.update_withdrawal_reason(other, request.id, "Hijack")

    lifecycle.decide_withdrawal(staff, request.id, False)
    with pytest.raises(InvalidState):
        lifecycle.update_withdrawal_reason(student, request.id, "Too late")


def test_withdrawal_listings(lifecycle, staff, student, make_posting):
    first = lifecycle.submit_application(student, make_posting(title="First").id)
    second = lifecycle.submit_application(student, make_posting(title="Second").id)
    kept = lifecycle.request_withdrawal(student, first.id, "Reason one")
    done = lifecycle.request_withdrawal(student, second.id, "Reason two")
    lifecycle.decide_withdrawal(staff, done.id, False)

    assert [request.id for request in lifecycle.list_pending_withdrawals()] == [kept.id]
    assert {request.id for request in lifecycle.list_withdrawals()} == {kept.id, done.id}
    assert {request.id for request in lifecycle.list_withdrawals_for_student(student)} == {kept.id, done.id}
