from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime

from placement.errors import BusinessRuleViolation, InvalidInput, InvalidState, Rule, Unauthorized
from placement.models import (
    Application,
    ApplicationStatus,
    CompanyRepresentative,
    InternshipOpportunity,
    Staff,
    Student,
    WithdrawalRequest,
    WithdrawalStatus,
)
from placement.services.eligibility import (
    RULE_MESSAGES,
    active_application_count,
    application_violation,
    has_open_slot,
)
from placement.services.store import CollectionStore


log = logging.getLogger(__name__)


def require_text(value: str | None, label: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidInput(f"{label} cannot be empty")
    return cleaned


class PlacementLifecycle:
    """Moves applications and withdrawal requests through their states.

    Each operation validates everything it needs before mutating, inside one
    unit of work, while holding the locks of the entities whose invariants it
    checks. Nothing is kept between calls.
    """

    def __init__(
        self,
        store: CollectionStore,
        clock: Callable[[], datetime] = datetime.utcnow,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.clock = clock
        self.today = today

    # Applications

    def submit_application(self, student: Student, posting_id: str) -> Application:
        with self.store.locked(("student", student.id)):
            with self.store.unit_of_work() as uow:
                current = uow.students.get(student.id)
                posting = uow.postings.get(posting_id)
                applications = uow.applications.query(Application.student_id == current.id)

                rule = application_violation(current, posting, applications, self.today())
                if rule is not None:
                    raise BusinessRuleViolation(rule, RULE_MESSAGES[rule])

                application = uow.applications.put(
                    Application(
                        student_id=current.id,
                        posting_id=posting.id,
                        status=ApplicationStatus.PENDING,
                        submitted_at=self.clock(),
                        placement_accepted=False,
                    )
                )
                current.record_application(application.id)
                uow.students.put(current)

        log.info("Student %s applied to %s (%s)", student.id, posting_id, application.id)
        return application

    def decide_application(
        self,
        representative: CompanyRepresentative,
        application_id: str,
        approve: bool,
        comment: str | None = None,
    ) -> Application:
        # Serialized with accept_placement on the student lock.
        student_id = self._peek_application(application_id).student_id
        with self.store.locked(("student", student_id), ("application", application_id)):
            with self.store.unit_of_work() as uow:
                application = uow.applications.get(application_id)
                posting = uow.postings.get(application.posting_id)
                if posting.representative_id != representative.id:
                    raise Unauthorized("You can only handle applications for your own opportunities")

                application.decide(approve, comment, self.clock())
                uow.applications.put(application)

        log.info("Application %s decided by %s: %s", application_id, representative.id, application.status.value)
        return application

    def accept_placement(self, student: Student, application_id: str) -> Application:
        posting_id = self._peek_application(application_id).posting_id
        with self.store.locked(("student", student.id), ("posting", posting_id)):
            with self.store.unit_of_work() as uow:
                current = uow.students.get(student.id)
                if current.has_accepted_placement:
                    raise BusinessRuleViolation(Rule.PLACEMENT_ALREADY_ACCEPTED, "You have already accepted a placement")

                application = uow.applications.get(application_id)
                if application.student_id != current.id:
                    raise BusinessRuleViolation(Rule.NOT_OWNER, "This application does not belong to you")
                if application.status != ApplicationStatus.SUCCESSFUL:
                    raise BusinessRuleViolation(Rule.NOT_SUCCESSFUL, "Can only accept successful applications")
                if application.placement_accepted:
                    raise BusinessRuleViolation(
                        Rule.PLACEMENT_ALREADY_ACCEPTED, "This placement has already been accepted"
                    )

                posting = uow.postings.get(application.posting_id)
                if not has_open_slot(posting):
                    raise BusinessRuleViolation(Rule.NO_SLOTS, "No available slots for this opportunity")

                now = self.clock()
                application.accept(now)
                current.accept_placement(application.id)
                posting.fill_slot()
                uow.applications.put(application)
                uow.students.put(current)
                uow.postings.put(posting)

                withdrawn = self._cascade_withdraw(uow, current, application, now)

        log.info(
            "Student %s accepted placement %s; withdrew %d other application(s)",
            student.id,
            application_id,
            len(withdrawn),
        )
        return application

    def _cascade_withdraw(self, uow, student: Student, accepted: Application, now: datetime) -> list[str]:
        # Rejected and already withdrawn applications keep their status.
        withdrawn = []
        siblings = uow.applications.query(Application.student_id == student.id, Application.id != accepted.id)
        for other in siblings:
            if other.is_active:
                other.withdraw(now)
                uow.applications.put(other)
                withdrawn.append(other.id)
        return withdrawn

    def _peek_application(self, application_id: str) -> Application:
        with self.store.unit_of_work() as uow:
            return uow.applications.get(application_id)

    # Withdrawal requests

    def request_withdrawal(self, student: Student, application_id: str, reason: str) -> WithdrawalRequest:
        reason = require_text(reason, "Withdrawal reason")
        with self.store.locked(("student", student.id)):
            with self.store.unit_of_work() as uow:
                application = uow.applications.get(application_id)
                if application.student_id != student.id:
                    raise Unauthorized("This application does not belong to you")
                if not application.can_be_withdrawn:
                    raise InvalidState(
                        f"Applications with status {application.status.value} cannot be withdrawn"
                    )

                existing = uow.withdrawals.query(WithdrawalRequest.application_id == application.id)
                for request in existing:
                    if request.status == WithdrawalStatus.PENDING:
                        raise BusinessRuleViolation(
                            Rule.DUPLICATE_WITHDRAWAL,
                            "A withdrawal request for this application is already pending",
                        )
                    if request.status == WithdrawalStatus.APPROVED:
                        raise BusinessRuleViolation(
                            Rule.DUPLICATE_WITHDRAWAL,
                            "A withdrawal request for this application has already been approved",
                        )

                request = uow.withdrawals.put(
                    WithdrawalRequest(
                        application_id=application.id,
                        student_id=student.id,
                        posting_id=application.posting_id,
                        reason=reason,
                        status=WithdrawalStatus.PENDING,
                        requested_at=self.clock(),
                    )
                )

        log.info("Student %s requested withdrawal of %s (%s)", student.id, application_id, request.id)
        return request

    def update_withdrawal_reason(self, student: Student, withdrawal_id: str, reason: str) -> WithdrawalRequest:
        reason = require_text(reason, "Withdrawal reason")
        with self.store.locked(("student", student.id)):
            with self.store.unit_of_work() as uow:
                request = self._owned_request(uow, student, withdrawal_id)
                request.update_reason(reason)
                uow.withdrawals.put(request)
        return request

    def cancel_withdrawal_request(self, student: Student, withdrawal_id: str, reason: str) -> WithdrawalRequest:
        reason = require_text(reason, "Cancellation reason")
        with self.store.locked(("student", student.id)):
            with self.store.unit_of_work() as uow:
                request = self._owned_request(uow, student, withdrawal_id)
                request.cancel(student.id, reason, self.clock())
                uow.withdrawals.put(request)

        log.info("Student %s cancelled withdrawal request %s", student.id, withdrawal_id)
        return request

    def _owned_request(self, uow, student: Student, withdrawal_id: str) -> WithdrawalRequest:
        request = uow.withdrawals.get(withdrawal_id)
        if request.student_id != student.id:
            raise Unauthorized("This withdrawal request does not belong to you")
        return request

    def decide_withdrawal(
        self,
        staff: Staff,
        withdrawal_id: str,
        approve: bool,
        comment: str | None = None,
    ) -> WithdrawalRequest:
        with self.store.unit_of_work() as uow:
            peeked = uow.withdrawals.get(withdrawal_id)
            student_id, posting_id = peeked.student_id, peeked.posting_id

        with self.store.locked(("student", student_id), ("posting", posting_id), ("withdrawal", withdrawal_id)):
            with self.store.unit_of_work() as uow:
                request = uow.withdrawals.get(withdrawal_id)
                if request.status != WithdrawalStatus.PENDING:
                    raise InvalidState(
                        f"Withdrawal request has already been processed (status is {request.status.value})"
                    )
                application = uow.applications.get(request.application_id)
                now = self.clock()

                if approve:
                    if not application.can_be_withdrawn:
                        raise InvalidState(
                            f"Applications with status {application.status.value} cannot be withdrawn"
                        )
                    released = application.placement_accepted
                    request.approve(staff.id, comment, now)
                    application.withdraw(now)
                    uow.applications.put(application)
                    if released:
                        posting = uow.postings.get(application.posting_id)
                        posting.release_slot()
                        uow.postings.put(posting)
                else:
                    request.reject(staff.id, comment, now)
                uow.withdrawals.put(request)

        log.info("Withdrawal request %s %s by %s", withdrawal_id, request.status.value.lower(), staff.id)
        return request

    # Read side

    def list_applications_for_student(
        self, student: Student
    ) -> list[tuple[Application, InternshipOpportunity | None]]:
        with self.store.unit_of_work() as uow:
            applications = uow.applications.query(Application.student_id == student.id)
            applications.sort(key=lambda app: app.submitted_at, reverse=True)
            return [(app, uow.postings.find(app.posting_id)) for app in applications]

    def list_applications_for_posting(
        self, representative: CompanyRepresentative, posting_id: str
    ) -> list[tuple[Application, Student | None]]:
        with self.store.unit_of_work() as uow:
            posting = uow.postings.get(posting_id)
            if posting.representative_id != representative.id:
                raise Unauthorized("You can only view applications for your own opportunities")
            applications = uow.applications.query(Application.posting_id == posting.id)
            applications.sort(key=lambda app: app.submitted_at)
            return [(app, uow.students.find(app.student_id)) for app in applications]

    def list_withdrawals_for_student(self, student: Student) -> list[WithdrawalRequest]:
        with self.store.unit_of_work() as uow:
            return uow.withdrawals.query(WithdrawalRequest.student_id == student.id)

    def active_application_count(self, student: Student) -> int:
        with self.store.unit_of_work() as uow:
            return active_application_count(uow.applications.query(Application.student_id == student.id))

    def list_pending_withdrawals(self) -> list[WithdrawalRequest]:
        with self.store.unit_of_work() as uow:
            return uow.withdrawals.query(WithdrawalRequest.status == WithdrawalStatus.PENDING)

    def list_withdrawals(self) -> list[WithdrawalRequest]:
        with self.store.unit_of_work() as uow:
            return uow.withdrawals.all()
