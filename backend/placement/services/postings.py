from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from placement.errors import BusinessRuleViolation, InvalidState, Rule, Unauthorized
from placement.models import (
    Application,
    ApplicationStatus,
    ApprovalStatus,
    CompanyRepresentative,
    InternshipOpportunity,
    PostingLevel,
    PostingStatus,
    Staff,
    Student,
)
from placement.models.internship import ANY_MAJOR, MAX_SLOTS
from placement.models.user import MAX_POSTINGS_PER_REPRESENTATIVE
from placement.services.eligibility import has_open_slot, is_visible_to
from placement.services.lifecycle import require_text
from placement.services.store import CollectionStore


log = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "title",
    "description",
    "level",
    "preferred_major",
    "opening_date",
    "closing_date",
    "start_date",
    "end_date",
    "slots",
)


@dataclass
class PostingDraft:
    title: str
    level: PostingLevel
    opening_date: date
    closing_date: date
    slots: int
    description: str | None = None
    preferred_major: str = ANY_MAJOR
    start_date: date | None = None
    end_date: date | None = None


def validate_draft(draft: PostingDraft) -> None:
    require_text(draft.title, "Title")
    if not 1 <= draft.slots <= MAX_SLOTS:
        raise BusinessRuleViolation(Rule.SLOT_LIMIT, f"Slots must be between 1 and {MAX_SLOTS}")
    if draft.closing_date < draft.opening_date:
        raise BusinessRuleViolation(Rule.INVALID_DATES, "Closing date must be after opening date")
    if draft.start_date and draft.end_date and draft.end_date < draft.start_date:
        raise BusinessRuleViolation(Rule.INVALID_DATES, "End date must be after start date")


class PostingService:
    def __init__(self, store: CollectionStore, today: Callable[[], date] = date.today) -> None:
        self.store = store
        self.today = today

    def create_posting(self, representative: CompanyRepresentative, draft: PostingDraft) -> InternshipOpportunity:
        validate_draft(draft)
        with self.store.locked(("representative", representative.id)):
            with self.store.unit_of_work() as uow:
                owner = uow.representatives.get(representative.id)
                if not owner.authorized:
                    raise Unauthorized("Only approved representatives can create opportunities")
                if owner.posting_count >= MAX_POSTINGS_PER_REPRESENTATIVE:
                    raise BusinessRuleViolation(
                        Rule.POSTING_LIMIT,
                        f"Representatives can only create up to {MAX_POSTINGS_PER_REPRESENTATIVE} "
                        "internship opportunities",
                    )

                posting = InternshipOpportunity(
                    representative_id=owner.id,
                    company_name=owner.company_name,
                    status=PostingStatus.PENDING,
                    visible=False,
                    filled_slots=0,
                )
                self._apply_draft(posting, draft)
                uow.postings.put(posting)
                owner.add_posting(posting.id)
                uow.representatives.put(owner)

        log.info("Representative %s created posting %s", representative.id, posting.id)
        return posting

    def edit_posting(
        self, representative: CompanyRepresentative, posting_id: str, draft: PostingDraft
    ) -> InternshipOpportunity:
        validate_draft(draft)
        with self.store.locked(("posting", posting_id)):
            with self.store.unit_of_work() as uow:
                posting = self._owned(uow, representative, posting_id)
                if posting.status != PostingStatus.PENDING:
                    raise InvalidState("Opportunities cannot be edited after a staff decision")
                self._apply_draft(posting, draft)
                uow.postings.put(posting)
        return posting

    def delete_posting(self, representative: CompanyRepresentative, posting_id: str) -> None:
        with self.store.locked(("posting", posting_id), ("representative", representative.id)):
            with self.store.unit_of_work() as uow:
                posting = self._owned(uow, representative, posting_id)
                if posting.status not in (PostingStatus.PENDING, PostingStatus.REJECTED):
                    raise InvalidState("Approved opportunities cannot be deleted")
                owner = uow.representatives.get(representative.id)
                owner.remove_posting(posting.id)
                uow.representatives.put(owner)
                uow.postings.delete(posting)

        log.info("Representative %s deleted posting %s", representative.id, posting_id)

    def toggle_visibility(
        self, representative: CompanyRepresentative, posting_id: str, visible: bool
    ) -> InternshipOpportunity:
        with self.store.locked(("posting", posting_id)):
            with self.store.unit_of_work() as uow:
                posting = self._owned(uow, representative, posting_id)
                if posting.status == PostingStatus.PENDING:
                    raise InvalidState("Only approved opportunities can have their visibility toggled")
                posting.visible = visible
                uow.postings.put(posting)
        return posting

    def decide_posting(self, staff: Staff, posting_id: str, approve: bool) -> InternshipOpportunity:
        with self.store.locked(("posting", posting_id)):
            with self.store.unit_of_work() as uow:
                posting = uow.postings.get(posting_id)
                if posting.status != PostingStatus.PENDING:
                    raise InvalidState("Opportunity has already been processed")
                posting.status = PostingStatus.APPROVED if approve else PostingStatus.REJECTED
                posting.visible = approve
                uow.postings.put(posting)

        log.info("Posting %s %s by %s", posting_id, posting.status.value.lower(), staff.id)
        return posting

    def authorize_representative(self, staff: Staff, representative_id: str, approve: bool) -> CompanyRepresentative:
        # Decisions stay revisable; a later call overrides an earlier one.
        with self.store.locked(("representative", representative_id)):
            with self.store.unit_of_work() as uow:
                representative = uow.representatives.get(representative_id)
                representative.set_authorization(approve, staff.id)
                uow.representatives.put(representative)

        log.info("Representative %s %s by %s", representative_id, representative.status.value.lower(), staff.id)
        return representative

    # Read side

    def browse_postings(
        self,
        student: Student,
        level: PostingLevel | None = None,
        company: str | None = None,
        closing_before: date | None = None,
    ) -> list[InternshipOpportunity]:
        today = self.today()
        with self.store.unit_of_work() as uow:
            current = uow.students.get(student.id)
            postings = uow.postings.query(InternshipOpportunity.status == PostingStatus.APPROVED)

        results = [
            posting
            for posting in postings
            if is_visible_to(posting, current) and posting.is_open_on(today) and has_open_slot(posting)
        ]
        if level is not None:
            results = [posting for posting in results if posting.level == level]
        if company:
            needle = company.strip().lower()
            results = [posting for posting in results if needle in (posting.company_name or "").lower()]
        if closing_before is not None:
            results = [posting for posting in results if posting.closing_date <= closing_before]
        return sorted(results, key=lambda posting: (posting.closing_date, posting.title.lower()))

    def list_postings_for_representative(
        self, representative: CompanyRepresentative
    ) -> list[tuple[InternshipOpportunity, int]]:
        with self.store.unit_of_work() as uow:
            postings = uow.postings.query(InternshipOpportunity.representative_id == representative.id)
            pending = uow.applications.query(
                Application.posting_id.in_([posting.id for posting in postings]),
                Application.status == ApplicationStatus.PENDING,
            )
        counts: dict[str, int] = {}
        for application in pending:
            counts[application.posting_id] = counts.get(application.posting_id, 0) + 1
        postings.sort(key=lambda posting: posting.id)
        return [(posting, counts.get(posting.id, 0)) for posting in postings]

    def get_posting(self, posting_id: str) -> InternshipOpportunity:
        with self.store.unit_of_work() as uow:
            return uow.postings.get(posting_id)

    def list_pending_postings(self) -> list[InternshipOpportunity]:
        with self.store.unit_of_work() as uow:
            return uow.postings.query(InternshipOpportunity.status == PostingStatus.PENDING)

    def list_pending_representatives(self) -> list[CompanyRepresentative]:
        with self.store.unit_of_work() as uow:
            return uow.representatives.query(CompanyRepresentative.status == ApprovalStatus.PENDING)

    def list_companies(self) -> list[str]:
        with self.store.unit_of_work() as uow:
            approved = uow.representatives.query(CompanyRepresentative.status == ApprovalStatus.APPROVED)
        return sorted({rep.company_name.strip() for rep in approved if (rep.company_name or "").strip()})

    def _owned(self, uow, representative: CompanyRepresentative, posting_id: str) -> InternshipOpportunity:
        posting = uow.postings.get(posting_id)
        if posting.representative_id != representative.id:
            raise Unauthorized("You can only modify your own opportunities")
        return posting

    @staticmethod
    def _apply_draft(posting: InternshipOpportunity, draft: PostingDraft) -> None:
        for name in EDITABLE_FIELDS:
            setattr(posting, name, getattr(draft, name))
        posting.title = draft.title.strip()
        posting.preferred_major = (draft.preferred_major or ANY_MAJOR).strip() or ANY_MAJOR
