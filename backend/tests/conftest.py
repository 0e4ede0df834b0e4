from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
from sqlalchemy.pool import StaticPool

from placement import models  # noqa: F401
from placement.database import Base, make_engine, make_session_factory
from placement.models import PostingLevel
from placement.services.accounts import AccountService, NewRepresentative, NewStudent
from placement.services.lifecycle import PlacementLifecycle
from placement.services.postings import PostingDraft, PostingService
from placement.services.reports import ReportService
from placement.services.store import CollectionStore

TODAY = date(2025, 3, 3)
NOW = datetime(2025, 3, 3, 9, 30)


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    monkeypatch.setattr("placement.auth.DEFAULT_ITERATIONS", 1_000)


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return CollectionStore(make_session_factory(engine))


@pytest.fixture
def accounts(store):
    return AccountService(store)


@pytest.fixture
def postings(store):
    return PostingService(store, today=lambda: TODAY)


@pytest.fixture
def lifecycle(store):
    return PlacementLifecycle(store, clock=lambda: NOW, today=lambda: TODAY)


@pytest.fixture
def reports(store):
    return ReportService(store)


@pytest.fixture
def staff(accounts):
    return accounts.ensure_staff("staff", "password")


@pytest.fixture
def make_representative(accounts, staff):
    def factory(email="hr@acme.com", company_name="Acme", approve=True):
        data = NewRepresentative(email=email, name="Ada Lovelace", company_name=company_name, password="secret1")
        if approve:
            return accounts.create_representative(staff, data)
        return accounts.register_representative(data)

    return factory


@pytest.fixture
def representative(make_representative):
    return make_representative()


@pytest.fixture
def make_student(accounts, staff):
    def factory(student_id="U1234567A", year=3, major="Computer Science", name="Tan Wei Ming"):
        return accounts.create_student(
            staff,
            NewStudent(id=student_id, name=name, year_of_study=year, major=major, password="password"),
        )

    return factory


@pytest.fixture
def student(make_student):
    return make_student()


@pytest.fixture
def make_posting(postings, staff, representative):
    def factory(owner=None, approve=True, **overrides):
        fields = {
            "title": "Backend Intern",
            "level": PostingLevel.BASIC,
            "opening_date": TODAY - timedelta(days=7),
            "closing_date": TODAY + timedelta(days=30),
            "slots": 2,
        }
        fields.update(overrides)
        posting = postings.create_posting(owner or representative, PostingDraft(**fields))
        if approve:
            posting = postings.decide_posting(staff, posting.id, True)
        return posting

    return factory


@pytest.fixture
def reload(store):
    def fetch(collection, entity_id):
        with store.unit_of_work() as uow:
            return getattr(uow, collection).get(entity_id)

    return fetch


@pytest.fixture
def successful_application(lifecycle, representative):
    def factory(student, posting):
        application = lifecycle.submit_application(student, posting.id)
        return lifecycle.decide_application(representative, application.id, True, "Great fit")

    return factory
