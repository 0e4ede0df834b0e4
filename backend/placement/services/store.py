from __future__ import annotations

import contextlib
import logging
import threading
import uuid
from collections.abc import Iterator
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from placement.errors import NotFound, PersistenceFailure
from placement.models import (
    Application,
    CompanyRepresentative,
    InternshipOpportunity,
    Staff,
    Student,
    UserRole,
    WithdrawalRequest,
)


log = logging.getLogger(__name__)

T = TypeVar("T")

LABELS = {
    Student: "Student",
    CompanyRepresentative: "Company representative",
    Staff: "Staff member",
    InternshipOpportunity: "Internship opportunity",
    Application: "Application",
    WithdrawalRequest: "Withdrawal request",
}


def generate_id(prefix: str, now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return f"{prefix}-{stamp}-{uuid.uuid4().hex[:8]}"


class Collection(Generic[T]):
    """Entities of one type inside a unit of work."""

    def __init__(self, session: Session, model: type[T], write_lock: threading.RLock) -> None:
        self.session = session
        self.model = model
        self.label = LABELS.get(model, model.__name__)
        self._write_lock = write_lock

    def find(self, entity_id: str | None) -> T | None:
        if not entity_id:
            return None
        return self.session.get(self.model, entity_id)

    def get(self, entity_id: str | None) -> T:
        entity = self.find(entity_id)
        if entity is None:
            raise NotFound.entity(self.label, str(entity_id))
        return entity

    def put(self, entity: T) -> T:
        if getattr(entity, "id", None) is None:
            prefix = getattr(self.model, "id_prefix", None)
            if prefix is None:
                raise ValueError(f"{self.label} requires an explicit id")
            entity.id = generate_id(prefix)
        with self._write_lock:
            self.session.add(entity)
            self._flush()
        return entity

    def delete(self, entity: T) -> None:
        with self._write_lock:
            self.session.delete(entity)
            self._flush()

    def query(self, *criteria: Any) -> list[T]:
        return list(self.session.query(self.model).filter(*criteria).all())

    def all(self) -> list[T]:
        return self.query()

    def _flush(self) -> None:
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Could not record {self.label.lower()}: {exc.__class__.__name__}") from exc


class UnitOfWork:
    def __init__(self, session: Session, write_locks: dict[type, threading.RLock]) -> None:
        self.session = session
        self.students: Collection[Student] = Collection(session, Student, write_locks[Student])
        self.representatives: Collection[CompanyRepresentative] = Collection(
            session, CompanyRepresentative, write_locks[CompanyRepresentative]
        )
        self.staff: Collection[Staff] = Collection(session, Staff, write_locks[Staff])
        self.postings: Collection[InternshipOpportunity] = Collection(
            session, InternshipOpportunity, write_locks[InternshipOpportunity]
        )
        self.applications: Collection[Application] = Collection(session, Application, write_locks[Application])
        self.withdrawals: Collection[WithdrawalRequest] = Collection(
            session, WithdrawalRequest, write_locks[WithdrawalRequest]
        )

    def users(self, role: UserRole) -> Collection:
        return {
            UserRole.STUDENT: self.students,
            UserRole.REPRESENTATIVE: self.representatives,
            UserRole.STAFF: self.staff,
        }[role]

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.error("Commit failed: %s", exc)
            raise PersistenceFailure("The change could not be saved") from exc


class CollectionStore:
    """Entity collections backed by a SQLAlchemy session factory.

    Writes become visible to other callers when the unit of work that made them
    commits. ``locked`` serialises read-check-write sequences per entity.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory
        self._write_locks: dict[type, threading.RLock] = {model: threading.RLock() for model in LABELS}
        self._entity_locks: dict[tuple[str, str], threading.RLock] = {}
        self._registry_lock = threading.Lock()

    @contextlib.contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        session = self.session_factory()
        uow = UnitOfWork(session, self._write_locks)
        try:
            yield uow
            uow.commit()
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def lock_for(self, kind: str, entity_id: str) -> threading.RLock:
        key = (kind, entity_id)
        with self._registry_lock:
            lock = self._entity_locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._entity_locks[key] = lock
            return lock

    @contextlib.contextmanager
    def locked(self, *keys: tuple[str, str]) -> Iterator[None]:
        # Sorted acquisition keeps lock order identical across operations.
        ordered = sorted({(kind, str(entity_id)) for kind, entity_id in keys if entity_id})
        with contextlib.ExitStack() as stack:
            for kind, entity_id in ordered:
                stack.enter_context(self.lock_for(kind, entity_id))
            yield
