from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from placement.auth import hash_password, verify_password
from placement.errors import InvalidInput, InvalidState, Unauthorized
from placement.models import ApprovalStatus, CompanyRepresentative, Staff, Student, UserRole
from placement.services.store import CollectionStore


log = logging.getLogger(__name__)

STUDENT_ID_PATTERN = re.compile(r"^U\d{7}[A-Z]$")
EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
MIN_PASSWORD_LENGTH = 6


@dataclass
class NewStudent:
    id: str
    name: str
    year_of_study: int
    major: str
    password: str
    email: str | None = None


@dataclass
class NewRepresentative:
    email: str
    name: str
    company_name: str
    password: str
    department: str | None = None
    position: str | None = None


def _check_password(password: str) -> None:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise InvalidInput(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


class AccountService:
    def __init__(self, store: CollectionStore) -> None:
        self.store = store

    def authenticate(
        self, role: UserRole, user_id: str, password: str
    ) -> Student | CompanyRepresentative | Staff:
        user_id = normalize_user_id(role, user_id)
        with self.store.unit_of_work() as uow:
            user = uow.users(role).find(user_id)
        if user is None or not verify_password(password, user.password_hash):
            raise Unauthorized("Invalid user ID or password")
        if role == UserRole.REPRESENTATIVE and not user.authorized:
            if user.status == ApprovalStatus.REJECTED:
                raise Unauthorized("Your registration has been rejected")
            raise Unauthorized("Your account is pending approval by Career Center Staff")
        return user

    def register_representative(self, data: NewRepresentative) -> CompanyRepresentative:
        email = data.email.strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise InvalidInput("A valid company email is required")
        _check_password(data.password)

        with self.store.locked(("representative", email)):
            with self.store.unit_of_work() as uow:
                if uow.representatives.find(email) is not None:
                    raise InvalidState(f"A representative with email {email} already exists")
                representative = uow.representatives.put(
                    CompanyRepresentative(
                        id=email,
                        email=email,
                        name=data.name.strip(),
                        company_name=data.company_name.strip(),
                        department=data.department,
                        position=data.position,
                        password_hash=hash_password(data.password),
                        status=ApprovalStatus.PENDING,
                        authorized=False,
                        posting_ids=[],
                    )
                )

        log.info("Representative %s registered for %s", email, representative.company_name)
        return representative

    def create_representative(self, staff: Staff, data: NewRepresentative) -> CompanyRepresentative:
        representative = self.register_representative(data)
        with self.store.locked(("representative", representative.id)):
            with self.store.unit_of_work() as uow:
                representative = uow.representatives.get(representative.id)
                representative.set_authorization(True, staff.id)
                uow.representatives.put(representative)
        return representative

    def create_student(self, staff: Staff, data: NewStudent) -> Student:
        student_id = data.id.strip().upper()
        if not STUDENT_ID_PATTERN.match(student_id):
            raise InvalidInput("Student ID must look like U1234567A")
        if not 1 <= data.year_of_study <= 4:
            raise InvalidInput("Year of study must be between 1 and 4")
        _check_password(data.password)

        with self.store.locked(("student", student_id)):
            with self.store.unit_of_work() as uow:
                if uow.students.find(student_id) is not None:
                    raise InvalidState(f"Student {student_id} already exists")
                student = uow.students.put(
                    Student(
                        id=student_id,
                        name=data.name.strip(),
                        email=data.email,
                        year_of_study=data.year_of_study,
                        major=data.major.strip(),
                        password_hash=hash_password(data.password),
                        application_ids=[],
                        has_accepted_placement=False,
                    )
                )

        log.info("Staff %s created student %s", staff.id, student_id)
        return student

    def change_password(
        self, role: UserRole, user_id: str, current_password: str, new_password: str
    ) -> None:
        _check_password(new_password)
        with self.store.unit_of_work() as uow:
            user = uow.users(role).get(user_id)
            if not verify_password(current_password, user.password_hash):
                raise Unauthorized("Current password is incorrect")
            user.password_hash = hash_password(new_password)
            uow.users(role).put(user)

    def ensure_staff(self, staff_id: str, password: str, name: str = "Career Center Staff") -> Staff:
        with self.store.unit_of_work() as uow:
            staff = uow.staff.find(staff_id)
            if staff is None:
                staff = uow.staff.put(Staff(id=staff_id, name=name, password_hash=hash_password(password)))
                log.info("Seeded staff account %s", staff_id)
        return staff


def normalize_user_id(role: UserRole, user_id: str) -> str:
    user_id = (user_id or "").strip()
    if role == UserRole.STUDENT:
        return user_id.upper()
    if role == UserRole.REPRESENTATIVE:
        return user_id.lower()
    return user_id
