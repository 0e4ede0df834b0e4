from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from placement.config import settings
from placement.database import get_store
from placement.models import CompanyRepresentative, Staff, Student, UserRole
from placement.services.store import CollectionStore


security = HTTPBearer(auto_error=False)
DEFAULT_ITERATIONS = 210_000


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        DEFAULT_ITERATIONS,
    ).hex()
    return f"pbkdf2_sha256${DEFAULT_ITERATIONS}${salt}${digest}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        _, iterations_str, salt, digest = password_hash.split("$", 3)
        iterations = int(iterations_str)
    except ValueError:
        return False
    expected = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        iterations,
    ).hex()
    return hmac.compare_digest(expected, digest)


def _sign(payload: str) -> str:
    return hmac.new(settings.auth_secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def create_access_token(role: UserRole, user_id: str) -> str:
    exp = int(time.time()) + settings.token_ttl_seconds
    nonce = secrets.token_hex(6)
    payload = f"{role.value}:{user_id}:{exp}:{nonce}"
    token_raw = f"{payload}:{_sign(payload)}".encode("utf-8")
    return base64.urlsafe_b64encode(token_raw).decode("utf-8").rstrip("=")


def decode_access_token(token: str) -> tuple[UserRole, str] | None:
    if not token:
        return None
    padding = "=" * (-len(token) % 4)
    try:
        decoded = base64.urlsafe_b64decode((token + padding).encode("utf-8")).decode("utf-8")
        head, exp_str, nonce, signature = decoded.rsplit(":", 3)
        role_str, user_id = head.split(":", 1)
    except (ValueError, UnicodeDecodeError):
        return None

    payload = f"{head}:{exp_str}:{nonce}"
    if not hmac.compare_digest(_sign(payload), signature):
        return None

    try:
        exp = int(exp_str)
        role = UserRole(role_str)
    except ValueError:
        return None
    if exp < int(time.time()):
        return None
    return role, user_id


def find_user(store: CollectionStore, role: UserRole, user_id: str) -> Student | CompanyRepresentative | Staff | None:
    with store.unit_of_work() as uow:
        return uow.users(role).find(user_id)


@dataclass
class Actor:
    role: UserRole
    user: Student | CompanyRepresentative | Staff

    @property
    def id(self) -> str:
        return self.user.id


def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    store: CollectionStore = Depends(get_store),
) -> Actor:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    decoded = decode_access_token(credentials.credentials)
    if decoded is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    role, user_id = decoded

    user = find_user(store, role, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user")
    if role == UserRole.REPRESENTATIVE and not user.authorized:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account pending approval")
    return Actor(role=role, user=user)


def _require(role: UserRole):
    def dependency(actor: Actor = Depends(get_current_actor)):
        if actor.role != role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"{role.value.title()} access only")
        return actor.user

    return dependency


require_student = _require(UserRole.STUDENT)
require_representative = _require(UserRole.REPRESENTATIVE)
require_staff = _require(UserRole.STAFF)
