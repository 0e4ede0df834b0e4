from __future__ import annotations

from pydantic import BaseModel, Field

from placement.models import UserRole


class LoginRequest(BaseModel):
    role: UserRole
    user_id: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=256)


class RegisterRepresentativeRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    company_name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=6, max_length=256)
    department: str | None = None
    position: str | None = None


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1, max_length=256)
    new_password: str = Field(min_length=6, max_length=256)


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: UserRole
    user_id: str
    name: str


class MeResponse(BaseModel):
    role: UserRole
    user_id: str
    name: str
    email: str | None = None
