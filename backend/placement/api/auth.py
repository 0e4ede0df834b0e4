from __future__ import annotations

from fastapi import APIRouter, Depends

from placement.api.deps import get_accounts
from placement.auth import Actor, create_access_token, get_current_actor
from placement.schemas.account import RepresentativeOut
from placement.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MeResponse,
    RegisterRepresentativeRequest,
)
from placement.schemas.common import ApiResponse, ok
from placement.services.accounts import AccountService, NewRepresentative


router = APIRouter()


@router.post("/login", response_model=ApiResponse[AuthResponse])
def login(payload: LoginRequest, accounts: AccountService = Depends(get_accounts)) -> ApiResponse:
    user = accounts.authenticate(payload.role, payload.user_id, payload.password)
    token = create_access_token(payload.role, user.id)
    return ok(
        AuthResponse(access_token=token, role=payload.role, user_id=user.id, name=user.name),
        "Login successful",
    )


@router.post("/register", response_model=ApiResponse[RepresentativeOut])
def register(
    payload: RegisterRepresentativeRequest,
    accounts: AccountService = Depends(get_accounts),
) -> ApiResponse:
    representative = accounts.register_representative(
        NewRepresentative(
            email=payload.email,
            name=payload.name,
            company_name=payload.company_name,
            password=payload.password,
            department=payload.department,
            position=payload.position,
        )
    )
    return ok(
        RepresentativeOut.model_validate(representative),
        "Registration submitted. Your account is pending approval by Career Center Staff",
    )


@router.get("/me", response_model=ApiResponse[MeResponse])
def me(actor: Actor = Depends(get_current_actor)) -> ApiResponse:
    return ok(MeResponse(role=actor.role, user_id=actor.id, name=actor.user.name, email=actor.user.email))


@router.post("/change-password", response_model=ApiResponse[None])
def change_password(
    payload: ChangePasswordRequest,
    actor: Actor = Depends(get_current_actor),
    accounts: AccountService = Depends(get_accounts),
) -> ApiResponse:
    accounts.change_password(actor.role, actor.id, payload.current_password, payload.new_password)
    return ok(message="Password changed successfully")
