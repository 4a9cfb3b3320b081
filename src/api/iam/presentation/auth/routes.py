"""HTTP routes for login, registration and session lifecycle."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from iam.application.services import AuthCoreService
from iam.application.value_objects import RequestContext
from iam.dependencies import get_auth_core_service, get_request_context
from iam.presentation.auth.models import (
    AuthResponse,
    LoginRequest,
    PasswordResetConfirmRequest,
    PasswordResetRequest,
    RefreshRequest,
    RegisterRequest,
)
from iam.presentation.models import TokensResponse

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post("/login")
async def login(
    request: LoginRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[AuthCoreService, Depends(get_auth_core_service)],
) -> AuthResponse:
    """Verify credentials and open a session.

    Returns 401 WRONG_CREDENTIALS for an unknown email or wrong password.
    """
    result = await service.login(request.email, request.password, ctx)
    return AuthResponse.from_domain(result)


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    service: Annotated[AuthCoreService, Depends(get_auth_core_service)],
) -> AuthResponse:
    result = await service.register(
        request.email,
        request.password,
        first_name=request.first_name,
        last_name=request.last_name,
    )
    return AuthResponse.from_domain(result)


@router.post("/refresh")
async def refresh(
    request: RefreshRequest,
    service: Annotated[AuthCoreService, Depends(get_auth_core_service)],
) -> TokensResponse:
    """Rotate a refresh token.

    A reused refresh token answers 401 TOKEN_THEFT and revokes every
    session of its user.
    """
    tokens = await service.refresh_session(request.refresh_token)
    return TokensResponse.from_domain(tokens)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[AuthCoreService, Depends(get_auth_core_service)],
) -> None:
    await service.logout(ctx)


@router.post("/password-reset", status_code=status.HTTP_202_ACCEPTED)
async def send_password_reset(
    request: PasswordResetRequest,
    service: Annotated[AuthCoreService, Depends(get_auth_core_service)],
) -> None:
    """Send a reset link. Answers the same whether or not the email exists."""
    await service.send_password_reset_email(request.email)


@router.post("/password-reset/confirm", status_code=status.HTTP_204_NO_CONTENT)
async def confirm_password_reset(
    request: PasswordResetConfirmRequest,
    service: Annotated[AuthCoreService, Depends(get_auth_core_service)],
) -> None:
    await service.reset_password(request.token, request.new_password)
