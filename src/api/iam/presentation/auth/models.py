"""Pydantic models for authentication requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from iam.application.value_objects import AuthResult
from iam.presentation.models import (
    EntityPermissionModel,
    TenantResponse,
    TokensResponse,
    UserResponse,
    permissions_response,
)


class LoginRequest(BaseModel):
    """Request model for email/password login."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Request model for creating an account."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)


class RefreshRequest(BaseModel):
    """Request model for rotating a session."""

    refresh_token: str = Field(..., min_length=1)


class PasswordResetRequest(BaseModel):
    """Request model for sending a password reset link."""

    email: str = Field(..., min_length=1)


class PasswordResetConfirmRequest(BaseModel):
    """Request model for setting a new password with a reset token."""

    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    """Session plus the caller's initial tenant context."""

    user: UserResponse
    tokens: TokensResponse
    tenant: TenantResponse | None = None
    available_tenants: list[TenantResponse] = Field(default_factory=list)
    role: str | None = None
    permissions: dict[str, EntityPermissionModel] | None = None
    requires_password_change: bool = False
    requires_mfa: bool = False
    mfa_enforced: bool = False
    mfa_enabled: bool = False

    @classmethod
    def from_domain(cls, result: AuthResult) -> AuthResponse:
        return cls(
            user=UserResponse.from_domain(result.user),
            tokens=TokensResponse.from_domain(result.tokens),
            tenant=TenantResponse.from_domain(result.tenant) if result.tenant else None,
            available_tenants=[
                TenantResponse.from_domain(t) for t in result.available_tenants
            ],
            role=result.role,
            permissions=permissions_response(result.permissions),
            requires_password_change=result.requires_password_change,
            requires_mfa=result.requires_mfa,
            mfa_enforced=result.mfa_enforced,
            mfa_enabled=result.mfa_enabled,
        )
