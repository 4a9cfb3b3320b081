"""Pydantic models for the caller's own account."""

from __future__ import annotations

from pydantic import BaseModel, Field

from iam.application.value_objects import RequestContext, UserUpdateResult
from iam.domain.entities import UserProfile, UserUpdate
from iam.presentation.models import (
    EntityPermissionModel,
    TokensResponse,
    UserProfileModel,
    UserResponse,
    permissions_response,
)


class UpdateUserRequest(BaseModel):
    """Request model for changing credentials or profile fields.

    Only fields that are set are changed. A new password requires the
    current one.
    """

    email: str | None = Field(default=None, min_length=1)
    password: str | None = Field(default=None, min_length=1)
    current_password: str | None = None
    profile: UserProfileModel | None = None

    def to_domain(self) -> UserUpdate:
        return UserUpdate(
            email=self.email,
            password=self.password,
            current_password=self.current_password,
            profile=self.profile.to_domain() if self.profile else UserProfile(),
        )


class UpdateUserResponse(BaseModel):
    """Updated user, with replacement tokens after a password change."""

    user: UserResponse
    tokens: TokensResponse | None = None

    @classmethod
    def from_domain(cls, result: UserUpdateResult) -> UpdateUserResponse:
        return cls(
            user=UserResponse.from_domain(result.user),
            tokens=TokensResponse.from_domain(result.tokens) if result.tokens else None,
        )


class MyPermissionsResponse(BaseModel):
    """Role and permissions resolved for the current request.

    ``permissions`` is null without a session, a tenant header or a role
    in that tenant.
    """

    tenant_id: str | None = None
    role: str | None = None
    permissions: dict[str, EntityPermissionModel] | None = None

    @classmethod
    def from_context(cls, ctx: RequestContext) -> MyPermissionsResponse:
        return cls(
            tenant_id=ctx.tenant_id,
            role=ctx.role,
            permissions=permissions_response(ctx.permissions),
        )
