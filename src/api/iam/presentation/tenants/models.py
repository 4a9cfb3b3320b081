"""Pydantic models for tenant, membership and invitation requests."""

from __future__ import annotations

from pydantic import BaseModel, Field

from iam.domain.entities import PendingInvite, UserPage
from iam.presentation.models import UserResponse


class CreateTenantRequest(BaseModel):
    """Request model for creating a tenant."""

    name: str = Field(..., description="Tenant name", min_length=1, max_length=255)


class UpdateTenantRequest(BaseModel):
    """Request model for renaming the current tenant."""

    name: str = Field(..., description="Tenant name", min_length=1, max_length=255)


class UserPageResponse(BaseModel):
    """One page of tenant members, newest first."""

    users: list[UserResponse]
    next_pagination_token: str | None = None

    @classmethod
    def from_domain(cls, page: UserPage) -> UserPageResponse:
        return cls(
            users=[UserResponse.from_domain(user) for user in page.users],
            next_pagination_token=page.next_pagination_token,
        )


class InviteUserRequest(BaseModel):
    """Request model for inviting a user into the current tenant."""

    email: str = Field(..., min_length=1)
    role_name: str = Field(..., min_length=1, description="Existing role in the tenant")


class AcceptInviteRequest(BaseModel):
    """Request model for accepting an invite link."""

    token: str = Field(..., min_length=1)


class AcceptedInviteResponse(BaseModel):
    """Tenant and role granted by an accepted invite."""

    tenant_id: str
    role_name: str

    @classmethod
    def from_domain(cls, invite: PendingInvite) -> AcceptedInviteResponse:
        return cls(tenant_id=invite.tenant_id, role_name=invite.role_name)
