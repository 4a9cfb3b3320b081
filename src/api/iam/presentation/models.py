"""Pydantic models shared by the IAM routes."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from iam.domain.entities import Tenant, User, UserProfile
from iam.domain.policy import EntityPermission, Permissions, RolePolicy
from iam.domain.value_objects import SessionTokens


class TokensResponse(BaseModel):
    """Access/refresh token pair of a session."""

    access_token: str = Field(..., description="Bearer token for API calls")
    refresh_token: str = Field(..., description="Token used to rotate the session")

    @classmethod
    def from_domain(cls, tokens: SessionTokens) -> TokensResponse:
        return cls(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


class UserProfileModel(BaseModel):
    """Optional profile details of a user."""

    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    phone: str | None = None
    country_code: str | None = None
    timezone: str | None = None
    language: str | None = None
    avatar: str | None = None

    @classmethod
    def from_domain(cls, profile: UserProfile) -> UserProfileModel:
        return cls(**asdict(profile))

    def to_domain(self) -> UserProfile:
        return UserProfile(**self.model_dump())


class UserResponse(BaseModel):
    """Response model for a user."""

    id: str = Field(..., description="Identity backend user ID")
    email: str = Field(..., description="Primary email address")
    time_joined: datetime = Field(..., description="Account creation time")
    tenant_ids: list[str] = Field(default_factory=list, description="Tenant memberships")
    profile: UserProfileModel = Field(default_factory=UserProfileModel)

    @classmethod
    def from_domain(cls, user: User) -> UserResponse:
        """Convert a domain User to an API response.

        The identity backend's public tenant is not reported as a membership.
        """
        return cls(
            id=user.id,
            email=user.email,
            time_joined=user.time_joined,
            tenant_ids=user.member_tenant_ids,
            profile=UserProfileModel.from_domain(user.profile),
        )


class TenantResponse(BaseModel):
    """Response model for a tenant."""

    id: str = Field(..., description="Tenant ID")
    name: str = Field(..., description="Tenant display name")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, tenant: Tenant) -> TenantResponse:
        return cls(
            id=tenant.id,
            name=tenant.name,
            created_at=tenant.created_at,
            updated_at=tenant.updated_at,
        )


class EntityPermissionModel(BaseModel):
    """Access rule for one entity.

    Actions are plain strings here; unknown actions are rejected by the
    role service with a BAD_REQUEST error.
    """

    access: bool = Field(..., description="Whether the entity is accessible")
    actions: list[str] = Field(
        default_factory=list, description="Granted actions: create, read, update, delete or *"
    )
    denied_fields: list[str] = Field(
        default_factory=list, description="Fields removed from returned records"
    )

    @classmethod
    def from_domain(cls, rule: EntityPermission) -> EntityPermissionModel:
        return cls(**rule.to_dict())


def permissions_response(
    permissions: Permissions | None,
) -> dict[str, EntityPermissionModel] | None:
    """Convert a permission set, keeping None for "no permissions resolved"."""
    if permissions is None:
        return None
    return {
        entity: EntityPermissionModel.from_domain(rule)
        for entity, rule in permissions.items()
    }


class RolePolicyModel(BaseModel):
    """Permission document of a role."""

    permissions: dict[str, EntityPermissionModel] = Field(
        default_factory=dict, description="Rules keyed by entity name or *"
    )
    description: str | None = Field(default=None, description="Policy description")
    mfa_required: bool = Field(default=False, description="Holders must use MFA")

    @classmethod
    def from_domain(cls, policy: RolePolicy) -> RolePolicyModel:
        return cls(
            permissions=permissions_response(policy.permissions) or {},
            description=policy.description,
            mfa_required=policy.mfa_required,
        )

    def to_document(self) -> dict[str, Any]:
        """Stored JSON form, validated by the role service."""
        return self.model_dump(exclude_none=True)
