"""Pydantic models for role and policy management."""

from __future__ import annotations

from pydantic import BaseModel, Field

from iam.application.value_objects import RoleSummary
from iam.presentation.models import EntityPermissionModel, RolePolicyModel, permissions_response


class RoleResponse(BaseModel):
    """A tenant role with its resolved permissions."""

    name: str
    permissions: dict[str, EntityPermissionModel] | None = None

    @classmethod
    def from_domain(cls, role: RoleSummary) -> RoleResponse:
        return cls(name=role.name, permissions=permissions_response(role.permissions))


class CreateRoleRequest(BaseModel):
    """Request model for creating a role."""

    name: str = Field(..., min_length=1, max_length=100)
    policy: RolePolicyModel = Field(default_factory=RolePolicyModel)
