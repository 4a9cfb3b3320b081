"""Role and policy management for the current tenant.

Every operation is guarded by the ``system_iam`` entity of the caller's own
policy. The admin role's policy is fixed at tenant creation and cannot be
created, changed or deleted here.
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping

from iam.application.authorization import require_access
from iam.application.observability import DefaultRbacServiceProbe, RbacServiceProbe
from iam.application.session_gate import protect
from iam.application.value_objects import RequestContext, RoleSummary
from iam.domain.policy import RolePolicy
from iam.domain.value_objects import ADMIN_ROLE, SYSTEM_IAM_ENTITY, EntityAction
from iam.ports.exceptions import BadRequestError, ConflictError, NotFoundError
from iam.ports.providers import IIamProvider, IRbacProvider

PROTECTED_ROLES = frozenset({ADMIN_ROLE})


def _parse_policy(policy: RolePolicy | Mapping[str, Any]) -> RolePolicy:
    if isinstance(policy, RolePolicy):
        return policy
    try:
        return RolePolicy.from_dict(policy)
    except (ValueError, TypeError) as e:
        raise BadRequestError(f"Invalid policy: {e}") from e


def _validate_role_name(role_name: str) -> str:
    role_name = role_name.strip()
    if not role_name:
        raise BadRequestError("Role name is required.")
    return role_name


class RbacService:
    """Application service for tenant roles and their policies."""

    def __init__(
        self,
        rbac_provider: IRbacProvider,
        iam_provider: IIamProvider,
        probe: RbacServiceProbe | None = None,
    ):
        self._rbac = rbac_provider
        self._iam = iam_provider
        self._probe = probe or DefaultRbacServiceProbe()

    def _reject_protected(self, ctx: RequestContext, role_name: str, operation: str) -> None:
        if role_name in PROTECTED_ROLES:
            self._probe.with_context(ctx.observation(operation)).protected_role_change_rejected(
                role_name=role_name, operation=operation
            )
            raise BadRequestError(f"System role '{role_name}' cannot be modified.")

    @protect()
    async def list_roles(self, ctx: RequestContext) -> list[RoleSummary]:
        """List the tenant's roles with their permissions."""
        tenant_id = ctx.require_tenant()
        require_access(ctx, SYSTEM_IAM_ENTITY, EntityAction.READ)

        role_names = await self._rbac.list_tenant_roles(tenant_id)
        policies = await asyncio.gather(
            *(self._rbac.get_role_policy(tenant_id, name) for name in role_names)
        )
        return [
            RoleSummary(
                name=name,
                permissions=policy.permissions if policy is not None else None,
            )
            for name, policy in zip(role_names, policies)
        ]

    @protect()
    async def get_role_policy(
        self, ctx: RequestContext, role_name: str
    ) -> RolePolicy | None:
        """Return a role's policy, or None when the role does not exist."""
        tenant_id = ctx.require_tenant()
        require_access(ctx, SYSTEM_IAM_ENTITY, EntityAction.READ)
        return await self._rbac.get_role_policy(tenant_id, role_name)

    @protect()
    async def create_policy(
        self,
        ctx: RequestContext,
        role_name: str,
        policy: RolePolicy | Mapping[str, Any],
    ) -> RolePolicy:
        """Create a role with its policy.

        Raises:
            ForbiddenError: Without system_iam create rights
            BadRequestError: For the admin role or a malformed policy
            ConflictError: If the role already exists
        """
        tenant_id = ctx.require_tenant()
        require_access(ctx, SYSTEM_IAM_ENTITY, EntityAction.CREATE)
        role_name = _validate_role_name(role_name)
        self._reject_protected(ctx, role_name, "create_policy")
        parsed = _parse_policy(policy)

        if await self._rbac.get_role_policy(tenant_id, role_name) is not None:
            raise ConflictError(f"Role '{role_name}' already exists.")

        await self._rbac.set_role_policy(tenant_id, role_name, parsed)
        self._probe.with_context(ctx.observation("create_policy")).role_policy_created(
            role_name=role_name
        )
        return parsed

    @protect()
    async def update_policy(
        self,
        ctx: RequestContext,
        role_name: str,
        policy: RolePolicy | Mapping[str, Any],
    ) -> RolePolicy:
        """Replace an existing role's policy.

        Raises:
            ForbiddenError: Without system_iam update rights
            BadRequestError: For the admin role or a malformed policy
            NotFoundError: If the role does not exist
        """
        tenant_id = ctx.require_tenant()
        require_access(ctx, SYSTEM_IAM_ENTITY, EntityAction.UPDATE)
        self._reject_protected(ctx, role_name, "update_policy")
        parsed = _parse_policy(policy)

        if await self._rbac.get_role_policy(tenant_id, role_name) is None:
            raise NotFoundError(f"Role '{role_name}' not found.")

        await self._rbac.set_role_policy(tenant_id, role_name, parsed)
        self._probe.with_context(ctx.observation("update_policy")).role_policy_updated(
            role_name=role_name
        )
        return parsed

    @protect()
    async def delete_policy(self, ctx: RequestContext, role_name: str) -> None:
        """Delete a role and its policy.

        Users still assigned the role keep the assignment but resolve to no
        permissions until reassigned.

        Raises:
            ForbiddenError: Without system_iam delete rights
            BadRequestError: For the admin role
            NotFoundError: If the role does not exist
        """
        tenant_id = ctx.require_tenant()
        require_access(ctx, SYSTEM_IAM_ENTITY, EntityAction.DELETE)
        self._reject_protected(ctx, role_name, "delete_policy")

        if await self._rbac.get_role_policy(tenant_id, role_name) is None:
            raise NotFoundError(f"Role '{role_name}' not found.")

        await self._rbac.delete_role_policy(tenant_id, role_name)
        self._probe.with_context(ctx.observation("delete_policy")).role_policy_deleted(
            role_name=role_name
        )

    @protect()
    async def assign_role(self, ctx: RequestContext, user_id: str, role_name: str) -> None:
        """Assign a role to a member of the current tenant.

        Raises:
            ForbiddenError: Without system_iam update rights
            NotFoundError: If the user is not a member of the tenant
            BadRequestError: If the role does not exist
        """
        tenant_id = ctx.require_tenant()
        require_access(ctx, SYSTEM_IAM_ENTITY, EntityAction.UPDATE)

        user = await self._iam.get_user(user_id)
        if user is None or not user.is_member_of(tenant_id):
            raise NotFoundError("User is not a member of this tenant.")

        roles = await self._rbac.list_tenant_roles(tenant_id)
        if role_name not in roles:
            raise BadRequestError(f"Role '{role_name}' does not exist.")

        await self._rbac.assign_role_to_user(user_id, tenant_id, role_name)
        self._probe.with_context(ctx.observation("assign_role")).role_assigned(
            assignee_id=user_id, role_name=role_name
        )
