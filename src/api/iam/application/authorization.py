"""Policy enforcement and per-request permission resolution."""

from __future__ import annotations

from iam.application.observability import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)
from iam.application.value_objects import RequestContext
from iam.domain.policy_engine import check_access
from iam.domain.value_objects import EntityAction
from iam.ports.exceptions import ForbiddenError
from iam.ports.providers import IRbacProvider, ISession


def require_access(
    ctx: RequestContext,
    entity_name: str,
    action: EntityAction,
    probe: AuthorizationProbe | None = None,
) -> None:
    """Raise ForbiddenError unless the caller's permissions grant the action.

    Raises:
        ForbiddenError: With the policy engine's denial reason
    """
    decision = check_access(ctx.permissions, entity_name, action)
    if decision.allowed:
        return

    reason = decision.reason or "Access denied."
    probe = probe or DefaultAuthorizationProbe()
    probe.with_context(ctx.observation()).access_denied(
        entity=entity_name,
        action=action.value,
        reason=reason,
    )
    raise ForbiddenError(reason)


class PermissionResolver:
    """Builds the RequestContext for an inbound request.

    The session's user id and the tenant header resolve the user's role in
    that tenant, then the role's policy. Missing pieces leave
    ``permissions`` unset rather than failing the request: anonymous and
    tenant-less requests are valid, protected operations reject them later.
    """

    def __init__(
        self,
        rbac_provider: IRbacProvider,
        global_mfa_enforced: bool = False,
        probe: AuthorizationProbe | None = None,
    ):
        self._rbac = rbac_provider
        self._global_mfa_enforced = global_mfa_enforced
        self._probe = probe or DefaultAuthorizationProbe()

    async def resolve(
        self,
        session: ISession | None,
        tenant_id: str | None,
        request_id: str | None = None,
    ) -> RequestContext:
        ctx = RequestContext(
            session=session,
            tenant_id=tenant_id or None,
            global_mfa_enforced=self._global_mfa_enforced,
            request_id=request_id,
        )
        if session is None or not ctx.tenant_id:
            return ctx

        role = await self._rbac.get_user_role_in_tenant(session.user_id, ctx.tenant_id)
        policy = None
        if role is not None:
            policy = await self._rbac.get_role_policy(ctx.tenant_id, role)

        self._probe.with_context(ctx.observation()).permissions_resolved(
            role=role, has_policy=policy is not None
        )
        if policy is None:
            return ctx

        return RequestContext(
            session=session,
            tenant_id=ctx.tenant_id,
            role=role,
            permissions=policy.permissions,
            global_mfa_enforced=self._global_mfa_enforced,
            request_id=request_id,
        )
