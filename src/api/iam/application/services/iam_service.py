"""IAM application service.

Handles tenant provisioning, invitations, tenant membership and the
caller's own account. Multi-step writes that span the resource backend
and the identity backend run as sagas so a failure part way through
leaves no orphaned state behind.
"""

from __future__ import annotations

from datetime import UTC, datetime

from iam.application.authorization import require_access
from iam.application.observability import DefaultIamServiceProbe, IamServiceProbe
from iam.application.security import (
    generate_invite_token,
    generate_temporary_password,
)
from iam.application.services.tenant_lookup import fetch_tenants
from iam.application.session_gate import protect
from iam.application.value_objects import RequestContext, UserUpdateResult
from iam.domain.entities import PendingInvite, Tenant, User, UserPage, UserUpdate
from iam.domain.policy import RolePolicy
from iam.domain.value_objects import ADMIN_ROLE, SYSTEM_IAM_ENTITY, EntityAction
from iam.ports.exceptions import (
    BadRequestError,
    NotFoundError,
    TenantCreationFailedError,
)
from iam.ports.notifications import INotificationSender
from iam.ports.providers import (
    IAuthCoreProvider,
    IIamProvider,
    IRbacProvider,
)
from iam.ports.tenant_backend import ITenantBackend
from shared_kernel.saga import SagaExecutor, SagaFailedError, SagaStep

MAX_PAGE_SIZE = 100


class IamService:
    """Application service for tenants, invitations and user accounts."""

    def __init__(
        self,
        iam_provider: IIamProvider,
        auth_core_provider: IAuthCoreProvider,
        rbac_provider: IRbacProvider,
        tenant_backend: ITenantBackend,
        notifications: INotificationSender,
        frontend_url: str,
        saga_executor: SagaExecutor | None = None,
        probe: IamServiceProbe | None = None,
    ):
        """Initialize IamService with dependencies.

        Args:
            iam_provider: User and tenant-membership provider
            auth_core_provider: Session and password-flag provider
            rbac_provider: Role and policy provider
            tenant_backend: Resource backend holding tenant records
            notifications: Out-of-band sender for invites and credentials
            frontend_url: Base URL used to build invite links
            saga_executor: Executor for provisioning and invitation sagas
            probe: Optional domain probe for observability
        """
        self._iam = iam_provider
        self._auth_core = auth_core_provider
        self._rbac = rbac_provider
        self._tenant_backend = tenant_backend
        self._notifications = notifications
        self._frontend_url = frontend_url.rstrip("/")
        self._sagas = saga_executor or SagaExecutor()
        self._probe = probe or DefaultIamServiceProbe()

    def _probe_for(self, ctx: RequestContext, operation: str) -> IamServiceProbe:
        return self._probe.with_context(ctx.observation(operation))

    # --- Caller's account ---

    @protect()
    async def get_user(self, ctx: RequestContext) -> User:
        """Return the caller's user record.

        Raises:
            NotFoundError: If the identity backend no longer knows the user
        """
        session = ctx.require_session()
        user = await self._iam.get_user(session.user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return user

    @protect()
    async def get_tenants(self, ctx: RequestContext) -> list[Tenant]:
        """Return the tenants the caller belongs to.

        Tenants the resource backend cannot return are skipped.
        """
        session = ctx.require_session()
        user = await self._iam.get_user(session.user_id)
        if user is None:
            return []

        tenants, failures = await fetch_tenants(
            self._tenant_backend, user.member_tenant_ids, session.user_id
        )
        probe = self._probe_for(ctx, "get_tenants")
        for tenant_id, error in failures.items():
            probe.tenant_lookup_failed(tenant_id=tenant_id, error=error)
        return tenants

    @protect(allow_password_change=True)
    async def update_user(
        self, ctx: RequestContext, changes: UserUpdate
    ) -> UserUpdateResult:
        """Update the caller's credentials and profile.

        A password change clears the password-change requirement and
        replaces the current session with one that no longer carries it.

        Raises:
            BadRequestError: If a new password is given without the current one
            InvalidCredentialsError: If the current password is wrong
            ConflictError: If the new email is already registered
        """
        session = ctx.require_session()
        if changes.password and not changes.current_password:
            raise BadRequestError(
                "Current password is required to set a new password."
            )

        user = await self._iam.update_user(session.user_id, changes)

        tokens = None
        if changes.password:
            await self._auth_core.set_requires_password_change(session.user_id, False)
            issued = await self._auth_core.create_session(
                session.user_id, session.trust_payload.with_password_changed()
            )
            await session.revoke()
            tokens = issued.tokens

        self._probe_for(ctx, "update_user").user_updated(
            password_changed=bool(changes.password)
        )
        return UserUpdateResult(user=user, tokens=tokens)

    # --- Tenants ---

    @protect()
    async def create_own_tenant(self, ctx: RequestContext, name: str) -> Tenant:
        """Provision a tenant owned by the caller.

        Creates the tenant record, registers it with the identity backend,
        makes the caller a member, stores the root admin policy and assigns
        the admin role. Any failure undoes the completed steps in reverse.

        Raises:
            BadRequestError: If the name is blank
            TenantCreationFailedError: If any provisioning step fails
        """
        session = ctx.require_session()
        name = name.strip()
        if not name:
            raise BadRequestError("Tenant name is required.")

        user_id = session.user_id
        backend = self._tenant_backend

        async def create_tenant(results: dict) -> Tenant:
            return await backend.create_tenant(name, user_id)

        async def delete_tenant(tenant: Tenant) -> None:
            await backend.delete_tenant(tenant.id, user_id)

        async def register_tenant(results: dict) -> str:
            tenant_id = results["create_tenant"].id
            await self._iam.register_tenant(tenant_id)
            return tenant_id

        async def associate_creator(results: dict) -> str:
            tenant_id = results["create_tenant"].id
            await self._iam.associate_user_to_tenant(user_id, tenant_id)
            return tenant_id

        async def disassociate_creator(tenant_id: str) -> None:
            await self._iam.disassociate_user_from_tenant(user_id, tenant_id)

        async def store_admin_policy(results: dict) -> str:
            tenant_id = results["create_tenant"].id
            await self._rbac.set_role_policy(tenant_id, ADMIN_ROLE, RolePolicy.root_admin())
            return tenant_id

        async def delete_admin_policy(tenant_id: str) -> None:
            await self._rbac.delete_role_policy(tenant_id, ADMIN_ROLE)

        async def assign_admin_role(results: dict) -> str:
            tenant_id = results["create_tenant"].id
            await self._rbac.assign_role_to_user(user_id, tenant_id, ADMIN_ROLE)
            return tenant_id

        async def remove_admin_role(tenant_id: str) -> None:
            await self._rbac.remove_user_role(user_id, tenant_id)

        probe = self._probe_for(ctx, "create_own_tenant")
        try:
            results = await self._sagas.run(
                "tenant_provisioning",
                [
                    SagaStep("create_tenant", create_tenant, delete_tenant),
                    SagaStep(
                        "register_tenant",
                        register_tenant,
                        self._iam.unregister_tenant,
                    ),
                    SagaStep("associate_creator", associate_creator, disassociate_creator),
                    SagaStep("store_admin_policy", store_admin_policy, delete_admin_policy),
                    SagaStep("assign_admin_role", assign_admin_role, remove_admin_role),
                ],
            )
        except SagaFailedError as e:
            probe.tenant_provisioning_failed(
                name=name,
                failed_step=e.failed_step,
                fully_compensated=e.fully_compensated,
            )
            raise TenantCreationFailedError(
                compensation_failures=e.compensation_failures
            ) from e.cause

        tenant: Tenant = results["create_tenant"]
        probe.tenant_provisioned(tenant_id=tenant.id, name=tenant.name)
        return tenant

    @protect()
    async def update_tenant(self, ctx: RequestContext, name: str) -> Tenant:
        """Rename the current tenant.

        Raises:
            BadRequestError: If there is no tenant context or the name is blank
            ForbiddenError: Without system_iam update rights
        """
        tenant_id = ctx.require_tenant()
        require_access(ctx, SYSTEM_IAM_ENTITY, EntityAction.UPDATE)
        name = name.strip()
        if not name:
            raise BadRequestError("Tenant name is required.")

        tenant = await self._tenant_backend.update_tenant(tenant_id, name, ctx.user_id)
        self._probe_for(ctx, "update_tenant").tenant_updated(
            tenant_id=tenant.id, name=tenant.name
        )
        return tenant

    @protect()
    async def list_tenant_users(
        self,
        ctx: RequestContext,
        limit: int = 10,
        pagination_token: str | None = None,
    ) -> UserPage:
        """List members of the current tenant, newest first.

        Raises:
            BadRequestError: If there is no tenant context or the limit is out of range
            ForbiddenError: Without system_iam read rights
        """
        tenant_id = ctx.require_tenant()
        require_access(ctx, SYSTEM_IAM_ENTITY, EntityAction.READ)
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise BadRequestError(f"Limit must be between 1 and {MAX_PAGE_SIZE}.")

        return await self._iam.list_tenant_users(tenant_id, limit, pagination_token)

    @protect()
    async def remove_user_from_tenant(self, ctx: RequestContext, user_id: str) -> None:
        """Remove a user's membership and role assignment in the current tenant.

        Raises:
            BadRequestError: If there is no tenant context
            ForbiddenError: Without system_iam delete rights
        """
        tenant_id = ctx.require_tenant()
        require_access(ctx, SYSTEM_IAM_ENTITY, EntityAction.DELETE)

        await self._iam.disassociate_user_from_tenant(user_id, tenant_id)
        await self._rbac.remove_user_role(user_id, tenant_id)
        self._probe_for(ctx, "remove_user_from_tenant").user_removed_from_tenant(
            removed_user_id=user_id, tenant_id=tenant_id
        )

    # --- Invitations ---

    @protect()
    async def invite_user(self, ctx: RequestContext, email: str, role_name: str) -> None:
        """Invite a user into the current tenant with the given role.

        Existing users receive a one-time invite link they accept later.
        Unknown emails get an account with a temporary password, must change
        it on first login, and join the tenant immediately.

        Raises:
            BadRequestError: If there is no tenant context or the role does not exist
            ForbiddenError: Without system_iam create rights
        """
        tenant_id = ctx.require_tenant()
        require_access(ctx, SYSTEM_IAM_ENTITY, EntityAction.CREATE)
        session = ctx.require_session()

        roles = await self._rbac.list_tenant_roles(tenant_id)
        if role_name not in roles:
            raise BadRequestError(f"Role '{role_name}' does not exist.")

        probe = self._probe_for(ctx, "invite_user")
        existing = await self._iam.get_user_by_email(email)
        try:
            if existing is not None:
                await self._invite_existing_user(
                    existing, tenant_id, role_name, session.user_id
                )
                probe.invite_created(
                    invitee_id=existing.id, tenant_id=tenant_id, role_name=role_name
                )
            else:
                invitee_id = await self._provision_invited_user(
                    email, tenant_id, role_name
                )
                probe.user_provisioned(
                    invitee_id=invitee_id, tenant_id=tenant_id, role_name=role_name
                )
        except SagaFailedError as e:
            probe.invitation_failed(email=email, failed_step=e.failed_step)
            raise e.cause from None

    async def _invite_existing_user(
        self, invitee: User, tenant_id: str, role_name: str, invited_by: str
    ) -> None:
        token = generate_invite_token()
        invite = PendingInvite(
            tenant_id=tenant_id,
            role_name=role_name,
            invited_by=invited_by,
            created_at=datetime.now(UTC),
        )
        invite_link = f"{self._frontend_url}/auth/join-tenant?token={token}"

        async def store_invite(results: dict) -> str:
            await self._iam.add_pending_invite(invitee.id, token, invite)
            return token

        async def discard_invite(stored_token: str) -> None:
            await self._iam.consume_pending_invite(invitee.id, stored_token)

        async def send_invite(results: dict) -> None:
            await self._notifications.send_invite(invitee.email, tenant_id, invite_link)

        await self._sagas.run(
            "invite_existing_user",
            [
                SagaStep("store_invite", store_invite, discard_invite),
                SagaStep("send_invite", send_invite),
            ],
        )

    async def _provision_invited_user(
        self, email: str, tenant_id: str, role_name: str
    ) -> str:
        temporary_password = generate_temporary_password()

        # The created account is never deleted on failure.
        async def create_user(results: dict) -> str:
            user = await self._iam.create_user(email, temporary_password)
            return user.id

        async def require_password_change(results: dict) -> None:
            await self._auth_core.set_requires_password_change(
                results["create_user"], True
            )

        async def associate(results: dict) -> str:
            await self._iam.associate_user_to_tenant(results["create_user"], tenant_id)
            return results["create_user"]

        async def disassociate(user_id: str) -> None:
            await self._iam.disassociate_user_from_tenant(user_id, tenant_id)

        async def assign_role(results: dict) -> str:
            await self._rbac.assign_role_to_user(
                results["create_user"], tenant_id, role_name
            )
            return results["create_user"]

        async def remove_role(user_id: str) -> None:
            await self._rbac.remove_user_role(user_id, tenant_id)

        async def send_credentials(results: dict) -> None:
            await self._notifications.send_temporary_credentials(
                email, tenant_id, temporary_password
            )

        results = await self._sagas.run(
            "provision_invited_user",
            [
                SagaStep("create_user", create_user),
                SagaStep("require_password_change", require_password_change),
                SagaStep("associate", associate, disassociate),
                SagaStep("assign_role", assign_role, remove_role),
                SagaStep("send_credentials", send_credentials),
            ],
        )
        return results["create_user"]

    @protect()
    async def accept_invite(self, ctx: RequestContext, token: str) -> PendingInvite:
        """Join the tenant named by a pending invite.

        The invite is consumed exactly once; a second call with the same
        token fails.

        Raises:
            BadRequestError: If the token is unknown or already used
        """
        session = ctx.require_session()
        invite = await self._iam.consume_pending_invite(session.user_id, token)
        probe = self._probe_for(ctx, "accept_invite")
        if invite is None:
            probe.invite_not_found()
            raise BadRequestError("Invalid or expired invite token.")

        await self._iam.associate_user_to_tenant(session.user_id, invite.tenant_id)
        await self._rbac.assign_role_to_user(
            session.user_id, invite.tenant_id, invite.role_name
        )
        probe.invite_accepted(tenant_id=invite.tenant_id, role_name=invite.role_name)
        return invite
