"""Authentication service for IAM bounded context.

Handles login, registration, token refresh, logout and password reset.
Login also assembles the caller's initial tenant context so clients can
render the tenant switcher without further round trips.
"""

from __future__ import annotations

from iam.application.observability import (
    AuthCoreServiceProbe,
    DefaultAuthCoreServiceProbe,
)
from iam.application.services.tenant_lookup import fetch_tenants
from iam.application.session_gate import protect
from iam.application.value_objects import AuthResult, RequestContext
from iam.domain.entities import UserProfile, UserUpdate
from iam.domain.session_trust import SessionTrustPayload
from iam.domain.value_objects import SessionTokens
from iam.ports.exceptions import (
    BadRequestError,
    InvalidCredentialsError,
    TokenTheftDetectedError,
)
from iam.ports.notifications import INotificationSender
from iam.ports.providers import (
    IAuthCoreProvider,
    IIamProvider,
    IMfaProvider,
    IRbacProvider,
)
from iam.ports.tenant_backend import ITenantBackend


class AuthCoreService:
    """Application service for authentication and session lifecycle."""

    def __init__(
        self,
        auth_core_provider: IAuthCoreProvider,
        iam_provider: IIamProvider,
        rbac_provider: IRbacProvider,
        mfa_provider: IMfaProvider,
        tenant_backend: ITenantBackend,
        notifications: INotificationSender,
        frontend_url: str,
        probe: AuthCoreServiceProbe | None = None,
    ):
        """Initialize AuthCoreService with dependencies.

        Args:
            auth_core_provider: Credential and session provider
            iam_provider: User and tenant-membership provider
            rbac_provider: Role and policy provider
            mfa_provider: TOTP device provider
            tenant_backend: Resource backend holding tenant records
            notifications: Out-of-band sender for reset links
            frontend_url: Base URL used to build reset links
            probe: Optional domain probe for observability
        """
        self._auth_core = auth_core_provider
        self._iam = iam_provider
        self._rbac = rbac_provider
        self._mfa = mfa_provider
        self._tenant_backend = tenant_backend
        self._notifications = notifications
        self._frontend_url = frontend_url.rstrip("/")
        self._probe = probe or DefaultAuthCoreServiceProbe()

    def _probe_for(self, ctx: RequestContext | None) -> AuthCoreServiceProbe:
        if ctx is None:
            return self._probe
        return self._probe.with_context(ctx.observation())

    async def login(
        self,
        email: str,
        password: str,
        ctx: RequestContext | None = None,
    ) -> AuthResult:
        """Verify credentials and open a session.

        The first tenant the user belongs to becomes the active tenant. Its
        role policy decides whether MFA is enforced for the new session.

        Raises:
            InvalidCredentialsError: If the email/password pair is wrong
        """
        probe = self._probe_for(ctx)
        try:
            credentials_user = await self._auth_core.verify_credentials(email, password)
        except InvalidCredentialsError:
            probe.login_failed(email=email)
            raise

        user = await self._iam.get_user(credentials_user.id) or credentials_user
        tenant_ids = user.member_tenant_ids
        active_tenant_id = tenant_ids[0] if tenant_ids else None

        role = None
        policy = None
        if active_tenant_id is not None:
            role = await self._rbac.get_user_role_in_tenant(user.id, active_tenant_id)
            if role is not None:
                policy = await self._rbac.get_role_policy(active_tenant_id, role)

        tenants, failures = await fetch_tenants(
            self._tenant_backend, tenant_ids, user.id
        )
        for tenant_id, error in failures.items():
            probe.tenant_lookup_failed(tenant_id=tenant_id, error=error)
        active_tenant = next((t for t in tenants if t.id == active_tenant_id), None)

        requires_password_change = await self._auth_core.get_requires_password_change(
            user.id
        )
        devices = await self._mfa.list_devices(user.id)
        mfa_enabled = any(device.verified for device in devices)
        mfa_enforced = policy.mfa_required if policy is not None else False

        payload = SessionTrustPayload(
            mfa_enforced=mfa_enforced,
            mfa_enabled=mfa_enabled,
            mfa_verified=False,
            requires_password_change=requires_password_change,
        )
        issued = await self._auth_core.create_session(user.id, payload)

        probe.login_succeeded(
            user_id=user.id, tenant_id=active_tenant_id, mfa_enforced=mfa_enforced
        )
        global_mfa = ctx.global_mfa_enforced if ctx is not None else False
        return AuthResult(
            user=user,
            tokens=issued.tokens,
            tenant=active_tenant,
            available_tenants=tenants,
            role=role if policy is not None else None,
            permissions=policy.permissions if policy is not None else None,
            requires_password_change=requires_password_change,
            requires_mfa=mfa_enforced or mfa_enabled or global_mfa,
            mfa_enforced=mfa_enforced,
            mfa_enabled=mfa_enabled,
        )

    async def register(
        self,
        email: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> AuthResult:
        """Create a password user and open a session for it.

        Raises:
            ConflictError: If the email is already registered
        """
        created = await self._iam.create_user(email, password)
        user = await self._iam.update_user(
            created.id,
            UserUpdate(profile=UserProfile(first_name=first_name, last_name=last_name)),
        )
        issued = await self._auth_core.create_session(user.id, SessionTrustPayload())

        self._probe.user_registered(user_id=user.id)
        return AuthResult(user=user, tokens=issued.tokens)

    async def refresh_session(self, refresh_token: str) -> SessionTokens:
        """Rotate a refresh token.

        Token theft revokes every session of the affected user before the
        error is re-raised.

        Raises:
            SessionRefreshFailedError: If the token is invalid or expired
            TokenTheftDetectedError: If the backend detected token reuse
        """
        try:
            tokens = await self._auth_core.refresh_session(refresh_token)
        except TokenTheftDetectedError as e:
            self._probe.token_theft_detected(user_id=e.user_id)
            if e.user_id:
                await self._auth_core.revoke_all_sessions(e.user_id)
            raise

        self._probe.session_refreshed()
        return tokens

    @protect(require_mfa_verification=False, allow_mfa_setup=True)
    async def logout(self, ctx: RequestContext) -> None:
        """Revoke every session of the caller."""
        session = ctx.require_session()
        await self._auth_core.revoke_all_sessions(session.user_id)
        self._probe_for(ctx).logged_out(user_id=session.user_id)

    async def send_password_reset_email(self, email: str) -> None:
        """Send a reset link when the email belongs to a user.

        Completes the same way whether or not the user exists.
        """
        user = await self._iam.get_user_by_email(email)
        self._probe.password_reset_requested(user_found=user is not None)
        if user is None:
            return

        token = await self._auth_core.create_password_reset_token(user.id)
        if not token:
            return

        reset_link = f"{self._frontend_url}/auth/reset-password?token={token}"
        try:
            await self._notifications.send_password_reset(user.email, reset_link)
        except Exception as e:
            self._probe.password_reset_delivery_failed(error=e)

    async def reset_password(self, token: str, new_password: str) -> None:
        """Consume a reset token and set a new password.

        Raises:
            BadRequestError: If the token is invalid or expired
        """
        if not await self._auth_core.reset_password(token, new_password):
            self._probe.password_reset_rejected()
            raise BadRequestError("Invalid or expired password reset token.")
        self._probe.password_reset_completed()
