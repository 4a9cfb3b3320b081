"""Identity backend provider protocols.

Application services depend only on these protocols; the concrete adapters
are selected once at process start. Swapping the identity backend means
writing a new set of adapters, never touching the services.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from iam.domain.entities import (
    PendingInvite,
    TotpDevice,
    User,
    UserPage,
    UserUpdate,
)
from iam.domain.policy import RolePolicy
from iam.domain.session_trust import SessionTrustPayload
from iam.domain.value_objects import IssuedSession, SessionTokens


@runtime_checkable
class ISession(Protocol):
    """A validated session bound to the current request."""

    @property
    def user_id(self) -> str: ...

    @property
    def handle(self) -> str: ...

    @property
    def trust_payload(self) -> SessionTrustPayload:
        """Trust flags read from the access-token payload."""
        ...

    async def revoke(self) -> None:
        """Revoke this session."""
        ...


@runtime_checkable
class IAuthCoreProvider(Protocol):
    """Credential verification and session lifecycle."""

    async def verify_credentials(self, email: str, password: str) -> User:
        """Check an email/password pair.

        Raises:
            InvalidCredentialsError: If the pair does not match
        """
        ...

    async def create_session(
        self, user_id: str, payload: SessionTrustPayload
    ) -> IssuedSession:
        """Issue a new session carrying the given trust payload."""
        ...

    async def get_session(self, access_token: str) -> ISession | None:
        """Validate an access token; None when invalid or expired."""
        ...

    async def refresh_session(self, refresh_token: str) -> SessionTokens:
        """Rotate a refresh token.

        Raises:
            SessionRefreshFailedError: If the token is invalid or expired
            TokenTheftDetectedError: If the backend detected token reuse
        """
        ...

    async def revoke_all_sessions(self, user_id: str) -> None: ...

    async def create_password_reset_token(self, user_id: str) -> str | None:
        """Create a one-time reset token; None when the user has no password login."""
        ...

    async def reset_password(self, token: str, new_password: str) -> bool:
        """Consume a reset token; False when it is invalid or expired."""
        ...

    async def get_requires_password_change(self, user_id: str) -> bool: ...

    async def set_requires_password_change(self, user_id: str, required: bool) -> None: ...


@runtime_checkable
class IIamProvider(Protocol):
    """Users, tenant membership and pending invites."""

    async def get_user(self, user_id: str) -> User | None: ...

    async def get_user_by_email(self, email: str) -> User | None: ...

    async def create_user(self, email: str, password: str) -> User:
        """Create a password user.

        Raises:
            ConflictError: If the email is already registered
        """
        ...

    async def update_user(self, user_id: str, changes: UserUpdate) -> User:
        """Apply credential and profile changes.

        Raises:
            BadRequestError: If a new password is given without the current one
            InvalidCredentialsError: If the current password is wrong
            ConflictError: If the new email is already registered
            NotFoundError: If the user does not exist
        """
        ...

    async def register_tenant(self, tenant_id: str) -> None: ...

    async def unregister_tenant(self, tenant_id: str) -> None: ...

    async def associate_user_to_tenant(self, user_id: str, tenant_id: str) -> None: ...

    async def disassociate_user_from_tenant(
        self, user_id: str, tenant_id: str
    ) -> None: ...

    async def list_tenant_users(
        self,
        tenant_id: str,
        limit: int = 10,
        pagination_token: str | None = None,
    ) -> UserPage: ...

    async def add_pending_invite(
        self, user_id: str, token: str, invite: PendingInvite
    ) -> None: ...

    async def consume_pending_invite(
        self, user_id: str, token: str
    ) -> PendingInvite | None:
        """Read and delete an invite; None when absent or already consumed."""
        ...


@runtime_checkable
class IRbacProvider(Protocol):
    """Role assignments and role policies, scoped per tenant."""

    async def get_user_role_in_tenant(
        self, user_id: str, tenant_id: str
    ) -> str | None: ...

    async def assign_role_to_user(
        self, user_id: str, tenant_id: str, role_name: str
    ) -> None: ...

    async def remove_user_role(self, user_id: str, tenant_id: str) -> None: ...

    async def list_tenant_roles(self, tenant_id: str) -> list[str]: ...

    async def get_role_policy(
        self, tenant_id: str, role_name: str
    ) -> RolePolicy | None: ...

    async def set_role_policy(
        self, tenant_id: str, role_name: str, policy: RolePolicy
    ) -> None:
        """Store a policy and add the role to the tenant's role list."""
        ...

    async def delete_role_policy(self, tenant_id: str, role_name: str) -> None:
        """Remove a policy and drop the role from the tenant's role list."""
        ...


@runtime_checkable
class IMfaProvider(Protocol):
    """TOTP device management and code verification."""

    async def create_totp_device(self, user_id: str, device_name: str) -> TotpDevice:
        """Enroll an unverified device.

        Raises:
            ConflictError: If the user already has a device with that name
        """
        ...

    async def verify_totp_device(
        self, user_id: str, device_name: str, code: str
    ) -> bool:
        """Verify a device with its first code; False on a wrong code.

        Raises:
            NotFoundError: If the device does not exist
        """
        ...

    async def verify_code(self, user_id: str, code: str) -> bool: ...

    async def remove_totp_device(self, user_id: str, device_name: str) -> bool:
        """Remove a device; False when it did not exist."""
        ...

    async def list_devices(self, user_id: str) -> list[TotpDevice]: ...
