"""Application-layer value objects for IAM bounded context.

These represent the per-request authorization context and the results
handed back to the presentation layer. They are application concepts
rather than domain ones: they describe a request, not a business entity.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from iam.domain.entities import Tenant, User
from iam.domain.policy import Permissions
from iam.domain.value_objects import SessionTokens
from iam.ports.exceptions import BadRequestError, UnauthenticatedError
from iam.ports.providers import ISession
from shared_kernel.observability_context import ObservationContext


@dataclass(frozen=True)
class RequestContext:
    """Authorization context resolved once per inbound request.

    ``permissions`` is None whenever there is no session, no tenant header,
    or no role for the user in that tenant. Policy checks deny in that case.

    Attributes:
        session: Validated session, or None for anonymous requests
        tenant_id: Value of the X-Tenant-ID header
        role: The user's role in the tenant
        permissions: Permission set of that role's policy
        global_mfa_enforced: Process-wide MFA enforcement flag
        request_id: Correlation id for logs
    """

    session: ISession | None = None
    tenant_id: str | None = None
    role: str | None = None
    permissions: Permissions | None = None
    global_mfa_enforced: bool = False
    request_id: str | None = None

    @property
    def user_id(self) -> str | None:
        if self.session is None:
            return None
        return self.session.user_id

    def require_session(self) -> ISession:
        """Return the session or raise UnauthenticatedError."""
        if self.session is None:
            raise UnauthenticatedError()
        return self.session

    def require_tenant(self) -> str:
        """Return the tenant id or raise BadRequestError."""
        if not self.tenant_id:
            raise BadRequestError("Tenant ID required.")
        return self.tenant_id

    def with_tenant(self, tenant_id: str) -> RequestContext:
        """Context scoped to another tenant, without any resolved permissions."""
        return replace(self, tenant_id=tenant_id, role=None, permissions=None)

    def observation(self, operation: str | None = None) -> ObservationContext:
        """Observation context for probes used while serving this request."""
        return ObservationContext(
            request_id=self.request_id,
            user_id=self.user_id,
            tenant_id=self.tenant_id,
            operation=operation,
        )


@dataclass(frozen=True)
class AuthResult:
    """Result of login and registration.

    Attributes:
        user: The authenticated user
        tenant: Active tenant, the first one the user belongs to
        available_tenants: Tenants offered in the tenant switcher
        tokens: Tokens of the newly created session
        role: Role in the active tenant
        permissions: Permission set of that role
        requires_password_change: The user must set a new password
        requires_mfa: MFA is enforced or a device is enrolled
        mfa_enforced: The active role's policy requires MFA
        mfa_enabled: The user has a verified TOTP device
    """

    user: User
    tokens: SessionTokens
    tenant: Tenant | None = None
    available_tenants: list[Tenant] = field(default_factory=list)
    role: str | None = None
    permissions: Permissions | None = None
    requires_password_change: bool = False
    requires_mfa: bool = False
    mfa_enforced: bool = False
    mfa_enabled: bool = False


@dataclass(frozen=True)
class UserUpdateResult:
    """Updated user plus replacement tokens when the password changed."""

    user: User
    tokens: SessionTokens | None = None


@dataclass(frozen=True)
class RoleSummary:
    """A role name with its policy, as returned by role listings."""

    name: str
    permissions: Permissions | None
