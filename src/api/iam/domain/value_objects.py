"""Value objects for IAM domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

WILDCARD = "*"

# Entity name guarding the authorization-management operations themselves
# (roles, policies, memberships, invitations).
SYSTEM_IAM_ENTITY = "system_iam"

# Role created for the tenant owner. Its policy cannot be changed through
# the role management operations.
ADMIN_ROLE = "admin"

# Identity backend's built-in tenant every user implicitly belongs to.
PUBLIC_TENANT_ID = "public"


class EntityAction(StrEnum):
    """Actions a policy can grant on an entity."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    ALL = WILDCARD


class SessionTrustState(StrEnum):
    """Outcome of evaluating a session against an operation's trust options.

    Every state except TRUSTED blocks the operation.
    """

    NO_SESSION = "no_session"
    PASSWORD_CHANGE_REQUIRED = "password_change_required"
    MFA_SETUP_REQUIRED = "mfa_setup_required"
    MFA_VERIFY_REQUIRED = "mfa_verify_required"
    TRUSTED = "trusted"


@dataclass(frozen=True)
class SessionTokens:
    """Access/refresh token pair issued by the identity backend."""

    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class IssuedSession:
    """A freshly created session."""

    tokens: SessionTokens
    handle: str


@dataclass(frozen=True)
class MfaVerificationResult:
    """Result of checking a TOTP code.

    Tokens are only present when the session was elevated as a result of
    the verification.
    """

    verified: bool
    tokens: SessionTokens | None = None
