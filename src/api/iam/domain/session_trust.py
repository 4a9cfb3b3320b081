"""Session trust payload and its evaluation.

The trust payload travels inside the session's access token, which makes
request-time gating stateless: no lookup is needed to decide whether a
session may run an operation.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping

from iam.domain.value_objects import SessionTrustState


@dataclass(frozen=True)
class SessionTrustPayload:
    """Trust flags attached to every issued session.

    Attributes:
        mfa_enforced: The active role's policy requires MFA
        mfa_enabled: The user has at least one verified TOTP device
        mfa_verified: A TOTP code was verified during this session
        requires_password_change: The user must set a new password first
    """

    mfa_enforced: bool = False
    mfa_enabled: bool = False
    mfa_verified: bool = False
    requires_password_change: bool = False

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any] | None) -> SessionTrustPayload:
        """Read the flags from an access-token payload.

        Only literal ``True`` values count; missing or malformed claims are
        treated as False.
        """
        claims = claims or {}
        return cls(
            mfa_enforced=claims.get("mfaEnforced") is True,
            mfa_enabled=claims.get("mfaEnabled") is True,
            mfa_verified=claims.get("mfaVerified") is True,
            requires_password_change=claims.get("requiresPasswordChange") is True,
        )

    def to_claims(self) -> dict[str, bool]:
        return {
            "mfaEnforced": self.mfa_enforced,
            "mfaEnabled": self.mfa_enabled,
            "mfaVerified": self.mfa_verified,
            "requiresPasswordChange": self.requires_password_change,
        }

    def elevated(self, device_verified: bool = False) -> SessionTrustPayload:
        """Payload after a successful TOTP verification."""
        if device_verified:
            return replace(self, mfa_verified=True, mfa_enabled=True)
        return replace(self, mfa_verified=True)

    def with_password_changed(self) -> SessionTrustPayload:
        return replace(self, requires_password_change=False)

    def with_device_count(self, remaining_devices: int) -> SessionTrustPayload:
        """Payload after a device removal left ``remaining_devices`` enrolled."""
        has_devices = remaining_devices > 0
        return replace(self, mfa_enabled=has_devices, mfa_verified=has_devices)


@dataclass(frozen=True)
class GateOptions:
    """Per-operation relaxations of the trust requirements."""

    require_mfa_verification: bool = True
    allow_mfa_setup: bool = False
    allow_password_change: bool = False


def evaluate_session_trust(
    payload: SessionTrustPayload | None,
    options: GateOptions,
    global_mfa_enforced: bool = False,
) -> SessionTrustState:
    """Decide whether a session may run an operation.

    The checks run in a fixed order: session presence, password change,
    then MFA. Password-change gating always wins over MFA gating. The two
    MFA branches are exclusive: enforced-without-device never falls through
    to the verification check.

    Args:
        payload: Trust payload of the current session, or None without one
        options: Relaxations declared by the operation
        global_mfa_enforced: Process-wide MFA enforcement flag

    Returns:
        The first blocking state, or SessionTrustState.TRUSTED
    """
    if payload is None:
        return SessionTrustState.NO_SESSION

    if payload.requires_password_change and not options.allow_password_change:
        return SessionTrustState.PASSWORD_CHANGE_REQUIRED

    mfa_enforced = payload.mfa_enforced or global_mfa_enforced

    if mfa_enforced and not payload.mfa_enabled:
        if not options.allow_mfa_setup:
            return SessionTrustState.MFA_SETUP_REQUIRED
    elif payload.mfa_enabled and not payload.mfa_verified:
        if options.require_mfa_verification:
            return SessionTrustState.MFA_VERIFY_REQUIRED

    return SessionTrustState.TRUSTED
