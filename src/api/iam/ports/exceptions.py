"""Caller-visible errors for the IAM bounded context.

Every error carries a stable ``code`` and the HTTP status the presentation
layer answers with. Errors are raised where the condition is detected and
propagate unchanged to the caller unless a saga translates them.
"""

from __future__ import annotations

from typing import Any, Sequence


class GatewayError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(GatewayError):
    """Raised when there is no valid session."""

    code = "UNAUTHENTICATED"
    status_code = 401
    default_message = "Unauthenticated. Please log in."


class InvalidCredentialsError(UnauthenticatedError):
    """Raised when an email/password pair does not match."""

    code = "WRONG_CREDENTIALS"
    default_message = "Invalid email or password."


class ForbiddenError(GatewayError):
    """Raised when an authenticated caller is denied by policy."""

    code = "FORBIDDEN"
    status_code = 403
    default_message = "Access denied."


class BadRequestError(GatewayError):
    """Raised for malformed input, a missing tenant header, or a protected role."""

    code = "BAD_REQUEST"
    status_code = 400
    default_message = "Bad request."


class NotFoundError(GatewayError):
    """Raised when a user, tenant, role, or device does not exist."""

    code = "NOT_FOUND"
    status_code = 404
    default_message = "Not found."


class ConflictError(GatewayError):
    """Raised when an email, role, or device name is already taken."""

    code = "CONFLICT"
    status_code = 409
    default_message = "Resource already exists."


class PasswordChangeRequiredError(GatewayError):
    """Raised when the session must change its password before continuing."""

    code = "PASSWORD_CHANGE_REQUIRED"
    status_code = 403
    default_message = "Password change required. Please update your password."


class MfaSetupRequiredError(GatewayError):
    """Raised when MFA is enforced but the user has no device."""

    code = "MFA_SETUP_REQUIRED"
    status_code = 403
    default_message = "MFA setup is mandatory. Please set up a TOTP device first."


class MfaVerifyRequiredError(GatewayError):
    """Raised when the user has a device but has not verified this session."""

    code = "MFA_VERIFY_REQUIRED"
    status_code = 403
    default_message = "MFA verification required. Please verify your code."


class SessionRefreshFailedError(GatewayError):
    """Raised when a refresh token is invalid or expired."""

    code = "SESSION_REFRESH_FAILED"
    status_code = 401
    default_message = "Session refresh failed. Please log in again."


class TokenTheftDetectedError(SessionRefreshFailedError):
    """Raised when the identity backend detects refresh token reuse.

    This is fatal: every session of the affected user must be revoked.
    """

    code = "TOKEN_THEFT"
    default_message = "Token theft detected. Session has been revoked."

    def __init__(self, user_id: str | None, message: str | None = None):
        self.user_id = user_id
        super().__init__(message)


class InternalError(GatewayError):
    """Raised for unexpected remote failures."""


class TenantCreationFailedError(InternalError):
    """Raised when the tenant-provisioning saga fails."""

    code = "TENANT_CREATION_FAILED"
    default_message = "Failed to create tenant organization. Please try again."

    def __init__(
        self,
        message: str | None = None,
        compensation_failures: Sequence[Any] = (),
    ):
        self.compensation_failures = list(compensation_failures)
        super().__init__(message)


class IdentityBackendError(InternalError):
    """Raised when the identity backend returns an unexpected response."""

    code = "IDENTITY_BACKEND_ERROR"


class ResourceBackendError(InternalError):
    """Raised when a resource backend call fails."""

    code = "RESOURCE_BACKEND_ERROR"


class ServiceUnavailableError(ResourceBackendError):
    """Raised when the resource backend cannot be reached."""

    code = "SERVICE_UNAVAILABLE"
    status_code = 503
    default_message = "Service is currently unavailable, please try again later."
