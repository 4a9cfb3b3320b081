"""Session trust gate for protected service operations.

Service methods declare their trust requirements with ``@protect(...)``.
The gate runs before the method body, so it always precedes policy checks
made inside the method.

Usage:
    class MfaService:
        @protect(allow_mfa_setup=True, allow_password_change=True)
        async def list_devices(self, ctx: RequestContext) -> list[TotpDevice]:
            ...
"""

from __future__ import annotations

import functools
import inspect
from typing import Any, Awaitable, Callable, TypeVar

from iam.application.observability import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)
from iam.application.value_objects import RequestContext
from iam.domain.session_trust import GateOptions, evaluate_session_trust
from iam.domain.value_objects import SessionTrustState
from iam.ports.exceptions import (
    GatewayError,
    MfaSetupRequiredError,
    MfaVerifyRequiredError,
    PasswordChangeRequiredError,
    UnauthenticatedError,
)
from iam.ports.providers import ISession

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

CONTEXT_PARAMETER = "ctx"

_STATE_ERRORS: dict[SessionTrustState, type[GatewayError]] = {
    SessionTrustState.NO_SESSION: UnauthenticatedError,
    SessionTrustState.PASSWORD_CHANGE_REQUIRED: PasswordChangeRequiredError,
    SessionTrustState.MFA_SETUP_REQUIRED: MfaSetupRequiredError,
    SessionTrustState.MFA_VERIFY_REQUIRED: MfaVerifyRequiredError,
}


def enforce_session_trust(
    ctx: RequestContext | None,
    options: GateOptions,
    probe: AuthorizationProbe | None = None,
) -> ISession:
    """Evaluate the request's session once and raise on any blocking state.

    Returns:
        The trusted session

    Raises:
        UnauthenticatedError: No session
        PasswordChangeRequiredError: Password must be changed first
        MfaSetupRequiredError: MFA is enforced and no device is enrolled
        MfaVerifyRequiredError: A device is enrolled but this session is unverified
    """
    if ctx is None or ctx.session is None:
        state = evaluate_session_trust(None, options)
    else:
        session = ctx.session
        state = evaluate_session_trust(
            session.trust_payload,
            options,
            global_mfa_enforced=ctx.global_mfa_enforced,
        )
        if state is SessionTrustState.TRUSTED:
            return session

    if probe is not None:
        if ctx is not None:
            probe = probe.with_context(ctx.observation())
        probe.session_rejected(state=state.value)
    raise _STATE_ERRORS[state]()


def protect(
    *,
    require_mfa_verification: bool = True,
    allow_mfa_setup: bool = False,
    allow_password_change: bool = False,
    probe: AuthorizationProbe | None = None,
) -> Callable[[F], F]:
    """Guard an async service method with the session trust gate.

    The decorated method must accept a ``ctx`` (RequestContext) argument,
    positionally or by keyword.
    """
    options = GateOptions(
        require_mfa_verification=require_mfa_verification,
        allow_mfa_setup=allow_mfa_setup,
        allow_password_change=allow_password_change,
    )
    gate_probe = probe or DefaultAuthorizationProbe()

    def decorator(func: F) -> F:
        signature = inspect.signature(func)
        if CONTEXT_PARAMETER not in signature.parameters:
            raise TypeError(
                f"{func.__qualname__} must accept a '{CONTEXT_PARAMETER}' argument"
            )

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            bound = signature.bind(*args, **kwargs)
            ctx = bound.arguments.get(CONTEXT_PARAMETER)
            enforce_session_trust(ctx, options, gate_probe)
            return await func(*args, **kwargs)

        wrapper.gate_options = options  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]

    return decorator
