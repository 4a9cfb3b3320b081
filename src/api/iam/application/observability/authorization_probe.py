"""Protocol for request authorization observability.

Covers the session trust gate, policy checks and permission resolution.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthorizationProbe(Protocol):
    """Domain probe for request authorization."""

    def session_rejected(self, state: str) -> None:
        """Record that the session trust gate blocked an operation."""
        ...

    def access_denied(self, entity: str, action: str, reason: str) -> None:
        """Record that a policy check denied an operation."""
        ...

    def permissions_resolved(self, role: str | None, has_policy: bool) -> None:
        """Record the outcome of resolving a caller's permissions."""
        ...

    def with_context(self, context: ObservationContext) -> AuthorizationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthorizationProbe:
    """Default implementation of AuthorizationProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultAuthorizationProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthorizationProbe(logger=self._logger, context=context)

    def session_rejected(self, state: str) -> None:
        """Record that the session trust gate blocked an operation."""
        self._logger.info(
            "session_rejected",
            state=state,
            **self._get_context_kwargs(),
        )

    def access_denied(self, entity: str, action: str, reason: str) -> None:
        """Record that a policy check denied an operation."""
        self._logger.warning(
            "access_denied",
            entity=entity,
            action=action,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def permissions_resolved(self, role: str | None, has_policy: bool) -> None:
        """Record the outcome of resolving a caller's permissions."""
        self._logger.debug(
            "permissions_resolved",
            role=role,
            has_policy=has_policy,
            **self._get_context_kwargs(),
        )
