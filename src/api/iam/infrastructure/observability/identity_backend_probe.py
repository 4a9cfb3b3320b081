"""Domain probes for the identity backend adapters.

Following Domain-Oriented Observability patterns, these probes capture
policy cache behaviour and unexpected identity backend responses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RbacProviderProbe(Protocol):
    """Domain probe for role and policy storage."""

    def cache_hit(self, key: str) -> None:
        """Record that a role list or policy was served from cache."""
        ...

    def cache_miss(self, key: str) -> None:
        """Record that a role list or policy was read from the store."""
        ...

    def cache_invalidated(self, key: str) -> None:
        """Record that a write evicted a cache entry."""
        ...

    def malformed_policy(self, key: str, error: str) -> None:
        """Record that a stored policy document could not be parsed."""
        ...

    def with_context(self, context: ObservationContext) -> RbacProviderProbe:
        """Create a new probe with observation context bound."""
        ...


class IdentityBackendProbe(Protocol):
    """Domain probe for identity backend calls."""

    def unexpected_response(self, operation: str, response: str) -> None:
        """Record a response the adapter has no mapping for."""
        ...

    def session_rejected(self, reason: str) -> None:
        """Record that an access token did not validate."""
        ...

    def with_context(self, context: ObservationContext) -> IdentityBackendProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRbacProviderProbe:
    """Default implementation of RbacProviderProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultRbacProviderProbe:
        """Create a new probe with observation context bound."""
        return DefaultRbacProviderProbe(logger=self._logger, context=context)

    def cache_hit(self, key: str) -> None:
        """Record that a role list or policy was served from cache."""
        self._logger.debug("rbac_cache_hit", key=key, **self._get_context_kwargs())

    def cache_miss(self, key: str) -> None:
        """Record that a role list or policy was read from the store."""
        self._logger.debug("rbac_cache_miss", key=key, **self._get_context_kwargs())

    def cache_invalidated(self, key: str) -> None:
        """Record that a write evicted a cache entry."""
        self._logger.debug(
            "rbac_cache_invalidated", key=key, **self._get_context_kwargs()
        )

    def malformed_policy(self, key: str, error: str) -> None:
        """Record that a stored policy document could not be parsed."""
        self._logger.error(
            "rbac_malformed_policy",
            key=key,
            error=error,
            **self._get_context_kwargs(),
        )


class DefaultIdentityBackendProbe:
    """Default implementation of IdentityBackendProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultIdentityBackendProbe:
        """Create a new probe with observation context bound."""
        return DefaultIdentityBackendProbe(logger=self._logger, context=context)

    def unexpected_response(self, operation: str, response: str) -> None:
        """Record a response the adapter has no mapping for."""
        self._logger.error(
            "identity_backend_unexpected_response",
            backend_operation=operation,
            response=response,
            **self._get_context_kwargs(),
        )

    def session_rejected(self, reason: str) -> None:
        """Record that an access token did not validate."""
        self._logger.debug(
            "identity_backend_session_rejected",
            reason=reason,
            **self._get_context_kwargs(),
        )
