"""Domain probe for resource backend RPCs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ResourceBackendProbe(Protocol):
    """Domain probe for tenant RPCs against the resource backend."""

    def rpc_completed(self, method: str) -> None:
        """Record that an RPC succeeded."""
        ...

    def rpc_failed(self, method: str, code: str, details: str | None) -> None:
        """Record that an RPC returned an error status."""
        ...

    def with_context(self, context: ObservationContext) -> ResourceBackendProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultResourceBackendProbe:
    """Default implementation of ResourceBackendProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultResourceBackendProbe:
        return DefaultResourceBackendProbe(logger=self._logger, context=context)

    def rpc_completed(self, method: str) -> None:
        self._logger.debug(
            "resource_backend_rpc_completed",
            method=method,
            **self._get_context_kwargs(),
        )

    def rpc_failed(self, method: str, code: str, details: str | None) -> None:
        self._logger.error(
            "resource_backend_rpc_failed",
            method=method,
            code=code,
            details=details,
            **self._get_context_kwargs(),
        )
