"""Domain probe for saga execution.

Compensation failures are reported at critical level: they mean the
subsystems a saga touched may now disagree with each other.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class SagaProbe(Protocol):
    """Domain probe for saga execution."""

    def step_completed(self, saga: str, step: str) -> None:
        """Record that a saga step completed."""
        ...

    def step_failed(self, saga: str, step: str, error: Exception) -> None:
        """Record that a saga step failed and rollback is starting."""
        ...

    def step_compensated(self, saga: str, step: str) -> None:
        """Record that a completed step was rolled back."""
        ...

    def compensation_failed(self, saga: str, step: str, error: Exception) -> None:
        """Record that rolling back a step failed."""
        ...

    def saga_cancelled(self, saga: str, step: str) -> None:
        """Record that the caller was cancelled while a step was running."""
        ...

    def saga_completed(self, saga: str, step_count: int) -> None:
        """Record that every step of a saga completed."""
        ...

    def with_context(self, context: ObservationContext) -> SagaProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultSagaProbe:
    """Default implementation of SagaProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultSagaProbe:
        """Create a new probe with observation context bound."""
        return DefaultSagaProbe(logger=self._logger, context=context)

    def step_completed(self, saga: str, step: str) -> None:
        self._logger.debug(
            "saga_step_completed",
            saga=saga,
            step=step,
            **self._get_context_kwargs(),
        )

    def step_failed(self, saga: str, step: str, error: Exception) -> None:
        self._logger.error(
            "saga_step_failed",
            saga=saga,
            step=step,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def step_compensated(self, saga: str, step: str) -> None:
        self._logger.info(
            "saga_step_compensated",
            saga=saga,
            step=step,
            **self._get_context_kwargs(),
        )

    def compensation_failed(self, saga: str, step: str, error: Exception) -> None:
        self._logger.critical(
            "saga_compensation_failed",
            saga=saga,
            step=step,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def saga_cancelled(self, saga: str, step: str) -> None:
        self._logger.warning(
            "saga_cancelled",
            saga=saga,
            step=step,
            **self._get_context_kwargs(),
        )

    def saga_completed(self, saga: str, step_count: int) -> None:
        self._logger.info(
            "saga_completed",
            saga=saga,
            step_count=step_count,
            **self._get_context_kwargs(),
        )
