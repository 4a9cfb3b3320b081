"""Exceptions raised by the saga executor."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CompensationFailure:
    """A compensation that raised while rolling back a saga.

    Attributes:
        step: Name of the step whose compensation failed
        error: The exception raised by the compensation
    """

    step: str
    error: Exception


class SagaFailedError(Exception):
    """Raised when a saga step fails.

    By the time this is raised every completed step has had its compensation
    attempted. Compensations that failed are listed in
    ``compensation_failures``; a non-empty list means remote state may be
    inconsistent and needs manual attention.
    """

    def __init__(
        self,
        saga: str,
        failed_step: str,
        cause: Exception,
        compensation_failures: list[CompensationFailure] | None = None,
    ):
        self.saga = saga
        self.failed_step = failed_step
        self.cause = cause
        self.compensation_failures = compensation_failures or []
        super().__init__(f"Saga '{saga}' failed at step '{failed_step}': {cause}")

    @property
    def fully_compensated(self) -> bool:
        """Whether every attempted compensation succeeded."""
        return not self.compensation_failures
