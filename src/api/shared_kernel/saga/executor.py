"""Sequential saga executor with reverse-order compensation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

from shared_kernel.saga.exceptions import CompensationFailure, SagaFailedError
from shared_kernel.saga.observability import DefaultSagaProbe, SagaProbe

StepAction = Callable[[dict[str, Any]], Awaitable[Any]]
StepCompensation = Callable[[Any], Awaitable[None]]


@dataclass(frozen=True)
class SagaStep:
    """One step of a saga.

    Attributes:
        name: Unique step name; the step's result is stored under it
        action: Coroutine function receiving the results of earlier steps
        compensation: Optional coroutine function undoing the step, called
            with the step's own result
    """

    name: str
    action: StepAction
    compensation: StepCompensation | None = None


class SagaExecutor:
    """Runs saga steps in order and compensates on failure.

    Steps are awaited one after another because later steps usually consume
    earlier results. There is no retry: the first failing step stops the saga.
    """

    def __init__(self, probe: SagaProbe | None = None):
        self._probe = probe or DefaultSagaProbe()

    async def run(self, saga: str, steps: Sequence[SagaStep]) -> dict[str, Any]:
        """Execute the steps of a saga.

        Args:
            saga: Saga name used for observability and errors
            steps: Steps to run in order

        Returns:
            Mapping of step name to the value returned by its action

        Raises:
            SagaFailedError: If a step raises. Compensations of completed
                steps have already been attempted.
            asyncio.CancelledError: If the caller is cancelled mid-step or
                during compensation. Compensations still run to completion.
        """
        results: dict[str, Any] = {}
        completed: list[tuple[SagaStep, Any]] = []

        for step in steps:
            try:
                result = await step.action(results)
            except asyncio.CancelledError:
                self._probe.saga_cancelled(saga=saga, step=step.name)
                await self._compensate_to_completion(saga, completed)
                raise
            except Exception as e:
                self._probe.step_failed(saga=saga, step=step.name, error=e)
                failures = await self._compensate_to_completion(saga, completed)
                raise SagaFailedError(
                    saga=saga,
                    failed_step=step.name,
                    cause=e,
                    compensation_failures=failures,
                ) from e

            results[step.name] = result
            completed.append((step, result))
            self._probe.step_completed(saga=saga, step=step.name)

        self._probe.saga_completed(saga=saga, step_count=len(completed))
        return results

    async def _compensate_to_completion(
        self,
        saga: str,
        completed: list[tuple[SagaStep, Any]],
    ) -> list[CompensationFailure]:
        """Run compensations in a task that cancelling the caller cannot stop.

        A cancellation received while compensating is re-raised once every
        compensation has finished.
        """
        task = asyncio.ensure_future(self._compensate(saga, completed))
        cancelled: asyncio.CancelledError | None = None
        while True:
            try:
                failures = await asyncio.shield(task)
            except asyncio.CancelledError as e:
                if task.cancelled():
                    raise
                cancelled = e
            else:
                break

        if cancelled is not None:
            raise cancelled
        return failures

    async def _compensate(
        self,
        saga: str,
        completed: list[tuple[SagaStep, Any]],
    ) -> list[CompensationFailure]:
        """Undo completed steps in reverse order, collecting failures."""
        failures: list[CompensationFailure] = []

        for step, result in reversed(completed):
            if step.compensation is None:
                continue
            try:
                await step.compensation(result)
            except Exception as e:
                failures.append(CompensationFailure(step=step.name, error=e))
                self._probe.compensation_failed(saga=saga, step=step.name, error=e)
            else:
                self._probe.step_compensated(saga=saga, step=step.name)

        return failures
