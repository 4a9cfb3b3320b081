"""Unit tests for the saga executor."""

import asyncio
from unittest.mock import MagicMock, Mock

import pytest
import structlog

from shared_kernel.saga import (
    DefaultSagaProbe,
    SagaExecutor,
    SagaFailedError,
    SagaProbe,
    SagaStep,
)


class _Recorder:
    """Builds steps that record their actions and compensations."""

    def __init__(self):
        self.events: list[str] = []

    def step(self, name, fail=False, compensation_fails=False, compensate=True):
        async def action(results):
            self.events.append(f"do:{name}")
            if fail:
                raise RuntimeError(f"{name} failed")
            return f"{name}-result"

        async def compensation(result):
            self.events.append(f"undo:{name}:{result}")
            if compensation_fails:
                raise RuntimeError(f"undo {name} failed")

        return SagaStep(name, action, compensation if compensate else None)


@pytest.fixture
def probe():
    return Mock(spec=SagaProbe)


@pytest.fixture
def executor(probe):
    return SagaExecutor(probe=probe)


class TestSagaExecutorRun:
    """Tests for SagaExecutor.run()."""

    @pytest.mark.asyncio
    async def test_runs_steps_in_order_and_returns_results(self, executor, probe):
        recorder = _Recorder()

        results = await executor.run(
            "demo", [recorder.step("a"), recorder.step("b")]
        )

        assert results == {"a": "a-result", "b": "b-result"}
        assert recorder.events == ["do:a", "do:b"]
        probe.saga_completed.assert_called_once_with(saga="demo", step_count=2)

    @pytest.mark.asyncio
    async def test_later_steps_see_earlier_results(self, executor):
        async def first(results):
            return 41

        async def second(results):
            return results["first"] + 1

        results = await executor.run(
            "chain", [SagaStep("first", first), SagaStep("second", second)]
        )

        assert results["second"] == 42

    @pytest.mark.asyncio
    async def test_failure_compensates_completed_steps_in_reverse(self, executor):
        recorder = _Recorder()

        with pytest.raises(SagaFailedError) as exc_info:
            await executor.run(
                "demo",
                [recorder.step("a"), recorder.step("b"), recorder.step("c", fail=True)],
            )

        assert recorder.events == [
            "do:a",
            "do:b",
            "do:c",
            "undo:b:b-result",
            "undo:a:a-result",
        ]
        error = exc_info.value
        assert error.saga == "demo"
        assert error.failed_step == "c"
        assert isinstance(error.cause, RuntimeError)
        assert error.__cause__ is error.cause
        assert error.fully_compensated

    @pytest.mark.asyncio
    async def test_steps_without_compensation_are_skipped(self, executor):
        recorder = _Recorder()

        with pytest.raises(SagaFailedError):
            await executor.run(
                "demo",
                [
                    recorder.step("a"),
                    recorder.step("b", compensate=False),
                    recorder.step("c", fail=True),
                ],
            )

        assert recorder.events[-1] == "undo:a:a-result"
        assert "undo:b:b-result" not in recorder.events

    @pytest.mark.asyncio
    async def test_compensation_failure_does_not_stop_rollback(self, executor, probe):
        recorder = _Recorder()

        with pytest.raises(SagaFailedError) as exc_info:
            await executor.run(
                "demo",
                [
                    recorder.step("a"),
                    recorder.step("b", compensation_fails=True),
                    recorder.step("c", fail=True),
                ],
            )

        assert "undo:a:a-result" in recorder.events
        failures = exc_info.value.compensation_failures
        assert [f.step for f in failures] == ["b"]
        assert not exc_info.value.fully_compensated
        probe.compensation_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_cancellation_still_compensates(self, executor, probe):
        recorder = _Recorder()
        started = asyncio.Event()

        async def hang(results):
            started.set()
            await asyncio.sleep(3600)

        task = asyncio.create_task(
            executor.run("demo", [recorder.step("a"), SagaStep("hang", hang)])
        )
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert recorder.events == ["do:a", "undo:a:a-result"]
        probe.saga_cancelled.assert_called_once_with(saga="demo", step="hang")

    @pytest.mark.asyncio
    async def test_cancellation_during_rollback_finishes_compensation(
        self, executor, probe
    ):
        undone: list[str] = []
        compensating = asyncio.Event()
        release = asyncio.Event()

        async def create(results):
            return "tenant-1"

        async def delete(tenant_id):
            compensating.set()
            await release.wait()
            undone.append(tenant_id)

        async def fail(results):
            raise RuntimeError("register failed")

        task = asyncio.create_task(
            executor.run(
                "demo",
                [SagaStep("create", create, delete), SagaStep("register", fail)],
            )
        )
        await compensating.wait()
        task.cancel()
        await asyncio.sleep(0)
        task.cancel()
        await asyncio.sleep(0)
        release.set()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert undone == ["tenant-1"]
        probe.step_compensated.assert_called_once_with(saga="demo", step="create")


class TestDefaultSagaProbe:
    """Tests for DefaultSagaProbe."""

    def test_compensation_failure_logs_critical(self):
        logger = MagicMock(spec=structlog.stdlib.BoundLogger)
        probe = DefaultSagaProbe(logger=logger)

        probe.compensation_failed(saga="demo", step="a", error=ValueError("x"))

        logger.critical.assert_called_once_with(
            "saga_compensation_failed",
            saga="demo",
            step="a",
            error="x",
            error_type="ValueError",
        )
