"""Saga execution for multi-step operations across independent subsystems.

A saga is an explicit list of steps, each paired with an optional
compensation. When a step fails, the compensations of the steps that already
completed run in reverse order before the failure is reported.
"""

from shared_kernel.saga.exceptions import CompensationFailure, SagaFailedError
from shared_kernel.saga.executor import SagaExecutor, SagaStep
from shared_kernel.saga.observability import DefaultSagaProbe, SagaProbe

__all__ = [
    "CompensationFailure",
    "DefaultSagaProbe",
    "SagaExecutor",
    "SagaFailedError",
    "SagaProbe",
    "SagaStep",
]
