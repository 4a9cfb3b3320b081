"""Protocol for role and policy management observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RbacServiceProbe(Protocol):
    """Domain probe for role and policy management."""

    def role_policy_created(self, role_name: str) -> None: ...

    def role_policy_updated(self, role_name: str) -> None: ...

    def role_policy_deleted(self, role_name: str) -> None: ...

    def role_assigned(self, assignee_id: str, role_name: str) -> None: ...

    def protected_role_change_rejected(self, role_name: str, operation: str) -> None: ...

    def with_context(self, context: ObservationContext) -> RbacServiceProbe: ...


class DefaultRbacServiceProbe:
    """Default implementation of RbacServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultRbacServiceProbe:
        return DefaultRbacServiceProbe(logger=self._logger, context=context)

    def role_policy_created(self, role_name: str) -> None:
        self._logger.info(
            "role_policy_created",
            role_name=role_name,
            **self._get_context_kwargs(),
        )

    def role_policy_updated(self, role_name: str) -> None:
        self._logger.info(
            "role_policy_updated",
            role_name=role_name,
            **self._get_context_kwargs(),
        )

    def role_policy_deleted(self, role_name: str) -> None:
        self._logger.info(
            "role_policy_deleted",
            role_name=role_name,
            **self._get_context_kwargs(),
        )

    def role_assigned(self, assignee_id: str, role_name: str) -> None:
        self._logger.info(
            "role_assigned",
            assignee_id=assignee_id,
            role_name=role_name,
            **self._get_context_kwargs(),
        )

    def protected_role_change_rejected(self, role_name: str, operation: str) -> None:
        self._logger.warning(
            "protected_role_change_rejected",
            role_name=role_name,
            attempted_operation=operation,
            **self._get_context_kwargs(),
        )
