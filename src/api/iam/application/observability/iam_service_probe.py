"""Protocol for IAM service observability.

Captures tenant provisioning, invitations, membership and profile changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class IamServiceProbe(Protocol):
    """Domain probe for IAM service operations."""

    def tenant_provisioned(self, tenant_id: str, name: str) -> None:
        """Record that a tenant and its admin role were provisioned."""
        ...

    def tenant_provisioning_failed(
        self, name: str, failed_step: str, fully_compensated: bool
    ) -> None:
        """Record that the provisioning saga failed."""
        ...

    def tenant_updated(self, tenant_id: str, name: str) -> None:
        """Record that a tenant was renamed."""
        ...

    def invite_created(self, invitee_id: str, tenant_id: str, role_name: str) -> None:
        """Record that an invite was stored for an existing user."""
        ...

    def user_provisioned(self, invitee_id: str, tenant_id: str, role_name: str) -> None:
        """Record that a new user was created through an invitation."""
        ...

    def invitation_failed(self, email: str, failed_step: str) -> None:
        """Record that an invitation saga failed."""
        ...

    def invite_accepted(self, tenant_id: str, role_name: str) -> None:
        """Record that an invite was consumed."""
        ...

    def invite_not_found(self) -> None:
        """Record that an invite token was unknown or already used."""
        ...

    def user_updated(self, password_changed: bool) -> None:
        """Record that the caller updated their account."""
        ...

    def user_removed_from_tenant(self, removed_user_id: str, tenant_id: str) -> None:
        """Record that a user lost membership of a tenant."""
        ...

    def tenant_lookup_failed(self, tenant_id: str, error: BaseException) -> None:
        """Record that a tenant summary could not be fetched."""
        ...

    def with_context(self, context: ObservationContext) -> IamServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultIamServiceProbe:
    """Default implementation of IamServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultIamServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultIamServiceProbe(logger=self._logger, context=context)

    def tenant_provisioned(self, tenant_id: str, name: str) -> None:
        """Record that a tenant and its admin role were provisioned."""
        self._logger.info(
            "tenant_provisioned",
            provisioned_tenant_id=tenant_id,
            name=name,
            **self._get_context_kwargs(),
        )

    def tenant_provisioning_failed(
        self, name: str, failed_step: str, fully_compensated: bool
    ) -> None:
        """Record that the provisioning saga failed."""
        self._logger.error(
            "tenant_provisioning_failed",
            name=name,
            failed_step=failed_step,
            fully_compensated=fully_compensated,
            **self._get_context_kwargs(),
        )

    def tenant_updated(self, tenant_id: str, name: str) -> None:
        """Record that a tenant was renamed."""
        self._logger.info(
            "tenant_updated",
            updated_tenant_id=tenant_id,
            name=name,
            **self._get_context_kwargs(),
        )

    def invite_created(self, invitee_id: str, tenant_id: str, role_name: str) -> None:
        """Record that an invite was stored for an existing user."""
        self._logger.info(
            "invite_created",
            invitee_id=invitee_id,
            invite_tenant_id=tenant_id,
            role_name=role_name,
            **self._get_context_kwargs(),
        )

    def user_provisioned(self, invitee_id: str, tenant_id: str, role_name: str) -> None:
        """Record that a new user was created through an invitation."""
        self._logger.info(
            "user_provisioned",
            invitee_id=invitee_id,
            invite_tenant_id=tenant_id,
            role_name=role_name,
            **self._get_context_kwargs(),
        )

    def invitation_failed(self, email: str, failed_step: str) -> None:
        """Record that an invitation saga failed."""
        self._logger.error(
            "invitation_failed",
            email=email,
            failed_step=failed_step,
            **self._get_context_kwargs(),
        )

    def invite_accepted(self, tenant_id: str, role_name: str) -> None:
        """Record that an invite was consumed."""
        self._logger.info(
            "invite_accepted",
            invite_tenant_id=tenant_id,
            role_name=role_name,
            **self._get_context_kwargs(),
        )

    def invite_not_found(self) -> None:
        """Record that an invite token was unknown or already used."""
        self._logger.info("invite_not_found", **self._get_context_kwargs())

    def user_updated(self, password_changed: bool) -> None:
        """Record that the caller updated their account."""
        self._logger.info(
            "user_updated",
            password_changed=password_changed,
            **self._get_context_kwargs(),
        )

    def user_removed_from_tenant(self, removed_user_id: str, tenant_id: str) -> None:
        """Record that a user lost membership of a tenant."""
        self._logger.info(
            "user_removed_from_tenant",
            removed_user_id=removed_user_id,
            membership_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_lookup_failed(self, tenant_id: str, error: BaseException) -> None:
        """Record that a tenant summary could not be fetched."""
        self._logger.warning(
            "tenant_lookup_failed",
            lookup_tenant_id=tenant_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
