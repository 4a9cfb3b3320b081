"""Protocol for MFA service observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class MfaServiceProbe(Protocol):
    """Domain probe for TOTP enrollment and session elevation."""

    def totp_device_created(self, device_name: str) -> None:
        """Record that an unverified device was enrolled."""
        ...

    def mfa_code_rejected(self, device_name: str | None) -> None:
        """Record that a TOTP code did not verify."""
        ...

    def session_elevated(self, device_verified: bool) -> None:
        """Record that a replacement session with MFA verified was issued."""
        ...

    def totp_device_removed(self, device_name: str, remaining_devices: int) -> None:
        """Record that a device was removed."""
        ...

    def with_context(self, context: ObservationContext) -> MfaServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultMfaServiceProbe:
    """Default implementation of MfaServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultMfaServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultMfaServiceProbe(logger=self._logger, context=context)

    def totp_device_created(self, device_name: str) -> None:
        """Record that an unverified device was enrolled."""
        self._logger.info(
            "totp_device_created",
            device_name=device_name,
            **self._get_context_kwargs(),
        )

    def mfa_code_rejected(self, device_name: str | None) -> None:
        """Record that a TOTP code did not verify."""
        self._logger.info(
            "mfa_code_rejected",
            device_name=device_name,
            **self._get_context_kwargs(),
        )

    def session_elevated(self, device_verified: bool) -> None:
        """Record that a replacement session with MFA verified was issued."""
        self._logger.info(
            "session_elevated",
            device_verified=device_verified,
            **self._get_context_kwargs(),
        )

    def totp_device_removed(self, device_name: str, remaining_devices: int) -> None:
        """Record that a device was removed."""
        self._logger.info(
            "totp_device_removed",
            device_name=device_name,
            remaining_devices=remaining_devices,
            **self._get_context_kwargs(),
        )
