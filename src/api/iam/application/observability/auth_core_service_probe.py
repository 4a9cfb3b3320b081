"""Protocol for authentication service observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthCoreServiceProbe(Protocol):
    """Domain probe for login, registration and session lifecycle."""

    def login_succeeded(
        self, user_id: str, tenant_id: str | None, mfa_enforced: bool
    ) -> None: ...

    def login_failed(self, email: str) -> None: ...

    def user_registered(self, user_id: str) -> None: ...

    def session_refreshed(self) -> None: ...

    def token_theft_detected(self, user_id: str | None) -> None: ...

    def logged_out(self, user_id: str) -> None: ...

    def password_reset_requested(self, user_found: bool) -> None: ...

    def password_reset_completed(self) -> None: ...

    def password_reset_rejected(self) -> None: ...

    def password_reset_delivery_failed(self, error: Exception) -> None: ...

    def tenant_lookup_failed(self, tenant_id: str, error: BaseException) -> None: ...

    def with_context(self, context: ObservationContext) -> AuthCoreServiceProbe: ...


class DefaultAuthCoreServiceProbe:
    """Default implementation of AuthCoreServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAuthCoreServiceProbe:
        return DefaultAuthCoreServiceProbe(logger=self._logger, context=context)

    def login_succeeded(
        self, user_id: str, tenant_id: str | None, mfa_enforced: bool
    ) -> None:
        self._logger.info(
            "login_succeeded",
            login_user_id=user_id,
            active_tenant_id=tenant_id,
            mfa_enforced=mfa_enforced,
            **self._get_context_kwargs(),
        )

    def login_failed(self, email: str) -> None:
        self._logger.info(
            "login_failed",
            email=email,
            **self._get_context_kwargs(),
        )

    def user_registered(self, user_id: str) -> None:
        self._logger.info(
            "user_registered",
            registered_user_id=user_id,
            **self._get_context_kwargs(),
        )

    def session_refreshed(self) -> None:
        self._logger.debug("session_refreshed", **self._get_context_kwargs())

    def token_theft_detected(self, user_id: str | None) -> None:
        self._logger.error(
            "token_theft_detected",
            affected_user_id=user_id,
            **self._get_context_kwargs(),
        )

    def logged_out(self, user_id: str) -> None:
        self._logger.info(
            "logged_out",
            logged_out_user_id=user_id,
            **self._get_context_kwargs(),
        )

    def password_reset_requested(self, user_found: bool) -> None:
        self._logger.info(
            "password_reset_requested",
            user_found=user_found,
            **self._get_context_kwargs(),
        )

    def password_reset_completed(self) -> None:
        self._logger.info("password_reset_completed", **self._get_context_kwargs())

    def password_reset_rejected(self) -> None:
        self._logger.info("password_reset_rejected", **self._get_context_kwargs())

    def password_reset_delivery_failed(self, error: Exception) -> None:
        self._logger.error(
            "password_reset_delivery_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def tenant_lookup_failed(self, tenant_id: str, error: BaseException) -> None:
        self._logger.warning(
            "tenant_lookup_failed",
            lookup_tenant_id=tenant_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
