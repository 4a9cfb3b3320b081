"""Notification sender that records outgoing messages in the log.

Deployments with a mail relay provide their own INotificationSender; this
one keeps invitation and reset flows usable in development.
"""

from __future__ import annotations

import structlog


class LoggingNotificationSender:
    """INotificationSender that writes each message as a structured log event.

    Temporary passwords are never logged; only the fact that they were sent.
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()

    async def send_invite(self, email: str, tenant_id: str, invite_link: str) -> None:
        self._logger.info(
            "notification_invite_sent",
            email=email,
            tenant_id=tenant_id,
            invite_link=invite_link,
        )

    async def send_temporary_credentials(
        self, email: str, tenant_id: str, temporary_password: str
    ) -> None:
        self._logger.info(
            "notification_temporary_credentials_sent",
            email=email,
            tenant_id=tenant_id,
        )

    async def send_password_reset(self, email: str, reset_link: str) -> None:
        self._logger.info(
            "notification_password_reset_sent",
            email=email,
            reset_link=reset_link,
        )
