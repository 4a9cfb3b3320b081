"""Out-of-band delivery of invitation and credential messages."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class INotificationSender(Protocol):
    """Delivers links and credentials to a user outside the API response."""

    async def send_invite(self, email: str, tenant_id: str, invite_link: str) -> None: ...

    async def send_temporary_credentials(
        self, email: str, tenant_id: str, temporary_password: str
    ) -> None: ...

    async def send_password_reset(self, email: str, reset_link: str) -> None: ...
