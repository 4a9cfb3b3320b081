"""Resource backend contract for tenant records."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from iam.domain.entities import Tenant


@runtime_checkable
class ITenantBackend(Protocol):
    """Tenant storage owned by the resource backend.

    Every call carries the acting user and tenant so the backend can apply
    its own scoping.

    Raises (all methods):
        NotFoundError: If the tenant does not exist
        ServiceUnavailableError: If the backend cannot be reached
        ResourceBackendError: For any other backend failure
    """

    async def create_tenant(self, name: str, user_id: str | None) -> Tenant: ...

    async def get_tenant(self, tenant_id: str, user_id: str | None) -> Tenant: ...

    async def update_tenant(
        self, tenant_id: str, name: str, user_id: str | None
    ) -> Tenant: ...

    async def delete_tenant(self, tenant_id: str, user_id: str | None) -> None: ...

    async def list_tenants(
        self, tenant_id: str | None, user_id: str | None
    ) -> list[Tenant]: ...
