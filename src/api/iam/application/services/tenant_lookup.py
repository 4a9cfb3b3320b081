"""Concurrent tenant summary lookups."""

from __future__ import annotations

import asyncio
from typing import Sequence

from iam.domain.entities import Tenant
from iam.ports.tenant_backend import ITenantBackend


async def fetch_tenants(
    backend: ITenantBackend,
    tenant_ids: Sequence[str],
    user_id: str | None,
) -> tuple[list[Tenant], dict[str, Exception]]:
    """Fetch several tenants at once, keeping the order of ``tenant_ids``.

    Individual failures do not fail the batch; they are returned so the
    caller can log them.

    Returns:
        The tenants that could be fetched, and the errors keyed by tenant id
    """
    results = await asyncio.gather(
        *(backend.get_tenant(tenant_id, user_id) for tenant_id in tenant_ids),
        return_exceptions=True,
    )

    tenants: list[Tenant] = []
    failures: dict[str, Exception] = {}
    for tenant_id, result in zip(tenant_ids, results):
        if isinstance(result, Exception):
            failures[tenant_id] = result
        elif isinstance(result, BaseException):
            raise result
        else:
            tenants.append(result)
    return tenants, failures
