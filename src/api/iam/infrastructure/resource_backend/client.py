"""Tenant backend client speaking Struct-typed gRPC.

The resource backend exposes a ``TenantService`` whose request and response
messages are ``google.protobuf.Struct``. Calls are made through generic
unary-unary method handles on a ``grpc.aio`` channel, so no generated stubs
are needed.
"""

from __future__ import annotations

from typing import Any, Mapping

import grpc
from google.protobuf.struct_pb2 import Struct

from iam.domain.entities import Tenant
from iam.infrastructure.observability import (
    DefaultResourceBackendProbe,
    ResourceBackendProbe,
)
from iam.infrastructure.resource_backend.codec import (
    from_struct,
    tenant_from_dict,
    to_struct,
)
from iam.ports.exceptions import (
    NotFoundError,
    ResourceBackendError,
    ServiceUnavailableError,
)

TENANT_ID_METADATA_KEY = "x-tenant-id"
USER_ID_METADATA_KEY = "x-user-id"


class GrpcTenantBackend:
    """ITenantBackend implementation over ``grpc.aio``.

    Args:
        channel: An open aio channel; the caller owns its lifecycle
        service_name: Fully qualified gRPC service name
        timeout: Deadline in seconds applied to every call
        probe: Optional domain probe for RPC observability
    """

    def __init__(
        self,
        channel: grpc.aio.Channel,
        service_name: str = "proteus.v1.TenantService",
        timeout: float = 10.0,
        probe: ResourceBackendProbe | None = None,
    ):
        self._channel = channel
        self._service_name = service_name
        self._timeout = timeout
        self._probe = probe or DefaultResourceBackendProbe()

    @classmethod
    def connect(
        cls,
        address: str,
        service_name: str = "proteus.v1.TenantService",
        timeout: float = 10.0,
        probe: ResourceBackendProbe | None = None,
    ) -> GrpcTenantBackend:
        """Open an insecure channel to ``address``."""
        return cls(
            grpc.aio.insecure_channel(address),
            service_name=service_name,
            timeout=timeout,
            probe=probe,
        )

    async def close(self) -> None:
        await self._channel.close()

    async def _call(
        self,
        method: str,
        payload: Mapping[str, Any],
        tenant_id: str | None,
        user_id: str | None,
    ) -> dict[str, Any]:
        rpc = self._channel.unary_unary(
            f"/{self._service_name}/{method}",
            request_serializer=Struct.SerializeToString,
            response_deserializer=Struct.FromString,
        )
        metadata = []
        if tenant_id:
            metadata.append((TENANT_ID_METADATA_KEY, tenant_id))
        if user_id:
            metadata.append((USER_ID_METADATA_KEY, user_id))

        try:
            response = await rpc(
                to_struct(payload), metadata=metadata, timeout=self._timeout
            )
        except grpc.aio.AioRpcError as e:
            code = e.code()
            self._probe.rpc_failed(method, code.name, e.details())
            if code == grpc.StatusCode.NOT_FOUND:
                raise NotFoundError("Tenant not found.") from e
            if code == grpc.StatusCode.UNAVAILABLE:
                raise ServiceUnavailableError() from e
            raise ResourceBackendError(e.details() or None) from e

        self._probe.rpc_completed(method)
        return from_struct(response)

    def _tenant(self, data: Mapping[str, Any]) -> Tenant:
        try:
            return tenant_from_dict(data)
        except (KeyError, ValueError) as e:
            raise ResourceBackendError("Malformed tenant record.") from e

    async def create_tenant(self, name: str, user_id: str | None) -> Tenant:
        data = await self._call("CreateTenant", {"name": name}, None, user_id)
        return self._tenant(data)

    async def get_tenant(self, tenant_id: str, user_id: str | None) -> Tenant:
        data = await self._call("GetTenant", {"id": tenant_id}, tenant_id, user_id)
        return self._tenant(data)

    async def update_tenant(
        self, tenant_id: str, name: str, user_id: str | None
    ) -> Tenant:
        data = await self._call(
            "UpdateTenant", {"id": tenant_id, "name": name}, tenant_id, user_id
        )
        return self._tenant(data)

    async def delete_tenant(self, tenant_id: str, user_id: str | None) -> None:
        await self._call("DeleteTenant", {"id": tenant_id}, tenant_id, user_id)

    async def list_tenants(
        self, tenant_id: str | None, user_id: str | None
    ) -> list[Tenant]:
        data = await self._call("ListTenants", {}, tenant_id, user_id)
        return [self._tenant(item) for item in data.get("tenants", [])]
