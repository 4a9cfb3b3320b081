"""gRPC adapter for tenant records held by the resource backend."""

from iam.infrastructure.resource_backend.client import GrpcTenantBackend

__all__ = ["GrpcTenantBackend"]
