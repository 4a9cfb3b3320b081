"""Ports (interfaces) for IAM bounded context.

Ports define the contracts for the identity backend, the resource backend
and out-of-band notifications without specifying implementation details.
Application services depend on these protocols only.
"""

from iam.ports.notifications import INotificationSender
from iam.ports.policy_store import IMetadataStore, ITTLCache
from iam.ports.providers import (
    IAuthCoreProvider,
    IIamProvider,
    IMfaProvider,
    IRbacProvider,
    ISession,
)
from iam.ports.tenant_backend import ITenantBackend

__all__ = [
    "IAuthCoreProvider",
    "IIamProvider",
    "IMetadataStore",
    "IMfaProvider",
    "INotificationSender",
    "IRbacProvider",
    "ISession",
    "ITTLCache",
    "ITenantBackend",
]
