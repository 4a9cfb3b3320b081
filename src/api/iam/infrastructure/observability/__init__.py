"""Domain-Oriented Observability for IAM infrastructure.

Probes for identity and resource backend adapters following
Domain-Oriented Observability patterns.
"""

from iam.infrastructure.observability.identity_backend_probe import (
    DefaultIdentityBackendProbe,
    DefaultRbacProviderProbe,
    IdentityBackendProbe,
    RbacProviderProbe,
)
from iam.infrastructure.observability.resource_backend_probe import (
    DefaultResourceBackendProbe,
    ResourceBackendProbe,
)

__all__ = [
    "IdentityBackendProbe",
    "DefaultIdentityBackendProbe",
    "RbacProviderProbe",
    "DefaultRbacProviderProbe",
    "ResourceBackendProbe",
    "DefaultResourceBackendProbe",
]
