"""Domain-Oriented Observability for IAM application layer.

Probes for application service operations following Domain-Oriented Observability patterns.
"""

from iam.application.observability.auth_core_service_probe import (
    AuthCoreServiceProbe,
    DefaultAuthCoreServiceProbe,
)
from iam.application.observability.authorization_probe import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)
from iam.application.observability.iam_service_probe import (
    DefaultIamServiceProbe,
    IamServiceProbe,
)
from iam.application.observability.mfa_service_probe import (
    DefaultMfaServiceProbe,
    MfaServiceProbe,
)
from iam.application.observability.rbac_service_probe import (
    DefaultRbacServiceProbe,
    RbacServiceProbe,
)

__all__ = [
    "AuthCoreServiceProbe",
    "DefaultAuthCoreServiceProbe",
    "AuthorizationProbe",
    "DefaultAuthorizationProbe",
    "IamServiceProbe",
    "DefaultIamServiceProbe",
    "MfaServiceProbe",
    "DefaultMfaServiceProbe",
    "RbacServiceProbe",
    "DefaultRbacServiceProbe",
]
