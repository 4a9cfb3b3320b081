"""Application services for IAM bounded context.

Application services orchestrate the identity backend providers, the
resource backend and the policy engine to fulfill use cases. They are the
"front door" to the IAM context.
"""

from iam.application.services.auth_core_service import AuthCoreService
from iam.application.services.iam_service import IamService
from iam.application.services.mfa_service import MfaService
from iam.application.services.rbac_service import RbacService

__all__ = [
    "AuthCoreService",
    "IamService",
    "MfaService",
    "RbacService",
]
