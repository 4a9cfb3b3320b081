"""FastAPI dependencies for the IAM context."""

from iam.dependencies.providers import (
    ProviderBundle,
    get_notification_sender,
    get_policy_cache,
    get_provider_bundle,
    get_tenant_backend,
)
from iam.dependencies.request_context import (
    get_current_session,
    get_request_context,
)
from iam.dependencies.services import (
    get_auth_core_service,
    get_iam_service,
    get_mfa_service,
    get_permission_resolver,
    get_rbac_service,
)

__all__ = [
    "ProviderBundle",
    "get_auth_core_service",
    "get_current_session",
    "get_iam_service",
    "get_mfa_service",
    "get_notification_sender",
    "get_permission_resolver",
    "get_policy_cache",
    "get_provider_bundle",
    "get_rbac_service",
    "get_request_context",
    "get_tenant_backend",
]
