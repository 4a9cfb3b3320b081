"""FastAPI dependencies for the orchestration services."""

from typing import Annotated

from fastapi import Depends

from iam.application.authorization import PermissionResolver
from iam.application.services import (
    AuthCoreService,
    IamService,
    MfaService,
    RbacService,
)
from iam.dependencies.providers import (
    ProviderBundle,
    get_notification_sender,
    get_provider_bundle,
    get_tenant_backend,
)
from iam.ports import INotificationSender, ITenantBackend
from infrastructure.settings import (
    AuthorizationSettings,
    IdentitySettings,
    get_authorization_settings,
    get_identity_settings,
)


def get_permission_resolver(
    providers: Annotated[ProviderBundle, Depends(get_provider_bundle)],
    authz_settings: Annotated[
        AuthorizationSettings, Depends(get_authorization_settings)
    ],
) -> PermissionResolver:
    return PermissionResolver(
        providers.rbac,
        global_mfa_enforced=authz_settings.global_mfa_enforced,
    )


def get_auth_core_service(
    providers: Annotated[ProviderBundle, Depends(get_provider_bundle)],
    tenant_backend: Annotated[ITenantBackend, Depends(get_tenant_backend)],
    notifications: Annotated[INotificationSender, Depends(get_notification_sender)],
    identity_settings: Annotated[IdentitySettings, Depends(get_identity_settings)],
) -> AuthCoreService:
    """Get AuthCoreService instance.

    Returns:
        AuthCoreService wired to the configured providers
    """
    return AuthCoreService(
        auth_core_provider=providers.auth_core,
        iam_provider=providers.iam,
        rbac_provider=providers.rbac,
        mfa_provider=providers.mfa,
        tenant_backend=tenant_backend,
        notifications=notifications,
        frontend_url=identity_settings.website_domain,
    )


def get_iam_service(
    providers: Annotated[ProviderBundle, Depends(get_provider_bundle)],
    tenant_backend: Annotated[ITenantBackend, Depends(get_tenant_backend)],
    notifications: Annotated[INotificationSender, Depends(get_notification_sender)],
    identity_settings: Annotated[IdentitySettings, Depends(get_identity_settings)],
) -> IamService:
    """Get IamService instance.

    Returns:
        IamService wired to the configured providers
    """
    return IamService(
        iam_provider=providers.iam,
        auth_core_provider=providers.auth_core,
        rbac_provider=providers.rbac,
        tenant_backend=tenant_backend,
        notifications=notifications,
        frontend_url=identity_settings.website_domain,
    )


def get_rbac_service(
    providers: Annotated[ProviderBundle, Depends(get_provider_bundle)],
) -> RbacService:
    return RbacService(providers.rbac, providers.iam)


def get_mfa_service(
    providers: Annotated[ProviderBundle, Depends(get_provider_bundle)],
) -> MfaService:
    return MfaService(providers.mfa, providers.auth_core)
