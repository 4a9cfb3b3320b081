"""Provider wiring for the identity and resource backends.

The identity backend is chosen once per process from
``GATEHOUSE_IDENTITY_BACKEND``; everything above this module sees only the
provider protocols.
"""

from dataclasses import dataclass
from functools import lru_cache

from iam.infrastructure.cache import InMemoryTTLCache
from iam.infrastructure.notifications import LoggingNotificationSender
from iam.infrastructure.resource_backend import GrpcTenantBackend
from iam.ports import (
    IAuthCoreProvider,
    IIamProvider,
    IMfaProvider,
    INotificationSender,
    IRbacProvider,
    ITenantBackend,
    ITTLCache,
)
from infrastructure.settings import (
    get_authorization_settings,
    get_identity_settings,
    get_resource_backend_settings,
)


@dataclass(frozen=True)
class ProviderBundle:
    """The four identity-backend providers of one adapter set."""

    auth_core: IAuthCoreProvider
    iam: IIamProvider
    rbac: IRbacProvider
    mfa: IMfaProvider


def _build_supertokens_bundle(cache: ITTLCache) -> ProviderBundle:
    from iam.infrastructure.supertokens.auth_core_provider import (
        SuperTokensAuthCoreProvider,
    )
    from iam.infrastructure.supertokens.iam_provider import SuperTokensIamProvider
    from iam.infrastructure.supertokens.metadata_store import SuperTokensMetadataStore
    from iam.infrastructure.supertokens.mfa_provider import SuperTokensMfaProvider
    from iam.infrastructure.supertokens.rbac_provider import SuperTokensRbacProvider

    store = SuperTokensMetadataStore()
    return ProviderBundle(
        auth_core=SuperTokensAuthCoreProvider(store),
        iam=SuperTokensIamProvider(store),
        rbac=SuperTokensRbacProvider(store, cache),
        mfa=SuperTokensMfaProvider(),
    )


_BUNDLE_FACTORIES = {
    "supertokens": _build_supertokens_bundle,
}


@lru_cache
def get_policy_cache() -> ITTLCache:
    """Get the process-wide cache for role lists and policies."""
    ttl = get_authorization_settings().policy_cache_ttl_seconds
    return InMemoryTTLCache(default_ttl=ttl)


@lru_cache
def get_provider_bundle() -> ProviderBundle:
    """Get the provider set for the configured identity backend.

    Raises:
        ValueError: If the configured backend has no adapter set
    """
    backend = get_identity_settings().backend
    factory = _BUNDLE_FACTORIES.get(backend)
    if factory is None:
        raise ValueError(f"Unsupported identity backend: {backend}")
    return factory(get_policy_cache())


@lru_cache
def get_tenant_backend() -> ITenantBackend:
    """Get the cached resource backend client."""
    settings = get_resource_backend_settings()
    return GrpcTenantBackend.connect(
        settings.address,
        service_name=settings.service_name,
        timeout=settings.timeout_seconds,
    )


async def close_tenant_backend() -> None:
    """Close the resource backend channel if one was opened."""
    if get_tenant_backend.cache_info().currsize == 0:
        return
    backend = get_tenant_backend()
    if isinstance(backend, GrpcTenantBackend):
        await backend.close()
    get_tenant_backend.cache_clear()


@lru_cache
def get_notification_sender() -> INotificationSender:
    return LoggingNotificationSender()
