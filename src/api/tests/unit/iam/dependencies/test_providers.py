"""Unit tests for provider wiring."""

from unittest.mock import AsyncMock, patch

import pytest

from iam.dependencies import providers
from iam.dependencies.providers import (
    close_tenant_backend,
    get_policy_cache,
    get_provider_bundle,
    get_tenant_backend,
)
from iam.infrastructure.cache import InMemoryTTLCache
from iam.infrastructure.resource_backend import GrpcTenantBackend


@pytest.fixture(autouse=True)
def clear_provider_caches():
    for getter in (get_policy_cache, get_provider_bundle, get_tenant_backend):
        getter.cache_clear()
    yield
    for getter in (get_policy_cache, get_provider_bundle, get_tenant_backend):
        getter.cache_clear()


class TestGetPolicyCache:
    def test_uses_configured_ttl(self, monkeypatch):
        monkeypatch.setenv("GATEHOUSE_AUTHZ_POLICY_CACHE_TTL_SECONDS", "30")

        cache = get_policy_cache()

        assert isinstance(cache, InMemoryTTLCache)
        assert cache.default_ttl == 30


class TestGetProviderBundle:
    def test_unsupported_backend_raises(self):
        with patch.dict(providers._BUNDLE_FACTORIES, clear=True):
            with pytest.raises(ValueError, match="Unsupported identity backend"):
                get_provider_bundle()

    def test_bundle_is_built_once(self):
        sentinel = object()
        factory = lambda cache: sentinel  # noqa: E731

        with patch.dict(providers._BUNDLE_FACTORIES, {"supertokens": factory}):
            assert get_provider_bundle() is sentinel
            assert get_provider_bundle() is sentinel


class TestCloseTenantBackend:
    @pytest.mark.asyncio
    async def test_noop_when_never_opened(self):
        with patch.object(GrpcTenantBackend, "connect") as connect:
            await close_tenant_backend()

        connect.assert_not_called()

    @pytest.mark.asyncio
    async def test_closes_opened_backend(self):
        backend = GrpcTenantBackend.__new__(GrpcTenantBackend)
        backend.close = AsyncMock()

        with patch.object(GrpcTenantBackend, "connect", return_value=backend):
            get_tenant_backend()
            await close_tenant_backend()

        backend.close.assert_awaited_once()
        assert get_tenant_backend.cache_info().currsize == 0
