"""RBAC provider over the identity backend's metadata store.

Role lists and policies are read through an injected TTL cache. Every
write evicts the affected keys before returning, so a process never reads
its own stale data; other processes converge within the cache TTL.
"""

from __future__ import annotations

from iam.domain.policy import RolePolicy
from iam.infrastructure.observability import (
    DefaultRbacProviderProbe,
    RbacProviderProbe,
)
from iam.infrastructure.supertokens.metadata_keys import (
    POLICY_FIELD,
    ROLES_FIELD,
    TENANT_ROLES_FIELD,
    policy_key,
    roles_list_key,
)
from iam.ports.policy_store import IMetadataStore, ITTLCache


class SuperTokensRbacProvider:
    """IRbacProvider implementation storing roles and policies as metadata."""

    def __init__(
        self,
        metadata_store: IMetadataStore,
        cache: ITTLCache,
        probe: RbacProviderProbe | None = None,
    ):
        """Initialize the provider.

        Args:
            metadata_store: Key/value store holding assignments and policies
            cache: Cache for role lists and policies
            probe: Optional domain probe for observability
        """
        self._store = metadata_store
        self._cache = cache
        self._probe = probe or DefaultRbacProviderProbe()

    def _invalidate(self, key: str) -> None:
        self._cache.delete(key)
        self._probe.cache_invalidated(key=key)

    # --- Assignments ---

    async def get_user_role_in_tenant(self, user_id: str, tenant_id: str) -> str | None:
        metadata = await self._store.get(user_id)
        assignments = metadata.get(TENANT_ROLES_FIELD) or {}
        return assignments.get(tenant_id) or None

    async def assign_role_to_user(
        self, user_id: str, tenant_id: str, role_name: str
    ) -> None:
        metadata = await self._store.get(user_id)
        assignments = dict(metadata.get(TENANT_ROLES_FIELD) or {})
        assignments[tenant_id] = role_name
        await self._store.update(user_id, {TENANT_ROLES_FIELD: assignments})

    async def remove_user_role(self, user_id: str, tenant_id: str) -> None:
        metadata = await self._store.get(user_id)
        assignments = dict(metadata.get(TENANT_ROLES_FIELD) or {})
        if tenant_id not in assignments:
            return
        del assignments[tenant_id]
        await self._store.update(user_id, {TENANT_ROLES_FIELD: assignments})

    # --- Roles and policies ---

    async def list_tenant_roles(self, tenant_id: str) -> list[str]:
        key = roles_list_key(tenant_id)
        cached = self._cache.get(key)
        if cached is not None:
            self._probe.cache_hit(key=key)
            return list(cached)

        self._probe.cache_miss(key=key)
        metadata = await self._store.get(key)
        roles = tuple(metadata.get(ROLES_FIELD) or ())
        self._cache.set(key, roles)
        return list(roles)

    async def get_role_policy(self, tenant_id: str, role_name: str) -> RolePolicy | None:
        """Return the stored policy.

        A document that cannot be parsed is reported and treated as absent,
        which denies every access through that role.
        """
        key = policy_key(tenant_id, role_name)
        cached = self._cache.get(key)
        if cached is not None:
            self._probe.cache_hit(key=key)
            return cached

        self._probe.cache_miss(key=key)
        metadata = await self._store.get(key)
        document = metadata.get(POLICY_FIELD)
        if not document:
            return None

        try:
            policy = RolePolicy.from_dict(document)
        except (ValueError, TypeError) as e:
            self._probe.malformed_policy(key=key, error=str(e))
            return None

        self._cache.set(key, policy)
        return policy

    async def set_role_policy(
        self, tenant_id: str, role_name: str, policy: RolePolicy
    ) -> None:
        key = policy_key(tenant_id, role_name)
        await self._store.update(key, {POLICY_FIELD: policy.to_dict()})
        self._invalidate(key)

        list_key = roles_list_key(tenant_id)
        metadata = await self._store.get(list_key)
        roles = list(metadata.get(ROLES_FIELD) or [])
        if role_name not in roles:
            await self._store.update(list_key, {ROLES_FIELD: [*roles, role_name]})
        self._invalidate(list_key)

    async def delete_role_policy(self, tenant_id: str, role_name: str) -> None:
        key = policy_key(tenant_id, role_name)
        await self._store.update(key, {POLICY_FIELD: None})
        self._invalidate(key)

        list_key = roles_list_key(tenant_id)
        metadata = await self._store.get(list_key)
        roles = list(metadata.get(ROLES_FIELD) or [])
        remaining = [role for role in roles if role != role_name]
        if len(remaining) != len(roles):
            await self._store.update(list_key, {ROLES_FIELD: remaining})
        self._invalidate(list_key)
