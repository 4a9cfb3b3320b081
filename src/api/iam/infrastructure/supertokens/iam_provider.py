"""User, tenant-membership and invitation provider over SuperTokens."""

from __future__ import annotations

import asyncio
import weakref

from supertokens_python.asyncio import (
    get_user,
    get_users_newest_first,
    list_users_by_account_info,
)
from supertokens_python.recipe.emailpassword.asyncio import (
    sign_in,
    sign_up,
    update_email_or_password,
)
from supertokens_python.recipe.emailpassword.interfaces import (
    EmailAlreadyExistsError,
    SignInOkResult,
    SignUpOkResult,
    UpdateEmailOrPasswordOkResult,
)
from supertokens_python.recipe.multitenancy.asyncio import (
    associate_user_to_tenant,
    create_or_update_tenant,
    delete_tenant,
    disassociate_user_from_tenant,
)
from supertokens_python.types import AccountInfo, RecipeUserId

from iam.domain.entities import PendingInvite, User, UserPage, UserUpdate
from iam.domain.value_objects import PUBLIC_TENANT_ID
from iam.infrastructure.observability import (
    DefaultIdentityBackendProbe,
    IdentityBackendProbe,
)
from iam.infrastructure.supertokens.mapping import to_domain_user
from iam.infrastructure.supertokens.metadata_keys import (
    PENDING_INVITES_FIELD,
    PROFILE_FIELD,
)
from iam.ports.exceptions import (
    BadRequestError,
    ConflictError,
    IdentityBackendError,
    InvalidCredentialsError,
    NotFoundError,
)
from iam.ports.policy_store import IMetadataStore


class SuperTokensIamProvider:
    """IIamProvider implementation for SuperTokens.

    Profiles and pending invites live in the user's metadata document.
    Pending-invite reads and writes for one user are serialized with a
    per-user lock so a token is consumed at most once. The lock is
    in-process only; it does not serialize consumers in other processes.
    """

    def __init__(
        self,
        metadata_store: IMetadataStore,
        probe: IdentityBackendProbe | None = None,
    ):
        self._store = metadata_store
        self._probe = probe or DefaultIdentityBackendProbe()
        self._invite_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    # --- Users ---

    async def get_user(self, user_id: str) -> User | None:
        st_user = await get_user(user_id)
        if st_user is None:
            return None
        metadata = await self._store.get(user_id)
        return to_domain_user(st_user, metadata)

    async def get_user_by_email(self, email: str) -> User | None:
        users = await list_users_by_account_info(
            PUBLIC_TENANT_ID, AccountInfo(email=email)
        )
        if not users:
            return None
        return await self.get_user(users[0].id)

    async def create_user(self, email: str, password: str) -> User:
        result = await sign_up(PUBLIC_TENANT_ID, email, password)
        if isinstance(result, EmailAlreadyExistsError):
            raise ConflictError("Email already exists.")
        if not isinstance(result, SignUpOkResult):
            self._probe.unexpected_response("sign_up", type(result).__name__)
            raise IdentityBackendError("Failed to create user.")
        return to_domain_user(result.user)

    async def update_user(self, user_id: str, changes: UserUpdate) -> User:
        current = await self.get_user(user_id)
        if current is None:
            raise NotFoundError("User not found.")
        recipe_user_id = RecipeUserId(user_id)

        if changes.password:
            if not changes.current_password:
                raise BadRequestError(
                    "Current password is required to set a new password."
                )
            check = await sign_in(PUBLIC_TENANT_ID, current.email, changes.current_password)
            if not isinstance(check, SignInOkResult):
                raise InvalidCredentialsError("Invalid current password.")
            result = await update_email_or_password(
                recipe_user_id, password=changes.password
            )
            self._raise_for_update(result)

        if changes.email and changes.email != current.email:
            result = await update_email_or_password(recipe_user_id, email=changes.email)
            self._raise_for_update(result)

        profile_changes = changes.profile.to_metadata()
        if profile_changes:
            profile = current.profile.merged_with(changes.profile)
            await self._store.update(user_id, {PROFILE_FIELD: profile.to_metadata()})

        updated = await self.get_user(user_id)
        if updated is None:
            raise NotFoundError("User not found.")
        return updated

    def _raise_for_update(self, result: object) -> None:
        if isinstance(result, UpdateEmailOrPasswordOkResult):
            return
        if isinstance(result, EmailAlreadyExistsError):
            raise ConflictError("Email already exists.")
        reason = getattr(result, "failure_reason", None)
        if reason:
            raise BadRequestError(reason)
        self._probe.unexpected_response("update_email_or_password", type(result).__name__)
        raise IdentityBackendError("Failed to update user.")

    # --- Tenants ---

    async def register_tenant(self, tenant_id: str) -> None:
        await create_or_update_tenant(tenant_id, None)

    async def unregister_tenant(self, tenant_id: str) -> None:
        await delete_tenant(tenant_id)

    async def associate_user_to_tenant(self, user_id: str, tenant_id: str) -> None:
        await associate_user_to_tenant(tenant_id, RecipeUserId(user_id))

    async def disassociate_user_from_tenant(self, user_id: str, tenant_id: str) -> None:
        await disassociate_user_from_tenant(tenant_id, RecipeUserId(user_id))

    async def list_tenant_users(
        self,
        tenant_id: str,
        limit: int = 10,
        pagination_token: str | None = None,
    ) -> UserPage:
        response = await get_users_newest_first(
            tenant_id, limit=limit, pagination_token=pagination_token or None
        )
        metadata = await asyncio.gather(
            *(self._store.get(st_user.id) for st_user in response.users)
        )
        return UserPage(
            users=[
                to_domain_user(st_user, meta)
                for st_user, meta in zip(response.users, metadata)
            ],
            next_pagination_token=response.next_pagination_token,
        )

    # --- Invites ---

    def _invite_lock(self, user_id: str) -> asyncio.Lock:
        lock = self._invite_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._invite_locks[user_id] = lock
        return lock

    async def add_pending_invite(
        self, user_id: str, token: str, invite: PendingInvite
    ) -> None:
        async with self._invite_lock(user_id):
            metadata = await self._store.get(user_id)
            invites = dict(metadata.get(PENDING_INVITES_FIELD) or {})
            invites[token] = invite.to_metadata()
            await self._store.update(user_id, {PENDING_INVITES_FIELD: invites})

    async def consume_pending_invite(
        self, user_id: str, token: str
    ) -> PendingInvite | None:
        async with self._invite_lock(user_id):
            metadata = await self._store.get(user_id)
            invites = dict(metadata.get(PENDING_INVITES_FIELD) or {})
            stored = invites.pop(token, None)
            if stored is None:
                return None

            await self._store.update(user_id, {PENDING_INVITES_FIELD: invites})
        return PendingInvite.from_metadata(stored)
