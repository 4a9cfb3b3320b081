"""Credential and session provider over SuperTokens.

Sessions are created and refreshed without an HTTP request/response pair:
tokens are handed back to the caller as values and travel in the API
payload rather than in cookies.
"""

from __future__ import annotations

from supertokens_python.asyncio import get_user
from supertokens_python.recipe.emailpassword.asyncio import (
    create_reset_password_token,
    reset_password_using_token,
    sign_in,
)
from supertokens_python.recipe.emailpassword.interfaces import (
    CreateResetPasswordOkResult,
    SignInOkResult,
    UpdateEmailOrPasswordOkResult,
)
from supertokens_python.recipe.session.asyncio import (
    create_new_session_without_request_response,
    get_session_without_request_response,
    refresh_session_without_request_response,
    revoke_all_sessions_for_user,
)
from supertokens_python.recipe.session.exceptions import (
    SuperTokensSessionError,
    TokenTheftError,
)
from supertokens_python.types import RecipeUserId

from iam.domain.entities import User
from iam.domain.session_trust import SessionTrustPayload
from iam.domain.value_objects import PUBLIC_TENANT_ID, IssuedSession, SessionTokens
from iam.infrastructure.observability import (
    DefaultIdentityBackendProbe,
    IdentityBackendProbe,
)
from iam.infrastructure.supertokens.mapping import to_domain_user, to_session_tokens
from iam.infrastructure.supertokens.metadata_keys import (
    REQUIRES_PASSWORD_CHANGE_FIELD,
)
from iam.infrastructure.supertokens.session import SuperTokensSession
from iam.ports.exceptions import (
    IdentityBackendError,
    InvalidCredentialsError,
    SessionRefreshFailedError,
    TokenTheftDetectedError,
)
from iam.ports.policy_store import IMetadataStore


class SuperTokensAuthCoreProvider:
    """IAuthCoreProvider implementation for SuperTokens."""

    def __init__(
        self,
        metadata_store: IMetadataStore,
        probe: IdentityBackendProbe | None = None,
    ):
        self._store = metadata_store
        self._probe = probe or DefaultIdentityBackendProbe()

    async def verify_credentials(self, email: str, password: str) -> User:
        result = await sign_in(PUBLIC_TENANT_ID, email, password)
        if not isinstance(result, SignInOkResult):
            raise InvalidCredentialsError()
        return to_domain_user(result.user)

    async def create_session(
        self, user_id: str, payload: SessionTrustPayload
    ) -> IssuedSession:
        try:
            container = await create_new_session_without_request_response(
                PUBLIC_TENANT_ID,
                RecipeUserId(user_id),
                payload.to_claims(),
            )
        except SuperTokensSessionError as e:
            self._probe.unexpected_response("create_session", type(e).__name__)
            raise IdentityBackendError("Failed to create session.") from e

        return IssuedSession(
            tokens=to_session_tokens(container),
            handle=container.get_handle(),
        )

    async def get_session(self, access_token: str) -> SuperTokensSession | None:
        """Validate an access token.

        Expired and invalid tokens both yield None; the client is expected
        to refresh or log in again.
        """
        try:
            container = await get_session_without_request_response(
                access_token, session_required=False
            )
        except SuperTokensSessionError as e:
            self._probe.session_rejected(reason=type(e).__name__)
            return None

        if container is None:
            return None
        return SuperTokensSession(container)

    async def refresh_session(self, refresh_token: str) -> SessionTokens:
        try:
            container = await refresh_session_without_request_response(refresh_token)
        except TokenTheftError as e:
            raise TokenTheftDetectedError(user_id=e.user_id) from e
        except SuperTokensSessionError as e:
            raise SessionRefreshFailedError() from e
        return to_session_tokens(container)

    async def revoke_all_sessions(self, user_id: str) -> None:
        await revoke_all_sessions_for_user(user_id)

    async def create_password_reset_token(self, user_id: str) -> str | None:
        st_user = await get_user(user_id)
        if st_user is None or not st_user.emails:
            return None

        result = await create_reset_password_token(
            PUBLIC_TENANT_ID, user_id, st_user.emails[0]
        )
        if isinstance(result, CreateResetPasswordOkResult):
            return result.token
        return None

    async def reset_password(self, token: str, new_password: str) -> bool:
        result = await reset_password_using_token(PUBLIC_TENANT_ID, token, new_password)
        return isinstance(result, UpdateEmailOrPasswordOkResult)

    async def get_requires_password_change(self, user_id: str) -> bool:
        metadata = await self._store.get(user_id)
        return metadata.get(REQUIRES_PASSWORD_CHANGE_FIELD) is True

    async def set_requires_password_change(self, user_id: str, required: bool) -> None:
        await self._store.update(user_id, {REQUIRES_PASSWORD_CHANGE_FIELD: required})
