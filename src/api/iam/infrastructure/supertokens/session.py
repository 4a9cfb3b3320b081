"""ISession implementation over a SuperTokens session container."""

from __future__ import annotations

from supertokens_python.recipe.session.interfaces import SessionContainer

from iam.domain.session_trust import SessionTrustPayload


class SuperTokensSession:
    """Wraps a validated session container for one request."""

    def __init__(self, container: SessionContainer):
        self._container = container

    @property
    def user_id(self) -> str:
        return self._container.get_user_id()

    @property
    def handle(self) -> str:
        return self._container.get_handle()

    @property
    def trust_payload(self) -> SessionTrustPayload:
        return SessionTrustPayload.from_claims(
            self._container.get_access_token_payload()
        )

    async def revoke(self) -> None:
        await self._container.revoke_session()
