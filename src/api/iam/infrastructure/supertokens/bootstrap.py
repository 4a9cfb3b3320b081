"""Process-wide SuperTokens SDK initialization."""

from __future__ import annotations

from supertokens_python import InputAppInfo, SupertokensConfig, init
from supertokens_python.recipe import (
    emailpassword,
    multitenancy,
    session,
    totp,
    usermetadata,
)

from infrastructure.settings import IdentitySettings


def init_supertokens(settings: IdentitySettings) -> None:
    """Initialize the SDK with every recipe the adapters use.

    Tokens are exchanged in API payloads rather than cookies, so anti-CSRF
    protection is disabled for the session recipe.
    """
    api_key = settings.api_key.get_secret_value() if settings.api_key else None
    init(
        app_info=InputAppInfo(
            app_name=settings.app_name,
            api_domain=settings.api_domain,
            website_domain=settings.website_domain,
        ),
        supertokens_config=SupertokensConfig(
            connection_uri=settings.connection_uri,
            api_key=api_key,
        ),
        framework="fastapi",
        mode="asgi",
        recipe_list=[
            session.init(anti_csrf="NONE"),
            emailpassword.init(),
            usermetadata.init(),
            multitenancy.init(),
            totp.init(),
        ],
    )
