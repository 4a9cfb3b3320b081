"""Per-request resolution of the caller's session, tenant and permissions."""

from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from iam.application.authorization import PermissionResolver
from iam.application.value_objects import RequestContext
from iam.dependencies.providers import ProviderBundle, get_provider_bundle
from iam.dependencies.services import get_permission_resolver
from iam.ports import ISession

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_session(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
    providers: Annotated[ProviderBundle, Depends(get_provider_bundle)],
) -> ISession | None:
    """Validate the bearer access token, if any.

    A missing, expired or invalid token yields None; operations that need a
    session reject the request when the context is built without one.
    """
    if credentials is None or not credentials.credentials:
        return None
    return await providers.auth_core.get_session(credentials.credentials)


async def get_request_context(
    session: Annotated[ISession | None, Depends(get_current_session)],
    resolver: Annotated[PermissionResolver, Depends(get_permission_resolver)],
    x_tenant_id: Annotated[str | None, Header(alias="X-Tenant-ID")] = None,
    x_request_id: Annotated[str | None, Header(alias="X-Request-ID")] = None,
) -> RequestContext:
    """Build the RequestContext handed to every service call.

    The role and policy are resolved from the session's user and the
    ``X-Tenant-ID`` header; without either, permissions stay unset.
    """
    return await resolver.resolve(session, x_tenant_id, request_id=x_request_id)
