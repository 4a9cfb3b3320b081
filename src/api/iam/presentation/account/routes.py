"""HTTP routes for the caller's own account and tenant context."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from iam.application.services import IamService
from iam.application.value_objects import RequestContext
from iam.dependencies import get_iam_service, get_request_context
from iam.presentation.account.models import (
    MyPermissionsResponse,
    UpdateUserRequest,
    UpdateUserResponse,
)
from iam.presentation.models import TenantResponse, UserResponse

router = APIRouter(
    prefix="/me",
    tags=["account"],
)


@router.get("")
async def get_me(
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[IamService, Depends(get_iam_service)],
) -> UserResponse:
    user = await service.get_user(ctx)
    return UserResponse.from_domain(user)


@router.patch("")
async def update_me(
    request: UpdateUserRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[IamService, Depends(get_iam_service)],
) -> UpdateUserResponse:
    """Update credentials or profile.

    After a password change the response carries replacement tokens; the
    tokens used for this request are revoked.
    """
    result = await service.update_user(ctx, request.to_domain())
    return UpdateUserResponse.from_domain(result)


@router.get("/tenants")
async def list_my_tenants(
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[IamService, Depends(get_iam_service)],
) -> list[TenantResponse]:
    tenants = await service.get_tenants(ctx)
    return [TenantResponse.from_domain(tenant) for tenant in tenants]


@router.get("/permissions")
async def get_my_permissions(
    ctx: Annotated[RequestContext, Depends(get_request_context)],
) -> MyPermissionsResponse:
    """Report the permissions resolved for this request.

    Not gated: clients call it to decide what to render, including before
    login or tenant selection.
    """
    return MyPermissionsResponse.from_context(ctx)
