"""HTTP routes for tenant provisioning, membership and invitations.

``/tenants/current`` operates on the tenant named by the X-Tenant-ID header.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from iam.application.services import IamService
from iam.application.value_objects import RequestContext
from iam.dependencies import get_iam_service, get_request_context
from iam.presentation.models import TenantResponse
from iam.presentation.tenants.models import (
    AcceptedInviteResponse,
    AcceptInviteRequest,
    CreateTenantRequest,
    InviteUserRequest,
    UpdateTenantRequest,
    UserPageResponse,
)

router = APIRouter(
    prefix="/tenants",
    tags=["tenants"],
)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tenant(
    request: CreateTenantRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[IamService, Depends(get_iam_service)],
) -> TenantResponse:
    """Create a tenant owned by the caller.

    The caller becomes its admin. Needs no tenant header. On failure every
    completed step is undone and 500 TENANT_CREATION_FAILED is returned.
    """
    tenant = await service.create_own_tenant(ctx, request.name)
    return TenantResponse.from_domain(tenant)


@router.patch("/current")
async def update_current_tenant(
    request: UpdateTenantRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[IamService, Depends(get_iam_service)],
) -> TenantResponse:
    tenant = await service.update_tenant(ctx, request.name)
    return TenantResponse.from_domain(tenant)


@router.get("/current/users")
async def list_current_tenant_users(
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[IamService, Depends(get_iam_service)],
    limit: Annotated[int, Query()] = 10,
    pagination_token: Annotated[str | None, Query()] = None,
) -> UserPageResponse:
    page = await service.list_tenant_users(ctx, limit, pagination_token)
    return UserPageResponse.from_domain(page)


@router.delete("/current/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_current_tenant_user(
    user_id: str,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[IamService, Depends(get_iam_service)],
) -> None:
    await service.remove_user_from_tenant(ctx, user_id)


@router.post("/current/invites", status_code=status.HTTP_202_ACCEPTED)
async def invite_user(
    request: InviteUserRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[IamService, Depends(get_iam_service)],
) -> None:
    """Invite a user by email.

    Existing users receive an invite link; unknown emails get an account
    with temporary credentials.
    """
    await service.invite_user(ctx, request.email, request.role_name)


@router.post("/invites/accept")
async def accept_invite(
    request: AcceptInviteRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[IamService, Depends(get_iam_service)],
) -> AcceptedInviteResponse:
    invite = await service.accept_invite(ctx, request.token)
    return AcceptedInviteResponse.from_domain(invite)
