"""HTTP routes for tenant roles and their policies."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from iam.application.services import RbacService
from iam.application.value_objects import RequestContext
from iam.dependencies import get_rbac_service, get_request_context
from iam.ports.exceptions import NotFoundError
from iam.presentation.models import RolePolicyModel
from iam.presentation.roles.models import CreateRoleRequest, RoleResponse

router = APIRouter(
    prefix="/roles",
    tags=["roles"],
)


@router.get("")
async def list_roles(
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[RbacService, Depends(get_rbac_service)],
) -> list[RoleResponse]:
    roles = await service.list_roles(ctx)
    return [RoleResponse.from_domain(role) for role in roles]


@router.get("/{role_name}")
async def get_role(
    role_name: str,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[RbacService, Depends(get_rbac_service)],
) -> RolePolicyModel:
    policy = await service.get_role_policy(ctx, role_name)
    if policy is None:
        raise NotFoundError(f"Role '{role_name}' not found.")
    return RolePolicyModel.from_domain(policy)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_role(
    request: CreateRoleRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[RbacService, Depends(get_rbac_service)],
) -> RolePolicyModel:
    """Create a role with its policy.

    Fails with 409 when the role exists and 400 for the admin role or a
    malformed policy.
    """
    policy = await service.create_policy(ctx, request.name, request.policy.to_document())
    return RolePolicyModel.from_domain(policy)


@router.put("/{role_name}")
async def update_role(
    role_name: str,
    request: RolePolicyModel,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[RbacService, Depends(get_rbac_service)],
) -> RolePolicyModel:
    policy = await service.update_policy(ctx, role_name, request.to_document())
    return RolePolicyModel.from_domain(policy)


@router.delete("/{role_name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_name: str,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[RbacService, Depends(get_rbac_service)],
) -> None:
    await service.delete_policy(ctx, role_name)


@router.put("/{role_name}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def assign_role(
    role_name: str,
    user_id: str,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[RbacService, Depends(get_rbac_service)],
) -> None:
    await service.assign_role(ctx, user_id, role_name)
