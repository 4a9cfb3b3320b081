"""HTTP routes for TOTP enrollment and verification.

A successful verification or a device removal replaces the caller's
session; clients must switch to the returned tokens.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from iam.application.services import MfaService
from iam.application.value_objects import RequestContext
from iam.dependencies import get_mfa_service, get_request_context
from iam.presentation.mfa.models import (
    CreateDeviceRequest,
    MfaVerificationResponse,
    TotpCodeRequest,
    TotpDeviceResponse,
)
from iam.presentation.models import TokensResponse

router = APIRouter(
    prefix="/mfa",
    tags=["mfa"],
)


@router.get("/devices")
async def list_devices(
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[MfaService, Depends(get_mfa_service)],
) -> list[TotpDeviceResponse]:
    devices = await service.list_devices(ctx)
    return [TotpDeviceResponse.from_domain(device) for device in devices]


@router.post("/devices", status_code=status.HTTP_201_CREATED)
async def create_device(
    request: CreateDeviceRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[MfaService, Depends(get_mfa_service)],
) -> TotpDeviceResponse:
    device = await service.create_totp_device(ctx, request.device_name)
    return TotpDeviceResponse.from_domain(device)


@router.post("/devices/{device_name}/verify")
async def verify_device(
    device_name: str,
    request: TotpCodeRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[MfaService, Depends(get_mfa_service)],
) -> MfaVerificationResponse:
    result = await service.verify_totp_device(ctx, device_name, request.code)
    return MfaVerificationResponse.from_domain(result)


@router.delete("/devices/{device_name}")
async def remove_device(
    device_name: str,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[MfaService, Depends(get_mfa_service)],
) -> TokensResponse:
    tokens = await service.remove_totp_device(ctx, device_name)
    return TokensResponse.from_domain(tokens)


@router.post("/verify")
async def verify_mfa(
    request: TotpCodeRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    service: Annotated[MfaService, Depends(get_mfa_service)],
) -> MfaVerificationResponse:
    result = await service.verify_mfa(ctx, request.code)
    return MfaVerificationResponse.from_domain(result)
