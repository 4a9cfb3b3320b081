"""Pydantic models for TOTP device management."""

from __future__ import annotations

from pydantic import BaseModel, Field

from iam.domain.entities import TotpDevice
from iam.domain.value_objects import MfaVerificationResult
from iam.presentation.models import TokensResponse


class TotpDeviceResponse(BaseModel):
    """An enrolled TOTP device.

    ``secret`` and ``qr_code`` are only returned when the device is created.
    """

    name: str
    verified: bool
    secret: str | None = None
    qr_code: str | None = None

    @classmethod
    def from_domain(cls, device: TotpDevice) -> TotpDeviceResponse:
        return cls(
            name=device.name,
            verified=device.verified,
            secret=device.secret,
            qr_code=device.qr_code,
        )


class CreateDeviceRequest(BaseModel):
    device_name: str = Field(..., min_length=1, max_length=100)


class TotpCodeRequest(BaseModel):
    code: str = Field(..., min_length=1, description="Current TOTP code")


class MfaVerificationResponse(BaseModel):
    """Outcome of a TOTP check, with replacement tokens when elevated."""

    verified: bool
    tokens: TokensResponse | None = None

    @classmethod
    def from_domain(cls, result: MfaVerificationResult) -> MfaVerificationResponse:
        return cls(
            verified=result.verified,
            tokens=TokensResponse.from_domain(result.tokens) if result.tokens else None,
        )
