"""TOTP provider over the SuperTokens totp recipe."""

from __future__ import annotations

from supertokens_python.recipe.totp.asyncio import (
    create_device,
    list_devices,
    remove_device,
    verify_device,
    verify_totp,
)

from iam.domain.entities import TotpDevice
from iam.domain.value_objects import PUBLIC_TENANT_ID
from iam.infrastructure.observability import (
    DefaultIdentityBackendProbe,
    IdentityBackendProbe,
)
from iam.ports.exceptions import (
    BadRequestError,
    ConflictError,
    IdentityBackendError,
    NotFoundError,
)

_OK = "OK"
_INVALID_TOTP = "INVALID_TOTP_ERROR"
_LIMIT_REACHED = "LIMIT_REACHED_ERROR"
_UNKNOWN_DEVICE = "UNKNOWN_DEVICE_ERROR"
_UNKNOWN_USER = "UNKNOWN_USER_ID_ERROR"
_DEVICE_EXISTS = "DEVICE_ALREADY_EXISTS_ERROR"


class SuperTokensMfaProvider:
    """IMfaProvider implementation for SuperTokens.

    Recipe results are told apart by their ``status`` string.
    """

    def __init__(self, probe: IdentityBackendProbe | None = None):
        self._probe = probe or DefaultIdentityBackendProbe()

    def _check_code_result(self, operation: str, status: str) -> bool:
        if status == _OK:
            return True
        if status in (_INVALID_TOTP, _UNKNOWN_USER):
            return False
        if status == _UNKNOWN_DEVICE:
            raise NotFoundError("Device not found.")
        if status == _LIMIT_REACHED:
            raise BadRequestError("Too many invalid codes. Please try again later.")
        self._probe.unexpected_response(operation, status)
        raise IdentityBackendError("TOTP verification failed.")

    async def create_totp_device(self, user_id: str, device_name: str) -> TotpDevice:
        result = await create_device(user_id, device_name=device_name)
        if result.status == _DEVICE_EXISTS:
            raise ConflictError("Device name already exists.")
        if result.status == _UNKNOWN_USER:
            raise NotFoundError("User not found.")
        if result.status != _OK:
            self._probe.unexpected_response("create_device", result.status)
            raise IdentityBackendError("Failed to create TOTP device.")

        return TotpDevice(
            name=result.device_name,
            verified=False,
            secret=result.secret,
            qr_code=result.qr_code_string,
        )

    async def verify_totp_device(
        self, user_id: str, device_name: str, code: str
    ) -> bool:
        result = await verify_device(PUBLIC_TENANT_ID, user_id, device_name, code)
        return self._check_code_result("verify_device", result.status)

    async def verify_code(self, user_id: str, code: str) -> bool:
        result = await verify_totp(PUBLIC_TENANT_ID, user_id, code)
        return self._check_code_result("verify_totp", result.status)

    async def remove_totp_device(self, user_id: str, device_name: str) -> bool:
        result = await remove_device(user_id, device_name)
        return bool(result.did_device_exist)

    async def list_devices(self, user_id: str) -> list[TotpDevice]:
        result = await list_devices(user_id)
        return [
            TotpDevice(name=device.name, verified=bool(device.verified))
            for device in result.devices
        ]
