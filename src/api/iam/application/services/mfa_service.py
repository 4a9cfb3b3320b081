"""MFA application service.

Every change to the caller's MFA flags replaces the session: a new session
carrying the updated trust payload is issued, the old one is revoked and the
new tokens are returned. The trust payload is part of the signed access
token, so the client's copy cannot be changed in place.
"""

from __future__ import annotations

from iam.application.observability import DefaultMfaServiceProbe, MfaServiceProbe
from iam.application.session_gate import protect
from iam.application.value_objects import RequestContext
from iam.domain.entities import TotpDevice
from iam.domain.session_trust import SessionTrustPayload
from iam.domain.value_objects import MfaVerificationResult, SessionTokens
from iam.ports.exceptions import BadRequestError, NotFoundError
from iam.ports.providers import IAuthCoreProvider, IMfaProvider, ISession


class MfaService:
    """Application service for TOTP devices and session elevation."""

    def __init__(
        self,
        mfa_provider: IMfaProvider,
        auth_core_provider: IAuthCoreProvider,
        probe: MfaServiceProbe | None = None,
    ):
        self._mfa = mfa_provider
        self._auth_core = auth_core_provider
        self._probe = probe or DefaultMfaServiceProbe()

    async def _replace_session(
        self, session: ISession, payload: SessionTrustPayload
    ) -> SessionTokens:
        issued = await self._auth_core.create_session(session.user_id, payload)
        await session.revoke()
        return issued.tokens

    @protect(allow_mfa_setup=True, allow_password_change=True)
    async def list_devices(self, ctx: RequestContext) -> list[TotpDevice]:
        """List the caller's devices (name and verified flag only)."""
        session = ctx.require_session()
        devices = await self._mfa.list_devices(session.user_id)
        return [TotpDevice(name=d.name, verified=d.verified) for d in devices]

    @protect(allow_mfa_setup=True, allow_password_change=True)
    async def create_totp_device(self, ctx: RequestContext, device_name: str) -> TotpDevice:
        """Enroll a new, unverified device and return its secret.

        Raises:
            BadRequestError: If the device name is blank
            ConflictError: If the caller already has a device with that name
        """
        session = ctx.require_session()
        device_name = device_name.strip()
        if not device_name:
            raise BadRequestError("Device name is required.")

        device = await self._mfa.create_totp_device(session.user_id, device_name)
        self._probe.with_context(ctx.observation("create_totp_device")).totp_device_created(
            device_name=device.name
        )
        return device

    @protect(allow_mfa_setup=True, allow_password_change=True)
    async def verify_totp_device(
        self, ctx: RequestContext, device_name: str, code: str
    ) -> MfaVerificationResult:
        """Verify a newly enrolled device with its first code.

        On success the session is replaced by one with MFA enabled and
        verified.
        """
        session = ctx.require_session()
        probe = self._probe.with_context(ctx.observation("verify_totp_device"))

        if not await self._mfa.verify_totp_device(session.user_id, device_name, code):
            probe.mfa_code_rejected(device_name=device_name)
            return MfaVerificationResult(verified=False)

        tokens = await self._replace_session(
            session, session.trust_payload.elevated(device_verified=True)
        )
        probe.session_elevated(device_verified=True)
        return MfaVerificationResult(verified=True, tokens=tokens)

    @protect(require_mfa_verification=False, allow_password_change=True)
    async def verify_mfa(self, ctx: RequestContext, code: str) -> MfaVerificationResult:
        """Verify a code from any of the caller's devices and elevate the session."""
        session = ctx.require_session()
        probe = self._probe.with_context(ctx.observation("verify_mfa"))

        if not await self._mfa.verify_code(session.user_id, code):
            probe.mfa_code_rejected(device_name=None)
            return MfaVerificationResult(verified=False)

        tokens = await self._replace_session(
            session, session.trust_payload.elevated(device_verified=False)
        )
        probe.session_elevated(device_verified=False)
        return MfaVerificationResult(verified=True, tokens=tokens)

    @protect()
    async def remove_totp_device(
        self, ctx: RequestContext, device_name: str
    ) -> SessionTokens:
        """Remove a device and reissue the session with recomputed MFA flags.

        ``mfaEnabled`` and ``mfaVerified`` follow the number of verified
        devices left. The returned tokens must replace the caller's current
        ones; the old session is revoked.

        Raises:
            NotFoundError: If the caller has no device with that name
        """
        session = ctx.require_session()
        if not await self._mfa.remove_totp_device(session.user_id, device_name):
            raise NotFoundError("Device not found.")

        devices = await self._mfa.list_devices(session.user_id)
        remaining = sum(1 for device in devices if device.verified)
        tokens = await self._replace_session(
            session, session.trust_payload.with_device_count(remaining)
        )
        self._probe.with_context(ctx.observation("remove_totp_device")).totp_device_removed(
            device_name=device_name, remaining_devices=remaining
        )
        return tokens
