"""Unit tests for MfaService."""

from unittest.mock import AsyncMock

import pytest

from iam.application.services import MfaService
from iam.domain.entities import TotpDevice
from iam.domain.session_trust import (
    GateOptions,
    SessionTrustPayload,
    evaluate_session_trust,
)
from iam.domain.value_objects import SessionTokens, SessionTrustState
from iam.ports.exceptions import BadRequestError, MfaVerifyRequiredError, NotFoundError
from tests.unit.iam.fakes import FakeSession


@pytest.fixture
def mfa_service(mock_mfa, mock_auth_core):
    """Create MfaService with mocked dependencies."""
    return MfaService(mfa_provider=mock_mfa, auth_core_provider=mock_auth_core)


class TestDeviceEnrollment:
    """Tests for device listing and creation."""

    @pytest.mark.asyncio
    async def test_list_devices_hides_secrets(self, mfa_service, make_ctx, mock_mfa):
        mock_mfa.list_devices = AsyncMock(
            return_value=[TotpDevice(name="phone", verified=True, secret="s")]
        )

        devices = await mfa_service.list_devices(make_ctx())

        assert devices == [TotpDevice(name="phone", verified=True)]

    @pytest.mark.asyncio
    async def test_setup_allowed_when_enforced_without_device(
        self, mfa_service, make_ctx, mock_mfa
    ):
        session = FakeSession(
            payload=SessionTrustPayload(mfa_enforced=True, requires_password_change=True)
        )
        device = TotpDevice(name="phone", secret="abc", qr_code="otpauth://x")
        mock_mfa.create_totp_device = AsyncMock(return_value=device)

        result = await mfa_service.create_totp_device(
            make_ctx(session_override=session), "phone"
        )

        assert result is device
        mock_mfa.create_totp_device.assert_awaited_once_with("user-1", "phone")

    @pytest.mark.asyncio
    async def test_blank_device_name(self, mfa_service, make_ctx):
        with pytest.raises(BadRequestError):
            await mfa_service.create_totp_device(make_ctx(), "  ")


class TestVerification:
    """Tests for session elevation."""

    @pytest.mark.asyncio
    async def test_device_verification_elevates_session(
        self, mfa_service, make_ctx, mock_mfa, mock_auth_core
    ):
        session = FakeSession(payload=SessionTrustPayload(mfa_enforced=True))
        mock_mfa.verify_totp_device = AsyncMock(return_value=True)

        result = await mfa_service.verify_totp_device(
            make_ctx(session_override=session), "phone", "123456"
        )

        assert result.verified
        assert result.tokens.access_token == "new-access"
        assert session.revoked
        mock_auth_core.create_session.assert_awaited_once_with(
            "user-1",
            SessionTrustPayload(mfa_enforced=True, mfa_enabled=True, mfa_verified=True),
        )

    @pytest.mark.asyncio
    async def test_wrong_device_code(self, mfa_service, make_ctx, session, mock_mfa, mock_auth_core):
        mock_mfa.verify_totp_device = AsyncMock(return_value=False)

        result = await mfa_service.verify_totp_device(make_ctx(), "phone", "000000")

        assert not result.verified
        assert result.tokens is None
        assert not session.revoked
        mock_auth_core.create_session.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_verify_mfa_allowed_for_unverified_session(
        self, mfa_service, make_ctx, mock_mfa, mock_auth_core
    ):
        session = FakeSession(payload=SessionTrustPayload(mfa_enabled=True))
        mock_mfa.verify_code = AsyncMock(return_value=True)

        result = await mfa_service.verify_mfa(
            make_ctx(session_override=session), "123456"
        )

        assert result.verified
        payload = mock_auth_core.create_session.await_args.args[1]
        assert payload.mfa_verified and payload.mfa_enabled

    @pytest.mark.asyncio
    async def test_wrong_mfa_code(self, mfa_service, make_ctx, mock_mfa):
        mock_mfa.verify_code = AsyncMock(return_value=False)

        result = await mfa_service.verify_mfa(make_ctx(), "000000")

        assert not result.verified


class TestRemoveTotpDevice:
    """Tests for MfaService.remove_totp_device()."""

    @pytest.mark.asyncio
    async def test_removing_last_device_reissues_session_without_mfa(
        self, mfa_service, make_ctx, mock_mfa, mock_auth_core
    ):
        session = FakeSession(
            payload=SessionTrustPayload(
                mfa_enforced=True, mfa_enabled=True, mfa_verified=True
            )
        )
        mock_mfa.remove_totp_device = AsyncMock(return_value=True)
        mock_mfa.list_devices = AsyncMock(
            return_value=[TotpDevice(name="unfinished", verified=False)]
        )

        tokens = await mfa_service.remove_totp_device(
            make_ctx(session_override=session), "phone"
        )

        assert tokens == SessionTokens(
            access_token="new-access", refresh_token="new-refresh"
        )
        assert session.revoked
        mock_auth_core.create_session.assert_awaited_once_with(
            "user-1", SessionTrustPayload(mfa_enforced=True)
        )

    @pytest.mark.asyncio
    async def test_reissued_session_must_set_up_mfa_again(
        self, mfa_service, make_ctx, mock_mfa, mock_auth_core
    ):
        session = FakeSession(
            payload=SessionTrustPayload(
                mfa_enforced=True, mfa_enabled=True, mfa_verified=True
            )
        )
        mock_mfa.remove_totp_device = AsyncMock(return_value=True)
        mock_mfa.list_devices = AsyncMock(return_value=[])

        await mfa_service.remove_totp_device(make_ctx(session_override=session), "phone")

        issued_payload = mock_auth_core.create_session.await_args.args[1]
        assert (
            evaluate_session_trust(issued_payload, GateOptions())
            == SessionTrustState.MFA_SETUP_REQUIRED
        )

    @pytest.mark.asyncio
    async def test_remaining_device_keeps_mfa(
        self, mfa_service, make_ctx, mock_mfa, mock_auth_core
    ):
        session = FakeSession(
            payload=SessionTrustPayload(mfa_enabled=True, mfa_verified=True)
        )
        mock_mfa.remove_totp_device = AsyncMock(return_value=True)
        mock_mfa.list_devices = AsyncMock(
            return_value=[TotpDevice(name="tablet", verified=True)]
        )

        await mfa_service.remove_totp_device(make_ctx(session_override=session), "phone")

        issued_payload = mock_auth_core.create_session.await_args.args[1]
        assert issued_payload.mfa_enabled
        assert issued_payload.mfa_verified

    @pytest.mark.asyncio
    async def test_unknown_device(self, mfa_service, make_ctx, mock_mfa):
        mock_mfa.remove_totp_device = AsyncMock(return_value=False)

        with pytest.raises(NotFoundError):
            await mfa_service.remove_totp_device(make_ctx(), "ghost")

    @pytest.mark.asyncio
    async def test_requires_verified_session(self, mfa_service, make_ctx, mock_mfa):
        session = FakeSession(payload=SessionTrustPayload(mfa_enabled=True))
        mock_mfa.remove_totp_device = AsyncMock()

        with pytest.raises(MfaVerifyRequiredError):
            await mfa_service.remove_totp_device(
                make_ctx(session_override=session), "phone"
            )

        mock_mfa.remove_totp_device.assert_not_awaited()
