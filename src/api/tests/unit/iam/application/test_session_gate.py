"""Unit tests for the session trust gate decorator."""

from unittest.mock import Mock

import pytest

from iam.application.observability import AuthorizationProbe
from iam.application.session_gate import enforce_session_trust, protect
from iam.application.value_objects import RequestContext
from iam.domain.session_trust import GateOptions, SessionTrustPayload
from iam.ports.exceptions import (
    MfaSetupRequiredError,
    MfaVerifyRequiredError,
    PasswordChangeRequiredError,
    UnauthenticatedError,
)
from tests.unit.iam.fakes import FakeSession


class _Service:
    def __init__(self):
        self.calls = 0

    @protect()
    async def strict(self, ctx: RequestContext) -> str:
        self.calls += 1
        return "ok"

    @protect(require_mfa_verification=False, allow_mfa_setup=True)
    async def lenient(self, ctx: RequestContext) -> str:
        self.calls += 1
        return "ok"

    @protect(allow_password_change=True)
    async def change_password(self, ctx: RequestContext, password: str) -> str:
        self.calls += 1
        return password


def _ctx(payload=None, global_mfa_enforced=False, with_session=True):
    return RequestContext(
        session=FakeSession(payload=payload) if with_session else None,
        tenant_id="tenant-1",
        global_mfa_enforced=global_mfa_enforced,
    )


class TestProtect:
    """Tests for @protect()."""

    @pytest.mark.asyncio
    async def test_trusted_session_runs_method(self):
        service = _Service()

        assert await service.strict(_ctx()) == "ok"
        assert service.calls == 1

    @pytest.mark.asyncio
    async def test_missing_session_is_unauthenticated(self):
        service = _Service()

        with pytest.raises(UnauthenticatedError):
            await service.strict(_ctx(with_session=False))
        assert service.calls == 0

    @pytest.mark.asyncio
    async def test_password_change_blocks_before_body(self):
        service = _Service()
        ctx = _ctx(SessionTrustPayload(requires_password_change=True))

        with pytest.raises(PasswordChangeRequiredError):
            await service.strict(ctx)
        assert service.calls == 0

    @pytest.mark.asyncio
    async def test_password_change_operation_is_allowed(self):
        service = _Service()
        ctx = _ctx(SessionTrustPayload(requires_password_change=True))

        assert await service.change_password(ctx, "secret") == "secret"

    @pytest.mark.asyncio
    async def test_ctx_passed_by_keyword(self):
        service = _Service()

        assert await service.change_password(ctx=_ctx(), password="pw") == "pw"

    @pytest.mark.asyncio
    async def test_mfa_setup_required(self):
        service = _Service()

        with pytest.raises(MfaSetupRequiredError):
            await service.strict(_ctx(SessionTrustPayload(mfa_enforced=True)))

    @pytest.mark.asyncio
    async def test_global_enforcement_applies(self):
        service = _Service()

        with pytest.raises(MfaSetupRequiredError):
            await service.strict(_ctx(global_mfa_enforced=True))

    @pytest.mark.asyncio
    async def test_mfa_verification_required(self):
        service = _Service()

        with pytest.raises(MfaVerifyRequiredError):
            await service.strict(_ctx(SessionTrustPayload(mfa_enabled=True)))

    @pytest.mark.asyncio
    async def test_lenient_options_let_unverified_session_through(self):
        service = _Service()

        assert await service.lenient(_ctx(SessionTrustPayload(mfa_enabled=True))) == "ok"
        assert await service.lenient(_ctx(SessionTrustPayload(mfa_enforced=True))) == "ok"

    def test_gate_options_are_exposed(self):
        assert _Service.lenient.gate_options == GateOptions(
            require_mfa_verification=False, allow_mfa_setup=True
        )

    def test_method_without_ctx_is_rejected(self):
        with pytest.raises(TypeError, match="ctx"):

            @protect()
            async def no_context(self, user_id: str) -> None:
                return None


class TestEnforceSessionTrust:
    """Tests for enforce_session_trust()."""

    def test_returns_trusted_session(self):
        ctx = _ctx()

        assert enforce_session_trust(ctx, GateOptions()) is ctx.session

    def test_none_context_is_unauthenticated(self):
        with pytest.raises(UnauthenticatedError):
            enforce_session_trust(None, GateOptions())

    def test_context_without_session_is_unauthenticated_under_global_mfa(self):
        probe = Mock(spec=AuthorizationProbe)
        probe.with_context.return_value = probe
        ctx = _ctx(with_session=False, global_mfa_enforced=True)

        with pytest.raises(UnauthenticatedError):
            enforce_session_trust(ctx, GateOptions(), probe)

        probe.session_rejected.assert_called_once_with(state="no_session")

    def test_rejection_is_reported_to_probe(self):
        probe = Mock(spec=AuthorizationProbe)
        probe.with_context.return_value = probe

        with pytest.raises(MfaVerifyRequiredError):
            enforce_session_trust(
                _ctx(SessionTrustPayload(mfa_enabled=True)), GateOptions(), probe
            )

        probe.session_rejected.assert_called_once_with(state="mfa_verify_required")
