"""Shared fixtures for IAM unit tests."""

from unittest.mock import AsyncMock, Mock

import pytest

from iam.application.value_objects import RequestContext
from iam.domain.policy import RolePolicy
from iam.domain.value_objects import IssuedSession, SessionTokens
from iam.ports import (
    IAuthCoreProvider,
    IIamProvider,
    IMfaProvider,
    INotificationSender,
    IRbacProvider,
    ITenantBackend,
)
from tests.unit.iam.fakes import FakeSession


@pytest.fixture
def session():
    """Trusted session for user-1."""
    return FakeSession()


@pytest.fixture
def make_ctx(session):
    """Build a RequestContext around the default session."""

    def _make(
        permissions=None,
        tenant_id: str | None = "tenant-1",
        session_override=None,
        role: str | None = "member",
        global_mfa_enforced: bool = False,
    ) -> RequestContext:
        return RequestContext(
            session=session_override if session_override is not None else session,
            tenant_id=tenant_id,
            role=role,
            permissions=permissions,
            global_mfa_enforced=global_mfa_enforced,
            request_id="req-1",
        )

    return _make


@pytest.fixture
def admin_ctx(make_ctx):
    """Context whose permissions are the root admin policy."""
    return make_ctx(permissions=RolePolicy.root_admin().permissions, role="admin")


@pytest.fixture
def mock_auth_core():
    """Mock IAuthCoreProvider issuing predictable sessions."""
    provider = Mock(spec=IAuthCoreProvider)
    provider.create_session = AsyncMock(
        return_value=IssuedSession(
            tokens=SessionTokens(access_token="new-access", refresh_token="new-refresh"),
            handle="handle-2",
        )
    )
    provider.revoke_all_sessions = AsyncMock()
    provider.set_requires_password_change = AsyncMock()
    provider.get_requires_password_change = AsyncMock(return_value=False)
    return provider


@pytest.fixture
def mock_iam():
    """Mock IIamProvider."""
    return Mock(spec=IIamProvider)


@pytest.fixture
def mock_rbac():
    """Mock IRbacProvider."""
    return Mock(spec=IRbacProvider)


@pytest.fixture
def mock_mfa():
    """Mock IMfaProvider."""
    return Mock(spec=IMfaProvider)


@pytest.fixture
def mock_tenant_backend():
    """Mock ITenantBackend."""
    return Mock(spec=ITenantBackend)


@pytest.fixture
def mock_notifications():
    """Mock INotificationSender."""
    return Mock(spec=INotificationSender)
