"""Fixtures for IAM route tests.

Services are replaced with AsyncMocks bound to their classes and the request
context with one built by ``make_ctx``; no backend is contacted.
"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from iam.application.services import AuthCoreService, IamService, MfaService, RbacService
from iam.dependencies import (
    get_auth_core_service,
    get_iam_service,
    get_mfa_service,
    get_rbac_service,
    get_request_context,
)
from iam.domain.entities import Tenant, User
from iam.presentation import register_exception_handlers, router

JOINED = datetime(2025, 1, 2, tzinfo=UTC)


@pytest.fixture
def auth_service() -> AsyncMock:
    return AsyncMock(spec=AuthCoreService)


@pytest.fixture
def iam_service() -> AsyncMock:
    return AsyncMock(spec=IamService)


@pytest.fixture
def rbac_service() -> AsyncMock:
    return AsyncMock(spec=RbacService)


@pytest.fixture
def mfa_service() -> AsyncMock:
    return AsyncMock(spec=MfaService)


@pytest.fixture
def ctx(make_ctx):
    return make_ctx()


@pytest.fixture
def app(ctx, auth_service, iam_service, rbac_service, mfa_service) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    app.dependency_overrides[get_request_context] = lambda: ctx
    app.dependency_overrides[get_auth_core_service] = lambda: auth_service
    app.dependency_overrides[get_iam_service] = lambda: iam_service
    app.dependency_overrides[get_rbac_service] = lambda: rbac_service
    app.dependency_overrides[get_mfa_service] = lambda: mfa_service

    app.include_router(router)
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def user() -> User:
    return User(
        id="user-1",
        email="ada@example.com",
        time_joined=JOINED,
        tenant_ids=("public", "tenant-1"),
    )


@pytest.fixture
def tenant() -> Tenant:
    return Tenant(id="tenant-1", name="Acme")
