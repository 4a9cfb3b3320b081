"""Unit tests for the main FastAPI application."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

import main
from iam.application.value_objects import RequestContext
from iam.dependencies import get_request_context
from infrastructure.settings import Settings
from tests.unit.iam.fakes import FakeSession


@pytest.fixture
def client():
    """Client without lifespan; backends are never contacted."""
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


class TestHealth:
    def test_health_returns_ok(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestRoutes:
    def test_iam_routes_are_mounted(self, client):
        main.app.dependency_overrides[get_request_context] = lambda: RequestContext(
            session=FakeSession(user_id="user-3"),
            tenant_id="tenant-1",
            role="member",
        )

        response = client.get("/iam/me/permissions")

        assert response.status_code == 200
        assert response.json() == {
            "tenant_id": "tenant-1",
            "role": "member",
            "permissions": None,
        }

    def test_anonymous_caller_gets_null_permissions(self, client):
        main.app.dependency_overrides[get_request_context] = lambda: RequestContext()

        response = client.get("/iam/me/permissions")

        assert response.status_code == 200
        assert response.json() == {"tenant_id": None, "role": None, "permissions": None}


class TestCors:
    def test_allows_configured_origin(self):
        settings = Settings(cors_origins=["https://app.example.com"])
        with patch.object(main, "get_settings", return_value=settings):
            app = main.create_app()

        response = TestClient(app).options(
            "/health",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.headers["access-control-allow-origin"] == "https://app.example.com"

    def test_title_comes_from_settings(self):
        with patch.object(main, "get_settings", return_value=Settings(app_name="Gate")):
            app = main.create_app()

        assert app.title == "Gate"


class TestLifespan:
    def test_initializes_identity_backend_and_closes_channel(self):
        with (
            patch.object(main, "init_supertokens") as init,
            patch.object(main, "close_tenant_backend", new=AsyncMock()) as close,
            patch.object(main, "configure_logging"),
        ):
            with TestClient(main.app):
                init.assert_called_once()

        close.assert_awaited_once()
