"""Unit test fixtures shared across bounded contexts."""

import pytest

from infrastructure.settings import (
    get_authorization_settings,
    get_identity_settings,
    get_resource_backend_settings,
    get_settings,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings from the environment for every test."""
    getters = (
        get_settings,
        get_identity_settings,
        get_resource_backend_settings,
        get_authorization_settings,
    )
    for getter in getters:
        getter.cache_clear()
    yield
    for getter in getters:
        getter.cache_clear()
