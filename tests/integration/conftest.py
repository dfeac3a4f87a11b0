"""
Shared fixtures for API integration tests.

Every test gets a fresh app built with test settings and a fixed clock.
"""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from api.deps import get_now, get_settings
from backend.main import create_app
from backend.settings import Settings


FIXED_NOW = datetime(2024, 12, 20, 12, 0)


@pytest.fixture
def settings():
    return Settings(environment="test", _env_file=None)


@pytest.fixture
def app(settings):
    app = create_app(settings=settings)
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    app.dependency_overrides[get_settings] = lambda: settings
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)
