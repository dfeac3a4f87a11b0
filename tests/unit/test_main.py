"""
Unit tests for backend/main.py
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from unittest.mock import patch

from backend.main import create_app, _init_sentry, _configure_cors, _log_feature_flags
from backend.settings import Settings


@pytest.mark.unit
class TestCreateApp:
    """Test the create_app() factory function."""

    def test_create_app_returns_fastapi_instance(self):
        settings = Settings(environment="test", _env_file=None)
        app = create_app(settings=settings)
        assert isinstance(app, FastAPI)

    def test_create_app_uses_default_settings_when_none_provided(self):
        """create_app() should use get_settings() when no settings provided."""
        with patch("backend.main.get_settings") as mock_get_settings:
            mock_get_settings.return_value = Settings(environment="test", _env_file=None)

            app = create_app(settings=None)

            mock_get_settings.assert_called_once()
            assert isinstance(app, FastAPI)

    def test_create_app_configures_app_metadata(self):
        app = create_app(settings=Settings(environment="test", _env_file=None))

        assert app.title == "LiftLog API"
        assert app.version == "1.0.0"

    def test_routes_registered(self):
        """Every router is mounted."""
        app = create_app(settings=Settings(environment="test", _env_file=None))
        paths = set(app.openapi()["paths"])

        for path in [
            "/health",
            "/workouts/parse-output",
            "/workouts/merge",
            "/analytics/stats",
            "/analytics/prs",
            "/analytics/volume-status",
            "/intents/ask",
            "/intents/plan",
            "/intents/validate",
            "/backup/export",
            "/backup/import",
        ]:
            assert path in paths


@pytest.mark.unit
class TestInitSentry:
    """Test Sentry initialization."""

    def test_init_sentry_skipped_when_no_dsn(self):
        settings = Settings(sentry_dsn=None, _env_file=None)

        with patch("backend.main.sentry_sdk.init") as mock_init:
            _init_sentry(settings)
            mock_init.assert_not_called()

    def test_init_sentry_called_when_dsn_provided(self):
        settings = Settings(
            sentry_dsn="https://test@sentry.io/123",
            environment="test",
            _env_file=None,
        )

        with patch("backend.main.sentry_sdk.init") as mock_init:
            _init_sentry(settings)
            mock_init.assert_called_once_with(
                dsn="https://test@sentry.io/123",
                environment="test",
                traces_sample_rate=0.1,
            )


@pytest.mark.unit
class TestConfigureCors:
    """Test CORS configuration."""

    def test_configure_cors_adds_middleware(self):
        app = FastAPI()
        initial_middleware_count = len(app.user_middleware)

        _configure_cors(app, Settings(_env_file=None))

        assert len(app.user_middleware) == initial_middleware_count + 1

    def test_extra_origin_allowed(self):
        """Origins from settings are allowed alongside the local defaults."""
        settings = Settings(
            environment="test",
            cors_allowed_origins="https://app.example.com",
            _env_file=None,
        )
        client = TestClient(create_app(settings=settings))

        response = client.get("/health", headers={"Origin": "https://app.example.com"})

        assert response.headers["access-control-allow-origin"] == "https://app.example.com"

    def test_unknown_origin_not_allowed(self):
        client = TestClient(create_app(settings=Settings(environment="test", _env_file=None)))

        response = client.get("/health", headers={"Origin": "https://evil.example.com"})

        assert "access-control-allow-origin" not in response.headers


@pytest.mark.unit
class TestLogFeatureFlags:
    """Test feature flag logging."""

    def test_template_muscles_logged(self, caplog):
        settings = Settings(use_template_muscles=True, _env_file=None)

        with caplog.at_level("INFO"):
            _log_feature_flags(settings)

        assert "Muscle groups derived from templates" in caplog.text

    def test_model_muscles_warned(self, caplog):
        settings = Settings(
            use_template_muscles=False,
            allow_model_provided_muscles=True,
            _env_file=None,
        )

        with caplog.at_level("WARNING"):
            _log_feature_flags(settings)

        assert "MODEL-PROVIDED MUSCLE CONTRIBUTIONS ACCEPTED" in caplog.text

    def test_store_raw_text_warned(self, caplog):
        settings = Settings(store_raw_text=True, _env_file=None)

        with caplog.at_level("WARNING"):
            _log_feature_flags(settings)

        assert "STORE_RAW_TEXT is active" in caplog.text
