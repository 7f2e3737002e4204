import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from docgate.core.config import Settings, get_settings


def test_settings_defaults():
    """Test that settings load with correct defaults."""
    settings = Settings()

    assert settings.app_name == "DocGate"
    assert settings.environment == "development"
    assert settings.debug is False
    assert settings.api_prefix == "/api/v1"
    assert settings.port == 8000
    assert settings.data_service == "sql"
    assert settings.logging_service == "structlog"
    assert settings.auth_service == "jwt"
    assert settings.default_query_limit == 50
    assert settings.collections_module is None
    assert settings.is_development is True
    assert settings.is_production is False
    assert settings.is_testing is False


def test_settings_env_override():
    """Test that environment variables override defaults."""
    with patch.dict(os.environ, {
        "DOCGATE_APP_NAME": "TestApp",
        "DOCGATE_ENVIRONMENT": "production",
        "DOCGATE_DEBUG": "true",
        "DOCGATE_PORT": "9000",
        "DOCGATE_DATA_SERVICE": "memory",
    }):
        settings = Settings()

        assert settings.app_name == "TestApp"
        assert settings.environment == "production"
        assert settings.debug is True
        assert settings.port == 9000
        assert settings.data_service == "memory"
        assert settings.is_production is True


def test_adapter_names_are_normalized():
    settings = Settings(data_service=" Memory ", auth_service="JWT")

    assert settings.data_service == "memory"
    assert settings.auth_service == "jwt"


def test_cors_origins_parsing():
    """Test CORS origins parsing from JSON env and CSV string."""
    with patch.dict(os.environ, {
        "DOCGATE_CORS_ORIGINS": '["http://example.com", "http://test.com"]'
    }):
        settings = Settings()
        assert settings.cors_origins == ["http://example.com", "http://test.com"]

    settings = Settings(cors_origins="http://example.com, http://test.com")
    assert settings.cors_origins == ["http://example.com", "http://test.com"]


def test_invalid_environment_rejected():
    with pytest.raises(ValidationError):
        Settings(environment="staging")


def test_query_limit_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(default_query_limit=0)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
