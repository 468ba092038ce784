"""Tests for the configuration module."""

from __future__ import annotations

import logging
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.core.config import Settings, configure_logging, get_settings


class TestSettings:
    """Test suite for application Settings."""

    def test_default_values(self) -> None:
        """Settings should have sensible defaults."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(
                _env_file=None,  # type: ignore[call-arg]
            )
        assert settings.app_name == "Smart Reconciliation Guard"
        assert settings.app_env == "development"
        assert settings.debug is True
        assert settings.log_level == "INFO"
        assert settings.jwt_algorithm == "HS256"
        assert settings.rate_limit_requests == 100
        assert settings.rate_limit_action_requests == 20

    def test_env_overrides(self) -> None:
        """Environment variables should override defaults."""
        with patch.dict(os.environ, {"APP_ENV": "staging", "RATE_LIMIT_REQUESTS": "5"}, clear=True):
            settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.app_env == "staging"
        assert settings.rate_limit_requests == 5

    def test_cors_origins_from_json_string(self) -> None:
        """CORS origins should parse from a JSON array string."""
        settings = Settings(
            cors_origins='["http://a.example", "http://b.example"]',  # type: ignore[arg-type]
            _env_file=None,  # type: ignore[call-arg]
        )
        assert settings.cors_origins == ["http://a.example", "http://b.example"]

    def test_cors_origins_from_comma_string(self) -> None:
        """CORS origins should parse from a comma-separated string."""
        settings = Settings(
            cors_origins="http://a.example, http://b.example",  # type: ignore[arg-type]
            _env_file=None,  # type: ignore[call-arg]
        )
        assert settings.cors_origins == ["http://a.example", "http://b.example"]

    def test_log_level_normalized(self) -> None:
        """Log level names are case-insensitive."""
        settings = Settings(log_level="debug", _env_file=None)  # type: ignore[call-arg]
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level_rejected(self) -> None:
        """Unknown log levels fail validation."""
        with pytest.raises(ValidationError):
            Settings(log_level="chatty", _env_file=None)  # type: ignore[call-arg]

    def test_single_verification_key(self) -> None:
        """Without rotation keys, only jwt_secret_key verifies."""
        settings = Settings(jwt_secret_key="k1", _env_file=None)  # type: ignore[call-arg]
        assert settings.jwt_verification_keys == ["k1"]
        assert settings.jwt_signing_key == "k1"

    def test_rotation_keys(self) -> None:
        """Comma-separated rotation keys are split and stripped."""
        settings = Settings(jwt_secret_keys=" k2 , k1 ,", _env_file=None)  # type: ignore[call-arg]
        assert settings.jwt_verification_keys == ["k2", "k1"]
        assert settings.jwt_signing_key == "k2"


class TestGetSettings:
    """Tests for the cached settings accessor."""

    def test_returns_cached_instance(self) -> None:
        """get_settings should return the same object on repeated calls."""
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_applies_level(self) -> None:
        """The root logger level should follow settings when unconfigured."""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        root.handlers = []
        try:
            configure_logging(Settings(log_level="WARNING", _env_file=None))  # type: ignore[call-arg]
            assert root.level == logging.WARNING
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)
