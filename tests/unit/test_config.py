"""
Unit tests for configuration management functionality.
Tests the Settings class and the model catalog.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from promptwire.config import OPENAI_API_URL, ModelCatalog, Settings, get_settings, reset_settings


class TestSettings:
    """Test the Settings configuration class."""

    def test_default_settings(self):
        """Test default settings types when no overrides are present."""
        settings = Settings()

        assert isinstance(settings.base_url, str)
        assert isinstance(settings.request_timeout, float)
        assert isinstance(settings.connect_timeout, float)
        assert isinstance(settings.max_retries, int)
        assert settings.api_key is None or isinstance(settings.api_key, str)

    def test_settings_from_env_vars(self):
        with patch.dict(os.environ, {
            "OPENAI_API_KEY": "sk-test-key",
            "OPENAI_ORGANIZATION_ID": "org-123",
            "OPENAI_BASE_URL": "https://proxy.internal",
            "PROMPTWIRE_REQUEST_TIMEOUT": "120",
            "PROMPTWIRE_CONNECT_TIMEOUT": "5",
            "PROMPTWIRE_MAX_RETRIES": "1",
            "PROMPTWIRE_LOG_LEVEL": "DEBUG",
        }):
            settings = Settings()

            assert settings.api_key == "sk-test-key"
            assert settings.organization_id == "org-123"
            assert settings.base_url == "https://proxy.internal"
            assert settings.request_timeout == 120
            assert settings.connect_timeout == 5
            assert settings.max_retries == 1
            assert settings.log_level == "DEBUG"

    def test_invalid_max_retries(self):
        with patch.dict(os.environ, {"PROMPTWIRE_MAX_RETRIES": "-1"}):
            with pytest.raises(ValidationError):
                Settings()

    def test_invalid_timeout(self):
        with patch.dict(os.environ, {"PROMPTWIRE_REQUEST_TIMEOUT": "soon"}):
            with pytest.raises(ValidationError):
                Settings()

    def test_get_settings_singleton(self):
        reset_settings()
        try:
            assert get_settings() is get_settings()
        finally:
            reset_settings()

    def test_default_base_url(self):
        assert OPENAI_API_URL == "https://api.openai.com"


class TestModelCatalog:
    """Test model metadata lookups."""

    def test_max_tokens(self):
        catalog = ModelCatalog()
        assert catalog.max_tokens("gpt-4") == 8192
        assert catalog.max_tokens("gpt-3.5-turbo") == 4096
        assert catalog.max_tokens("unknown-model") == 2049

    def test_max_tokens_overrides(self):
        catalog = ModelCatalog(max_tokens={"my-model": 100000})
        assert catalog.max_tokens("my-model") == 100000
        assert catalog.max_tokens("gpt-4") == 8192

    def test_capabilities(self):
        catalog = ModelCatalog()
        assert catalog.chattable("gpt-4")
        assert not catalog.chattable("davinci")
        assert catalog.completionable("text-davinci-003")
        assert catalog.editable("text-davinci-edit-001")
        assert catalog.embeddable("text-embedding-ada-002")
