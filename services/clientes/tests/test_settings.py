"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from services.clientes.settings import Settings, get_settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        for var in ("API_BASE_URL", "API_TOKEN", "PAGE_SIZE", "LOG_LEVEL", "ENVIRONMENT"):
            monkeypatch.delenv(var, raising=False)

        config = Settings(_env_file=None)

        assert config.api_base_url == "http://localhost:3000/api"
        assert config.api_token is None
        assert config.page_size == 10
        assert config.environment == "development"
        assert not config.is_production()

    def test_loaded_from_environment(self, monkeypatch):
        monkeypatch.setenv("API_BASE_URL", "https://erp.example.cl/api/")
        monkeypatch.setenv("API_TOKEN", "  jwt-token  ")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("ENVIRONMENT", "Production")

        config = Settings(_env_file=None)

        assert config.api_base_url == "https://erp.example.cl/api"
        assert config.api_token == "jwt-token"
        assert config.log_level == "DEBUG"
        assert config.is_production()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"environment": "invalid_env"},
            {"log_level": "VERBOSE"},
            {"log_format": "xml"},
            {"api_base_url": "localhost:3000"},
            {"page_size": 0},
            {"api_max_retries": 11},
        ],
        ids=["environment", "log_level", "log_format", "base_url", "page_size", "retries"],
    )
    def test_validation(self, kwargs):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **kwargs)

    def test_blank_token_is_no_token(self):
        assert Settings(_env_file=None, api_token="   ").api_token is None

    def test_api_headers(self):
        headers = Settings(_env_file=None, api_token="abc").get_api_headers()
        assert headers["Authorization"] == "Bearer abc"
        assert headers["Content-Type"] == "application/json"

        headers = Settings(_env_file=None, api_token=None).get_api_headers()
        assert "Authorization" not in headers

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()
