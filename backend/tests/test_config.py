"""Tests for settings parsing and production validation."""

import pytest

from pdfvault.core.config import ConfigurationError, Environment, Settings


def make_settings(**overrides) -> Settings:
    values = {
        "remote_email": "vault@example.com",
        "remote_password": "remote-secret",
        "cors_allowed_origins": "https://app.example.com",
    }
    values.update(overrides)
    return Settings(**values)


class TestSettings:

    def test_cors_origins_split(self):
        cfg = make_settings(cors_allowed_origins="https://a.example.com, https://b.example.com")
        assert cfg.get_cors_origins() == ["https://a.example.com", "https://b.example.com"]

    def test_cors_wildcard_rejected(self):
        with pytest.raises(ValueError):
            make_settings(cors_allowed_origins="*").get_cors_origins()

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            make_settings(log_level="LOUD")

    def test_trailing_slash_stripped(self):
        cfg = make_settings(remote_share_base_url="https://mega.nz/", remote_api_url="https://api.test/")
        assert cfg.remote_share_base_url == "https://mega.nz"
        assert cfg.remote_api_url == "https://api.test"


class TestProductionValidation:

    def test_development_reports_problems(self):
        cfg = make_settings(environment=Environment.DEVELOPMENT, remote_email="")
        problems = cfg.validate_production_config()
        assert any("REMOTE_EMAIL" in p for p in problems)

    def test_production_with_default_secrets_fails(self):
        cfg = make_settings(environment=Environment.PRODUCTION)
        with pytest.raises(ConfigurationError):
            cfg.validate_production_config()

    def test_production_fully_configured(self):
        cfg = make_settings(
            environment=Environment.PRODUCTION,
            jwt_secret_key="a" * 64,
            jwt_refresh_secret_key="b" * 64,
        )
        assert cfg.validate_production_config() == []
