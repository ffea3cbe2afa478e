"""Tests for core settings validation."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from webauthn_devices.core.config import RelyingPartyConfig, Settings


class TestRelyingPartyOrigins:
    """Tests for WEBAUTHN_RP_ORIGINS parsing and validation."""

    def test_comma_separated_origins_keep_order(self):
        with patch.dict(
            os.environ,
            {
                "ENVIRONMENT": "development",
                "WEBAUTHN_RP_ORIGINS": "https://login.example.com, https://example.com",
            },
        ):
            settings = Settings()
            assert settings.webauthn_rp_origins == [
                "https://login.example.com",
                "https://example.com",
            ]

    def test_empty_origins_rejected(self):
        with patch.dict(
            os.environ,
            {"ENVIRONMENT": "development", "WEBAUTHN_RP_ORIGINS": ""},
        ):
            with pytest.raises(ValidationError) as exc_info:
                Settings()
            assert "at least one origin" in str(exc_info.value).lower()

    def test_origin_without_scheme_rejected(self):
        with patch.dict(
            os.environ,
            {"ENVIRONMENT": "development", "WEBAUTHN_RP_ORIGINS": "example.com"},
        ):
            with pytest.raises(ValidationError) as exc_info:
                Settings()
            assert "must start with http://" in str(exc_info.value).lower()

    def test_origin_with_spaces_rejected(self):
        with patch.dict(
            os.environ,
            {"ENVIRONMENT": "development", "WEBAUTHN_RP_ORIGINS": "https://example .com"},
        ):
            with pytest.raises(ValidationError) as exc_info:
                Settings()
            assert "contains spaces" in str(exc_info.value).lower()


class TestRelyingPartyId:
    """Tests for WEBAUTHN_RP_ID validation."""

    def test_url_rejected(self):
        with patch.dict(os.environ, {"WEBAUTHN_RP_ID": "https://example.com"}):
            with pytest.raises(ValidationError):
                Settings()

    def test_relying_party_property(self):
        with patch.dict(
            os.environ,
            {
                "WEBAUTHN_RP_ID": "example.org",
                "WEBAUTHN_RP_ORIGINS": "https://example.org,https://id.example.org",
            },
        ):
            relying_party = Settings().relying_party

        assert relying_party == RelyingPartyConfig(
            rp_id="example.org",
            rp_origins=("https://example.org", "https://id.example.org"),
        )

    def test_relying_party_requires_origin(self):
        with pytest.raises(ValueError):
            RelyingPartyConfig(rp_id="example.org", rp_origins=())


class TestProductionSecurityValidation:
    """Tests for production-only guards."""

    def test_production_rejects_default_database_credentials(self):
        with patch.dict(
            os.environ,
            {
                "ENVIRONMENT": "production",
                "DATABASE_URL": "postgresql://webauthn:webauthn@db:5432/webauthn",
            },
        ):
            with pytest.raises(ValidationError) as exc_info:
                Settings()
            assert "database_url" in str(exc_info.value).lower()

    def test_production_accepts_explicit_database_credentials(self):
        with patch.dict(
            os.environ,
            {
                "ENVIRONMENT": "production",
                "DATABASE_URL": "postgresql://svc:s3cret@db:5432/webauthn",
            },
        ):
            settings = Settings()
            assert settings.database_url == "postgresql://svc:s3cret@db:5432/webauthn"


def test_relying_party_settings_are_id_and_origins():
    fields = {name for name in Settings.model_fields if name.startswith("webauthn_")}
    assert fields == {"webauthn_rp_id", "webauthn_rp_origins"}
