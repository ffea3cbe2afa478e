"""Test configuration and fixtures."""

import os
import uuid
from datetime import UTC, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("WEBAUTHN_RP_ID", "example.com")
os.environ.setdefault("WEBAUTHN_RP_ORIGINS", "https://example.com")

from webauthn_devices.core.config import RelyingPartyConfig  # noqa: E402
from webauthn_devices.db import Base, WebAuthnDevice  # noqa: E402
from webauthn_devices.domain.webauthn import (  # noqa: E402
    Authenticator,
    CredentialFlags,
    WebAuthnCredential,
)

# Use in-memory SQLite for tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

YUBIKEY_AAGUID = uuid.UUID("cb69481e-8ff7-4039-93ec-0a2729a154a8")
CREATED_AT = datetime(2024, 1, 15, 9, 30, tzinfo=UTC)


@pytest.fixture
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def relying_party():
    return RelyingPartyConfig(
        rp_id="example.com",
        rp_origins=("https://example.com", "https://login.example.com"),
    )


@pytest.fixture
def make_device():
    """Factory for fully populated, unsaved devices."""

    def _make(**overrides) -> WebAuthnDevice:
        values = dict(
            created_at=CREATED_AT,
            last_used_at=None,
            rpid="example.com",
            username="alice",
            description="Primary",
            kid=b"\x01\x02credential-one\xff",
            aaguid=YUBIKEY_AAGUID,
            attestation_type="packed",
            attachment="cross-platform",
            transport="usb,nfc",
            sign_count=7,
            clone_warning=False,
            discoverable=False,
            present=True,
            verified=True,
            backup_eligible=False,
            backup_state=False,
            public_key=b"\xa5\x01\x02\x03&public-key",
        )
        values.update(overrides)
        return WebAuthnDevice(**values)

    return _make


@pytest.fixture
def make_credential():
    """Factory for credentials as returned by a registration ceremony."""

    def _make(**overrides) -> WebAuthnCredential:
        values = dict(
            id=b"\x10\x20registered",
            public_key=b"\xa5\x01\x02cose",
            attestation_type="packed",
            transports=["usb", "nfc"],
            flags=CredentialFlags(
                user_present=True,
                user_verified=True,
                backup_eligible=True,
                backup_state=False,
            ),
            authenticator=Authenticator(
                aaguid=YUBIKEY_AAGUID.bytes,
                sign_count=1,
                clone_warning=False,
                attachment="cross-platform",
            ),
        )
        values.update(overrides)
        return WebAuthnCredential(**values)

    return _make
