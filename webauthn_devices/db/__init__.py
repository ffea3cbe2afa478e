"""Database module initialization."""

from .models import (
    ATTESTATION_TYPE_FIDO_U2F,
    DEFAULT_DESCRIPTION,
    Base,
    WebAuthnDevice,
    parse_aaguid,
)
from .session import SessionLocal, engine, get_db

__all__ = [
    "ATTESTATION_TYPE_FIDO_U2F",
    "DEFAULT_DESCRIPTION",
    "Base",
    "WebAuthnDevice",
    "parse_aaguid",
    "get_db",
    "engine",
    "SessionLocal",
]
