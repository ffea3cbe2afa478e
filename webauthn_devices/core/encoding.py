"""Binary-to-text codecs for credential identifiers and key material.

Storage keeps credential identifiers (KIDs) as unpadded base64url text; the
portable document form uses standard padded base64 for both the KID and
the public key. Decoders are strict: input that is not valid for the
codec raises :class:`DecodeError` instead of being truncated.
"""

from __future__ import annotations

import base64
import binascii
import re

from webauthn.helpers import base64url_to_bytes, bytes_to_base64url

from webauthn_devices.domain.exceptions import DecodeError

_BASE64URL_PATTERN = re.compile(r"^[A-Za-z0-9_-]*$")


def encode_kid(data: bytes) -> str:
    """Encode a binary credential identifier for storage."""
    return bytes_to_base64url(bytes(data))


def decode_kid(text: str) -> bytes:
    """Decode a stored credential identifier back to raw bytes.

    Only the exact text :func:`encode_kid` produces is accepted; padded or
    otherwise non-canonical spellings of the same bytes would never match a
    lookup by encoded KID.
    """
    if not _BASE64URL_PATTERN.match(text) or len(text) % 4 == 1:
        raise DecodeError("Credential identifier is not valid base64url text")
    try:
        data = base64url_to_bytes(text)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError("Credential identifier is not valid base64url text") from exc
    if encode_kid(data) != text:
        raise DecodeError("Credential identifier is not in canonical base64url form")
    return data


def encode_base64(data: bytes) -> str:
    """Encode bytes as standard padded base64 text."""
    return base64.b64encode(bytes(data)).decode("ascii")


def decode_base64(text: str, *, field: str = "value") -> bytes:
    """Decode standard base64 text, rejecting characters outside the alphabet."""
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Field '{field}' is not valid base64") from exc
