"""Tests for the binary identifier codecs."""

import os

import pytest

from webauthn_devices.core.encoding import (
    decode_base64,
    decode_kid,
    encode_base64,
    encode_kid,
)
from webauthn_devices.domain.exceptions import DecodeError


@pytest.mark.parametrize(
    "raw",
    [b"", b"\x00", b"\xff\xfe", b"credential", bytes(range(256)), os.urandom(64)],
)
def test_kid_round_trip(raw):
    assert decode_kid(encode_kid(raw)) == raw


def test_kid_encoding_is_url_safe_and_unpadded():
    encoded = encode_kid(b"\xfb\xff\xfe")
    assert encoded == "-__-"
    assert "=" not in encode_kid(b"\x01")


@pytest.mark.parametrize("text", ["AQ==", "AR", "AQI=", "_-"])
def test_kid_decode_rejects_non_canonical_text(text):
    with pytest.raises(DecodeError):
        decode_kid(text)


def test_kid_decode_accepts_canonical_text():
    assert decode_kid("AQ") == b"\x01"
    assert decode_kid("AQI") == b"\x01\x02"


@pytest.mark.parametrize("text", ["abc$", "a b", "+/+/", "A", "AAAAA"])
def test_kid_decode_rejects_invalid_text(text):
    with pytest.raises(DecodeError):
        decode_kid(text)


def test_base64_uses_standard_alphabet():
    assert encode_base64(b"\xfb\xff\xfe") == "+//+"
    assert decode_base64("+//+") == b"\xfb\xff\xfe"


@pytest.mark.parametrize("text", ["-__-", "abc", "not base64!"])
def test_base64_decode_rejects_invalid_text(text):
    with pytest.raises(DecodeError) as exc_info:
        decode_base64(text, field="public_key")
    assert "public_key" in exc_info.value.message
