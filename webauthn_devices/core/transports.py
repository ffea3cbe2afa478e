"""Codec for the comma-delimited authenticator transport column."""

from __future__ import annotations

from typing import Iterable

SEPARATOR = ","


def encode_transports(transports: Iterable[str]) -> str:
    """Join transport tags for storage; an empty list becomes ``""``."""
    return SEPARATOR.join(transports)


def decode_transports(value: str | None) -> list[str]:
    """Split a stored transport string, dropping empty segments."""
    if not value:
        return []
    return [transport for transport in value.split(SEPARATOR) if transport]
