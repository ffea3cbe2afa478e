"""Repository layer for persistence access."""

from .webauthn_device_repository import WebAuthnDeviceRepository

__all__ = ["WebAuthnDeviceRepository"]
