"""Service layer entry points."""

from .webauthn_device_service import WebAuthnDeviceService

__all__ = ["WebAuthnDeviceService"]
