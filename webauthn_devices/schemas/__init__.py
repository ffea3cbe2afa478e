"""Schemas module initialization."""

from .webauthn import (
    WebAuthnDeviceData,
    WebAuthnDeviceExport,
    data_to_device,
    device_to_data,
)

__all__ = [
    "WebAuthnDeviceData",
    "WebAuthnDeviceExport",
    "data_to_device",
    "device_to_data",
]
