"""Portable document form of WebAuthn devices (JSON API and YAML backup)."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Iterable, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from webauthn_devices.core.encoding import decode_base64, encode_base64
from webauthn_devices.core.time import as_utc
from webauthn_devices.core.transports import decode_transports, encode_transports
from webauthn_devices.db.models import WebAuthnDevice
from webauthn_devices.domain.exceptions import (
    DocumentImportError,
    DomainError,
    ValidationError,
)

# Omitted from a document when absent rather than written as null
OPTIONAL_FIELDS = frozenset({"last_used_at", "aaguid"})


class WebAuthnDeviceData(BaseModel):
    """One device as exchanged outside the database."""

    id: Optional[int] = None
    created_at: datetime
    last_used_at: Optional[datetime] = None
    rpid: str = ""
    username: str = ""
    description: str
    kid: str
    aaguid: Optional[str] = None
    attestation_type: str = ""
    attachment: str = ""
    transports: list[str] = Field(default_factory=list)
    sign_count: int = Field(0, ge=0, le=0xFFFFFFFF)
    clone_warning: bool = False
    discoverable: bool = False
    present: bool = False
    verified: bool = False
    backup_eligible: bool = False
    backup_state: bool = False
    public_key: str

    def _dump(self, exclude: set[str]) -> dict[str, Any]:
        data = self.model_dump(mode="json", exclude=exclude)
        for name in OPTIONAL_FIELDS:
            if data.get(name) is None:
                data.pop(name, None)
        return data

    def to_json(self) -> dict[str, Any]:
        """API form: carries ``id``; the username comes from the session."""
        return self._dump({"username"})

    def to_yaml(self) -> dict[str, Any]:
        """Backup form: no ``id`` so restores never collide on the key."""
        return self._dump({"id"})


def device_to_data(device: WebAuthnDevice) -> WebAuthnDeviceData:
    """Export a stored device."""
    last_used = device.last_used_value()
    return WebAuthnDeviceData(
        id=device.id,
        created_at=as_utc(device.created_at),
        last_used_at=as_utc(last_used) if last_used is not None else None,
        rpid=device.rpid,
        username=device.username,
        description=device.description,
        kid=encode_base64(device.kid),
        aaguid=device.aaguid_value(),
        attestation_type=device.attestation_type,
        attachment=device.attachment,
        transports=decode_transports(device.transport),
        sign_count=device.sign_count,
        clone_warning=device.clone_warning,
        discoverable=device.discoverable,
        present=device.present,
        verified=device.verified,
        backup_eligible=device.backup_eligible,
        backup_state=device.backup_state,
        public_key=encode_base64(device.public_key),
    )


def data_to_device(data: WebAuthnDeviceData) -> WebAuthnDevice:
    """Import a document as a new, unsaved device.

    Raises:
        DecodeError: ``public_key`` or ``kid`` is not base64.
        ValidationError: ``aaguid`` is present but not a UUID.
    """
    public_key = decode_base64(data.public_key, field="public_key")

    aaguid = None
    if data.aaguid is not None:
        try:
            aaguid = uuid.UUID(data.aaguid)
        except ValueError as exc:
            raise ValidationError(f"Field 'aaguid' is not a UUID: {data.aaguid!r}") from exc

    kid = decode_base64(data.kid, field="kid")

    return WebAuthnDevice(
        created_at=as_utc(data.created_at),
        last_used_at=as_utc(data.last_used_at) if data.last_used_at is not None else None,
        rpid=data.rpid,
        username=data.username,
        description=data.description,
        kid=kid,
        aaguid=aaguid,
        attestation_type=data.attestation_type,
        attachment=data.attachment,
        transport=encode_transports(data.transports),
        sign_count=data.sign_count,
        clone_warning=data.clone_warning,
        discoverable=data.discoverable,
        present=data.present,
        verified=data.verified,
        backup_eligible=data.backup_eligible,
        backup_state=data.backup_state,
        public_key=public_key,
    )


class WebAuthnDeviceExport(BaseModel):
    """A backup file: an ordered list of device documents."""

    webauthn_devices: list[WebAuthnDeviceData] = Field(default_factory=list)

    @classmethod
    def from_devices(cls, devices: Iterable[WebAuthnDevice]) -> "WebAuthnDeviceExport":
        return cls(webauthn_devices=[device_to_data(device) for device in devices])

    def to_yaml(self) -> str:
        payload = {"webauthn_devices": [data.to_yaml() for data in self.webauthn_devices]}
        return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)

    @classmethod
    def from_yaml(cls, text: str) -> "WebAuthnDeviceExport":
        """Parse a backup file.

        Raises:
            ValidationError: the file is not YAML or lacks the expected shape.
            DocumentImportError: one document has invalid field values.
        """
        try:
            payload = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValidationError("Backup file is not valid YAML") from exc

        if payload is None:
            return cls()
        if not isinstance(payload, dict) or not isinstance(
            payload.get("webauthn_devices", []), list
        ):
            raise ValidationError("Backup file must contain a 'webauthn_devices' list")

        documents = []
        for index, raw in enumerate(payload.get("webauthn_devices") or []):
            try:
                documents.append(WebAuthnDeviceData.model_validate(raw))
            except PydanticValidationError as exc:
                cause = ValidationError(_first_error(exc))
                raise DocumentImportError(index, cause) from exc
        return cls(webauthn_devices=documents)

    def to_devices(self) -> list[WebAuthnDevice]:
        """Convert every document, reporting the index of the first failure."""
        devices = []
        for index, data in enumerate(self.webauthn_devices):
            try:
                devices.append(data_to_device(data))
            except DomainError as exc:
                raise DocumentImportError(index, exc) from exc
        return devices


def _first_error(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ())) or "document"
    return f"{location}: {error.get('msg', 'invalid value')}"
