"""WebAuthn device service layer."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from webauthn_devices.core.config import RelyingPartyConfig, settings
from webauthn_devices.core.logging import get_logger
from webauthn_devices.core.time import utcnow
from webauthn_devices.db import WebAuthnDevice
from webauthn_devices.domain.exceptions import NotFoundError
from webauthn_devices.domain.webauthn import (
    WebAuthnCredential,
    WebAuthnUser,
    new_device_from_credential,
)
from webauthn_devices.repositories import WebAuthnDeviceRepository
from webauthn_devices.schemas.webauthn import WebAuthnDeviceExport

logger = get_logger(__name__)


class WebAuthnDeviceService:
    """Business logic around registered WebAuthn devices.

    Uniqueness of credential identifiers and of ``(username, description)``
    is left to the database's unique indexes; an ``IntegrityError`` from a
    colliding insert reaches the caller unchanged.
    """

    def __init__(
        self,
        session: Session,
        relying_party: Optional[RelyingPartyConfig] = None,
    ) -> None:
        self.session = session
        self.devices = WebAuthnDeviceRepository(session)
        self.relying_party = relying_party or settings.relying_party

    # -------------------------------------------------------------------------
    # Queries

    def list_devices(self, username: str) -> Sequence[WebAuthnDevice]:
        return self.devices.list_for_username(username)

    def get_device(self, device_id: int, username: str) -> WebAuthnDevice:
        device = self.devices.get_by_id(device_id, username)
        if not device:
            raise NotFoundError("WebAuthn device not found")
        return device

    def get_device_by_description(self, username: str, description: str) -> WebAuthnDevice:
        device = self.devices.find_by_description(username, description)
        if not device:
            raise NotFoundError("WebAuthn device not found")
        return device

    def get_device_by_kid(self, kid: bytes) -> WebAuthnDevice:
        device = self.devices.get_by_kid(kid)
        if not device:
            raise NotFoundError("WebAuthn device not found")
        return device

    def load_user(
        self,
        user_id: str,
        username: str,
        display_name: Optional[str] = None,
    ) -> WebAuthnUser:
        """Assemble the ceremony-facing user with all of its devices."""
        return WebAuthnUser(
            user_id=user_id,
            username=username,
            display_name=display_name or username,
            devices=list(self.devices.list_for_username(username)),
        )

    # -------------------------------------------------------------------------
    # Mutations

    def register_device(
        self,
        rpid: str,
        username: str,
        description: str,
        credential: WebAuthnCredential,
    ) -> WebAuthnDevice:
        device = new_device_from_credential(rpid, username, description, credential)
        self.devices.add(device)
        self._commit("register", username=username, description=description)
        self.session.refresh(device)
        logger.info(
            "Registered WebAuthn device",
            extra={
                "device_id": device.id,
                "username": username,
                "attestation_type": device.attestation_type,
            },
        )
        return device

    def record_sign_in(
        self,
        kid: bytes,
        sign_count: int,
        now: Optional[datetime] = None,
    ) -> WebAuthnDevice:
        """Persist the outcome of a verified authentication ceremony."""
        device = self.get_device_by_kid(kid)
        had_rpid = bool(device.rpid)
        device.update_sign_in_info(self.relying_party, now or utcnow(), sign_count)
        self.devices.commit()
        if not had_rpid:
            logger.info(
                "Back-filled RPID for WebAuthn device",
                extra={"device_id": device.id, "rpid": device.rpid},
            )
        return device

    def delete_device(self, device_id: int, username: str) -> None:
        device = self.get_device(device_id, username)
        self.devices.remove(device)
        self.devices.commit()

    # -------------------------------------------------------------------------
    # Backup and restore

    def export_devices(self, username: Optional[str] = None) -> WebAuthnDeviceExport:
        devices = (
            self.devices.list_for_username(username)
            if username is not None
            else self.devices.list_all()
        )
        return WebAuthnDeviceExport.from_devices(devices)

    def export_yaml(self, username: Optional[str] = None) -> str:
        return self.export_devices(username).to_yaml()

    def import_yaml(self, text: str) -> list[WebAuthnDevice]:
        """Restore devices from a backup file in document order.

        Every document is converted before anything is written, so a bad
        document aborts the import without partial inserts.
        """
        devices = WebAuthnDeviceExport.from_yaml(text).to_devices()
        for device in devices:
            self.devices.add(device)
        self._commit("import", count=len(devices))
        logger.info("Imported WebAuthn devices", extra={"count": len(devices)})
        return devices

    # -------------------------------------------------------------------------
    # Internal helpers

    def _commit(self, operation: str, **context: object) -> None:
        try:
            self.devices.commit()
        except IntegrityError:
            self.devices.rollback()
            logger.warning(
                "WebAuthn device write rejected by storage constraint",
                extra={"operation": operation, **context},
            )
            raise
