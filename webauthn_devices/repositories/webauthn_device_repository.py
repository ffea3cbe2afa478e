"""WebAuthn device persistence helpers."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy.orm import Session

from webauthn_devices.core.encoding import encode_kid
from webauthn_devices.db import WebAuthnDevice
from webauthn_devices.repositories.base import SQLAlchemyRepository


class WebAuthnDeviceRepository(SQLAlchemyRepository[WebAuthnDevice]):
    """Encapsulates all direct WebAuthnDevice ORM access."""

    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def _username_query(self, username: str):
        return self.session.query(WebAuthnDevice).filter(WebAuthnDevice.username == username)

    def list_all(self) -> Sequence[WebAuthnDevice]:
        return self.session.query(WebAuthnDevice).order_by(WebAuthnDevice.id.asc()).all()

    def list_for_username(self, username: str) -> Sequence[WebAuthnDevice]:
        """Devices for a user in registration order."""
        return self._username_query(username).order_by(WebAuthnDevice.id.asc()).all()

    def get_by_id(self, device_id: int, username: str) -> Optional[WebAuthnDevice]:
        return self._username_query(username).filter(WebAuthnDevice.id == device_id).first()

    def get_by_kid(self, kid: bytes) -> Optional[WebAuthnDevice]:
        # The unique index is on the encoded text, so look up by that form
        return (
            self.session.query(WebAuthnDevice)
            .filter(WebAuthnDevice._kid == encode_kid(kid))
            .first()
        )

    def find_by_description(self, username: str, description: str) -> Optional[WebAuthnDevice]:
        return self._username_query(username).filter(
            WebAuthnDevice.description == description
        ).first()
