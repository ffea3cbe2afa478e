"""Database models."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
    false,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from webauthn_devices.core.encoding import decode_kid, encode_kid
from webauthn_devices.core.time import utcnow
from webauthn_devices.core.transports import decode_transports
from webauthn_devices.domain.exceptions import ValidationError

if TYPE_CHECKING:
    from webauthn_devices.core.config import RelyingPartyConfig

ATTESTATION_TYPE_FIDO_U2F = "fido-u2f"
DEFAULT_DESCRIPTION = "Primary"


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


def parse_aaguid(raw: bytes | None) -> Optional[uuid.UUID]:
    """Parse raw authenticator AAGUID bytes via their hex form.

    Returns ``None`` when the bytes do not form a UUID or are all zero; an
    authenticator reporting the zero AAGUID is treated as unknown.
    """
    if not raw:
        return None
    try:
        aaguid = uuid.UUID(bytes(raw).hex())
    except ValueError:
        return None
    return aaguid if aaguid.int != 0 else None


class WebAuthnDevice(Base):
    """A registered WebAuthn authenticator belonging to a username."""

    __tablename__ = "webauthn_devices"
    __table_args__ = (
        Index("webauthn_devices_kid_key", "kid", unique=True),
        Index("webauthn_devices_lookup_key", "username", "description", unique=True),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    last_used_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    # Empty for devices registered before RPIDs were tracked
    rpid: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(
        String(30), nullable=False, default=DEFAULT_DESCRIPTION, server_default=DEFAULT_DESCRIPTION
    )
    _kid: Mapped[str] = mapped_column("kid", String(512), nullable=False)
    _aaguid: Mapped[Optional[str]] = mapped_column("aaguid", String(36), nullable=True)
    attestation_type: Mapped[str] = mapped_column(
        String(32), nullable=False, default="", server_default=""
    )
    attachment: Mapped[str] = mapped_column(
        String(64), nullable=False, default="", server_default=""
    )
    transport: Mapped[str] = mapped_column(
        String(64), nullable=False, default="", server_default=""
    )
    # uint32 reported by the authenticator; BIGINT keeps the full range
    sign_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    clone_warning: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    discoverable: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    present: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    backup_eligible: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    backup_state: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    public_key: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    @property
    def kid(self) -> bytes:
        """Raw credential identifier bytes."""
        return decode_kid(self._kid)

    @kid.setter
    def kid(self, value: bytes) -> None:
        self._kid = encode_kid(value)

    @property
    def kid_text(self) -> str:
        """Credential identifier in its storage codec form."""
        return self._kid

    @property
    def aaguid(self) -> Optional[uuid.UUID]:
        """Authenticator model identifier, ``None`` when unknown.

        Raises:
            ValidationError: the stored value is not a UUID.
        """
        if not self._aaguid:
            return None
        try:
            value = uuid.UUID(self._aaguid)
        except ValueError as exc:
            raise ValidationError(f"Stored AAGUID '{self._aaguid}' is not a UUID") from exc
        return value if value.int != 0 else None

    @aaguid.setter
    def aaguid(self, value: uuid.UUID | str | None) -> None:
        if isinstance(value, str):
            try:
                value = uuid.UUID(value)
            except ValueError as exc:
                raise ValidationError(f"AAGUID '{value}' is not a UUID") from exc
        if value is None or value.int == 0:
            self._aaguid = None
        else:
            self._aaguid = str(value)

    def last_used_value(self) -> Optional[datetime]:
        return self.last_used_at

    def aaguid_value(self) -> Optional[str]:
        aaguid = self.aaguid
        return str(aaguid) if aaguid is not None else None

    def aaguid_bytes(self) -> bytes:
        """The 16 raw AAGUID bytes, or ``b""`` when unknown."""
        aaguid = self.aaguid
        return aaguid.bytes if aaguid is not None else b""

    def transports(self) -> list[str]:
        return decode_transports(self.transport)

    def update_sign_in_info(
        self,
        config: RelyingPartyConfig,
        now: datetime,
        sign_count: int,
    ) -> None:
        """Record a successful authentication.

        The counter is overwritten as reported; regression checks and the
        clone warning belong to the ceremony library. The RPID is back-filled
        once for devices registered before it was tracked: U2F devices were
        bound to an origin, everything else to the relying party ID.
        """
        self.last_used_at = now
        self.sign_count = sign_count

        if self.rpid:
            return

        if self.attestation_type == ATTESTATION_TYPE_FIDO_U2F:
            self.rpid = config.rp_origins[0]
        else:
            self.rpid = config.rp_id

    def __repr__(self) -> str:
        return (
            f"<WebAuthnDevice(id={self.id!r}, username={self.username!r}, "
            f"description={self.description!r})>"
        )
