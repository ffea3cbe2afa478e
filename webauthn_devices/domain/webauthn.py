"""Adapters between stored devices and the WebAuthn ceremony library.

``py_webauthn`` verifies ceremonies but keeps no notion of a user or a
stored credential. This module supplies both: :class:`WebAuthnUser`
conforms to the :class:`CeremonyUser` capability contract, and
:class:`WebAuthnCredential` is the credential shape exchanged with the
ceremony layer in both directions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional, Protocol, runtime_checkable

from webauthn.helpers.structs import (
    AuthenticatorTransport,
    CredentialDeviceType,
    PublicKeyCredentialDescriptor,
    PublicKeyCredentialType,
)

from webauthn_devices.core.logging import get_logger
from webauthn_devices.core.time import utcnow
from webauthn_devices.core.transports import decode_transports, encode_transports
from webauthn_devices.db.models import (
    ATTESTATION_TYPE_FIDO_U2F,
    WebAuthnDevice,
    parse_aaguid,
)
from webauthn_devices.domain.exceptions import ValidationError

logger = get_logger(__name__)

_KNOWN_TRANSPORTS = {transport.value: transport for transport in AuthenticatorTransport}


@dataclass(slots=True)
class CredentialFlags:
    """Authenticator data flags captured at registration."""

    user_present: bool = False
    user_verified: bool = False
    backup_eligible: bool = False
    backup_state: bool = False


@dataclass(slots=True)
class Authenticator:
    """Authenticator metadata attached to a credential."""

    aaguid: bytes = b""
    sign_count: int = 0
    clone_warning: bool = False
    attachment: str = ""


@dataclass(slots=True)
class WebAuthnCredential:
    """A public key credential as the ceremony layer sees it."""

    id: bytes
    public_key: bytes
    attestation_type: str = ""
    transports: list[str] = field(default_factory=list)
    flags: CredentialFlags = field(default_factory=CredentialFlags)
    authenticator: Authenticator = field(default_factory=Authenticator)

    def descriptor(self) -> PublicKeyCredentialDescriptor:
        """Minimal descriptor used for allow/exclude credential lists."""
        transports = [
            _KNOWN_TRANSPORTS[transport]
            for transport in self.transports
            if transport in _KNOWN_TRANSPORTS
        ]
        return PublicKeyCredentialDescriptor(
            id=self.id,
            type=PublicKeyCredentialType.PUBLIC_KEY,
            transports=transports or None,
        )


@runtime_checkable
class CeremonyUser(Protocol):
    """Capabilities a user must expose to drive a WebAuthn ceremony."""

    def webauthn_id(self) -> bytes: ...

    def webauthn_name(self) -> str: ...

    def webauthn_display_name(self) -> str: ...

    def webauthn_icon(self) -> str: ...

    def webauthn_credentials(self) -> list[WebAuthnCredential]: ...

    def webauthn_credential_descriptors(self) -> list[PublicKeyCredentialDescriptor]: ...


@dataclass(slots=True)
class WebAuthnUser:
    """A principal and its registered devices, built per ceremony."""

    user_id: str
    username: str
    display_name: str = ""
    devices: list[WebAuthnDevice] = field(default_factory=list)

    def webauthn_id(self) -> bytes:
        return self.user_id.encode("utf-8")

    def webauthn_name(self) -> str:
        return self.username

    def webauthn_display_name(self) -> str:
        return self.display_name

    def webauthn_icon(self) -> str:
        return ""

    def has_fido_u2f(self) -> bool:
        """Whether any device was registered with U2F attestation."""
        return any(
            device.attestation_type == ATTESTATION_TYPE_FIDO_U2F for device in self.devices
        )

    def webauthn_credentials(self) -> list[WebAuthnCredential]:
        """Project each device into a ceremony credential, keeping order.

        A device whose AAGUID cannot be serialized is left out so the
        remaining devices stay usable.
        """
        credentials = []
        for device in self.devices:
            try:
                aaguid = device.aaguid_bytes()
            except ValidationError:
                logger.warning(
                    "Skipping device with malformed AAGUID",
                    extra={"device_id": device.id, "username": self.username},
                )
                continue
            credentials.append(
                WebAuthnCredential(
                    id=device.kid,
                    public_key=device.public_key,
                    attestation_type=device.attestation_type,
                    transports=decode_transports(device.transport),
                    flags=CredentialFlags(
                        user_present=device.present,
                        user_verified=device.verified,
                        backup_eligible=device.backup_eligible,
                        backup_state=device.backup_state,
                    ),
                    authenticator=Authenticator(
                        aaguid=aaguid,
                        sign_count=device.sign_count,
                        clone_warning=device.clone_warning,
                        attachment=device.attachment,
                    ),
                )
            )
        return credentials

    def webauthn_credential_descriptors(self) -> list[PublicKeyCredentialDescriptor]:
        return [credential.descriptor() for credential in self.webauthn_credentials()]


def new_device_from_credential(
    rpid: str,
    username: str,
    description: str,
    credential: WebAuthnCredential,
    now: Optional[datetime] = None,
) -> WebAuthnDevice:
    """Build an unsaved device from a freshly registered credential."""
    return WebAuthnDevice(
        rpid=rpid,
        username=username,
        created_at=now or utcnow(),
        last_used_at=None,
        description=description,
        kid=credential.id,
        aaguid=parse_aaguid(credential.authenticator.aaguid),
        attestation_type=credential.attestation_type,
        attachment=credential.authenticator.attachment,
        transport=encode_transports(credential.transports),
        sign_count=credential.authenticator.sign_count,
        clone_warning=credential.authenticator.clone_warning,
        # Registrations handled here never request a resident key
        discoverable=False,
        present=credential.flags.user_present,
        verified=credential.flags.user_verified,
        backup_eligible=credential.flags.backup_eligible,
        backup_state=credential.flags.backup_state,
        public_key=credential.public_key,
    )


def credential_from_verified_registration(
    verification: Any,
    *,
    transports: Iterable[str] = (),
    attachment: str = "",
) -> WebAuthnCredential:
    """Convert ``py_webauthn``'s ``VerifiedRegistration`` into a credential.

    Transports and attachment are reported by the browser alongside the
    attestation, not inside it, so the caller passes them through.
    """
    fmt = verification.fmt
    return WebAuthnCredential(
        id=bytes(verification.credential_id),
        public_key=bytes(verification.credential_public_key),
        attestation_type=getattr(fmt, "value", fmt) or "",
        transports=[str(getattr(t, "value", t)) for t in transports],
        flags=CredentialFlags(
            # Registration verification fails unless UP was set
            user_present=True,
            user_verified=bool(verification.user_verified),
            backup_eligible=verification.credential_device_type
            == CredentialDeviceType.MULTI_DEVICE,
            backup_state=bool(verification.credential_backed_up),
        ),
        authenticator=Authenticator(
            aaguid=_aaguid_text_to_bytes(verification.aaguid),
            sign_count=int(verification.sign_count),
            attachment=str(getattr(attachment, "value", attachment) or ""),
        ),
    )


def _aaguid_text_to_bytes(value: str | None) -> bytes:
    if not value:
        return b""
    try:
        return bytes.fromhex(value.replace("-", ""))
    except ValueError:
        return b""
