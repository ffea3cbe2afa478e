"""WebAuthn device storage, ceremony adapters and portable documents."""

__version__ = "0.1.0"
