"""Domain-level exception hierarchy."""


class DomainError(Exception):
    """Base exception for service-layer errors."""

    def __init__(self, message: str = "Domain error") -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """Raised when a requested resource cannot be located."""


class ValidationError(DomainError):
    """Raised when a structurally valid value fails semantic validation."""


class DecodeError(DomainError):
    """Raised when binary-as-text input is not valid for its encoding."""


class DocumentImportError(DomainError):
    """Raised when one document of a bulk import cannot be converted.

    The original failure is chained as ``__cause__``.
    """

    def __init__(self, index: int, cause: DomainError) -> None:
        super().__init__(f"Document {index}: {cause.message}")
        self.index = index
        self.cause = cause
