"""
Exception hierarchy for the Firestore mapping layer.

Errors raised by the gRPC client are translated into these types; the original
google.api_core exception is always kept as ``__cause__``.
"""

from typing import Optional

from google.api_core import exceptions as core_exceptions


class FirestoreOdmError(Exception):
    """Base exception for all tiny_firestore_odm errors."""


# --- Documents ---


class DocumentNotFoundError(FirestoreOdmError):
    """Raised when get/update/delete targets a document that does not exist."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Document not found: '{name}'")


class DocumentAlreadyExistsError(FirestoreOdmError):
    """Raised when create_with_key targets a key that is already in use."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Document already exists: '{name}'")


# --- Serialization ---


class SerializationError(FirestoreOdmError):
    """Raised when a value cannot be encoded as Firestore document fields."""


class DeserializationError(FirestoreOdmError):
    """Raised when a stored document cannot be mapped back to the collection's model."""

    def __init__(self, name: str, model_name: str, detail: str) -> None:
        self.name = name
        self.model_name = model_name
        super().__init__(f"Cannot deserialize '{name}' as {model_name}: {detail}")


# --- Transport ---


class TransportError(FirestoreOdmError):
    """Raised on network, authentication or RPC-level failures."""


# --- Identifiers ---


class DocumentNameParseError(FirestoreOdmError, ValueError):
    """Base for resource name parsing errors."""


class TooFewPartsError(DocumentNameParseError):
    """Raised when a resource name has fewer segments than any valid name."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"Resource name has too few parts ({count})")


class WrongNumberOfPartsError(DocumentNameParseError):
    """Raised when a resource name does not end on a collection segment."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"Resource name has the wrong number of parts ({count})")


class InvalidPartError(DocumentNameParseError):
    """Raised when a fixed segment of a resource name has an unexpected value."""

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Resource name has an invalid part at index {index}")


class InvalidDocumentKeyError(FirestoreOdmError, ValueError):
    """Raised when a document key cannot be used as a single path segment."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Invalid document key: {key!r}")


def translate_error(
    error: core_exceptions.GoogleAPIError, name: Optional[str] = None
) -> FirestoreOdmError:
    """Map a google.api_core error for the resource ``name`` to this package's errors."""
    if isinstance(error, core_exceptions.NotFound):
        return DocumentNotFoundError(name or "")
    if isinstance(error, core_exceptions.AlreadyExists):
        return DocumentAlreadyExistsError(name or "")
    return TransportError(str(error))
