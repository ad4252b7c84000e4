"""
Conversion between pydantic models and Firestore documents.

Values are encoded with the Firestore client's own value codec
(``google.cloud.firestore_v1._helpers``). That module is private, which is why
setup.py caps google-cloud-firestore below the next major version.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar
from uuid import UUID

from google.cloud.firestore_v1 import _helpers
from google.cloud.firestore_v1.types import Document
from pydantic import BaseModel, ValidationError

from tiny_firestore_odm.exceptions import DeserializationError, SerializationError

T = TypeVar("T", bound=BaseModel)


def prepare_value_for_firestore(value: Any) -> Any:
    """
    Recursively convert Python values the Firestore encoder does not accept.

    Timestamps are stored in UTC and always read back timezone-aware, so a naive
    datetime could never compare equal to what is read back. Those are rejected
    with SerializationError; use ``datetime.now(timezone.utc)`` instead of
    ``datetime.utcnow()``.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            raise SerializationError(
                f"Naive datetime {value.isoformat()} cannot be stored, attach a timezone"
            )
        return value
    if isinstance(value, Enum):
        return prepare_value_for_firestore(value.value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, dict):
        return {str(k): prepare_value_for_firestore(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [prepare_value_for_firestore(v) for v in value]
    return value


def to_fields(value: BaseModel) -> Dict[str, Any]:
    """Encode a model as a map of Firestore Value messages."""
    data = prepare_value_for_firestore(value.model_dump(mode="python", by_alias=True))
    try:
        return _helpers.encode_dict(data)
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"Cannot encode {type(value).__name__} as Firestore fields: {e}"
        ) from e


def to_document(value: BaseModel, name: Optional[str] = None) -> Document:
    """
    Convert a model to a Firestore Document.

    Args:
        value: Model instance to store
        name: Fully-qualified document name, or None to let the server assign one

    Returns:
        Document ready for a create/update request

    Raises:
        SerializationError: a field holds a value Firestore cannot store
    """
    document = Document(fields=to_fields(value))
    if name:
        document.name = name
    return document


def from_document(document: Document, model: Type[T]) -> T:
    """
    Convert a Firestore Document back into ``model``.

    Raises:
        DeserializationError: the stored fields cannot be decoded, or do not
            validate against ``model``
    """
    try:
        # Without a client, reference values cannot be decoded and raise AttributeError
        data = _helpers.decode_dict(document.fields, None)
        return model.model_validate(data)
    except (AttributeError, TypeError, ValueError, ValidationError) as e:
        raise DeserializationError(document.name, model.__name__, str(e)) from e
