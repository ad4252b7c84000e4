"""
A tiny object-document mapper for Google Cloud Firestore, focused on a
key/value object store usage model.
"""

from tiny_firestore_odm.config import Config
from tiny_firestore_odm.exceptions import (
    DeserializationError,
    DocumentAlreadyExistsError,
    DocumentNameParseError,
    DocumentNotFoundError,
    FirestoreOdmError,
    InvalidDocumentKeyError,
    SerializationError,
    TransportError,
)
from tiny_firestore_odm.firestore import Collection, Database, ListResponse
from tiny_firestore_odm.identifiers import CollectionName, DocumentName
from tiny_firestore_odm.models import NamedDocument

__all__ = [
    "Collection",
    "CollectionName",
    "Config",
    "Database",
    "DeserializationError",
    "DocumentAlreadyExistsError",
    "DocumentName",
    "DocumentNameParseError",
    "DocumentNotFoundError",
    "FirestoreOdmError",
    "InvalidDocumentKeyError",
    "ListResponse",
    "NamedDocument",
    "SerializationError",
    "TransportError",
]
