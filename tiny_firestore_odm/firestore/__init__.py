"""
Firestore client, database and collection layer.
"""

from tiny_firestore_odm.firestore.collection import Collection
from tiny_firestore_odm.firestore.connection import (
    close_client,
    discover_credentials,
    get_client,
)
from tiny_firestore_odm.firestore.database import Database
from tiny_firestore_odm.firestore.emulator import clear_emulator
from tiny_firestore_odm.firestore.list_response import ListResponse
from tiny_firestore_odm.firestore.serialization import from_document, to_document

__all__ = [
    "Collection",
    "Database",
    "ListResponse",
    "clear_emulator",
    "close_client",
    "discover_credentials",
    "from_document",
    "get_client",
    "to_document",
]
