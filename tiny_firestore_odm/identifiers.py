"""
Fully-qualified Firestore resource names for collections and documents.

A collection name looks like::

    projects/{project}/databases/(default)/documents/users/alice/devices

and a document name appends one more segment (the document key).
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from tiny_firestore_odm.exceptions import (
    InvalidDocumentKeyError,
    InvalidPartError,
    TooFewPartsError,
    WrongNumberOfPartsError,
)

DEFAULT_DATABASE = "(default)"
DOCUMENTS_SEGMENT = "documents"

# projects/{project}/databases/(default) precede the document path
_PREFIX_PARTS = 4


@dataclass(frozen=True)
class CollectionName:
    """Name of a collection, or of the database root when ``collection`` is None."""

    project_id: str
    # (collection, key) pairs of the ancestor documents
    parent_path: Tuple[Tuple[str, str], ...] = ()
    collection: Optional[str] = None

    @classmethod
    def new(cls, project_id: str, collection: str) -> "CollectionName":
        """Top-level collection (a collection whose parent is the root)."""
        return cls(project_id=project_id, collection=collection)

    @classmethod
    def new_with_path(
        cls, project_id: str, path: Iterable[Tuple[str, str]], collection: str
    ) -> "CollectionName":
        """Collection nested under the documents given as (collection, key) pairs."""
        parent_path = tuple((parent, key) for parent, key in path)
        return cls(project_id=project_id, parent_path=parent_path, collection=collection)

    @classmethod
    def root(cls, project_id: str) -> "CollectionName":
        return cls(project_id=project_id)

    @property
    def is_root(self) -> bool:
        return self.collection is None

    def path(self) -> str:
        """Path relative to the database, starting with ``documents``."""
        if self.is_root:
            return DOCUMENTS_SEGMENT
        segments = [DOCUMENTS_SEGMENT]
        for parent, key in self.parent_path:
            segments.extend((parent, key))
        segments.append(self.collection)
        return "/".join(segments)

    def name(self) -> str:
        return f"projects/{self.project_id}/databases/{DEFAULT_DATABASE}/{self.path()}"

    def leaf_name(self) -> str:
        """The collection id, i.e. the last segment of the name."""
        return self.collection or ""

    def parent(self) -> Optional["DocumentName"]:
        """The document containing this collection; None for top-level collections and the root."""
        if self.is_root or not self.parent_path:
            return None
        *ancestors, (parent_collection, key) = self.parent_path
        collection = CollectionName(
            project_id=self.project_id,
            parent_path=tuple(ancestors),
            collection=parent_collection,
        )
        return DocumentName(collection=collection, key=key)

    def parent_collection(self) -> Optional["CollectionName"]:
        """The collection one level up; the root for top-level collections."""
        if self.is_root:
            return None
        parent = self.parent()
        if parent is None:
            return CollectionName.root(self.project_id)
        return parent.collection

    def parent_name(self) -> str:
        """Resource name used as ``parent`` in create/list requests."""
        parent = self.parent()
        if parent is None:
            return CollectionName.root(self.project_id).name()
        return parent.name()

    def document(self, key: str) -> "DocumentName":
        if self.is_root:
            raise ValueError("Documents cannot be stored directly under the database root")
        return DocumentName(collection=self, key=key)

    def subcollection(self, key: str, collection: str) -> "CollectionName":
        """Collection ``collection`` nested under document ``key`` of this collection."""
        if self.is_root:
            raise ValueError("The database root has no documents to nest collections under")
        return CollectionName(
            project_id=self.project_id,
            parent_path=self.parent_path + ((self.collection, key),),
            collection=collection,
        )

    @classmethod
    def parse(cls, name: str) -> "CollectionName":
        parts = name.split("/")

        if len(parts) < _PREFIX_PARTS + 1:
            raise TooFewPartsError(len(parts))
        if parts[0] != "projects":
            raise InvalidPartError(0)
        if parts[2] != "databases":
            raise InvalidPartError(2)
        if parts[3] != DEFAULT_DATABASE:
            raise InvalidPartError(3)

        path = parts[_PREFIX_PARTS:]
        if path[0] != DOCUMENTS_SEGMENT:
            raise InvalidPartError(_PREFIX_PARTS)

        project_id = parts[1]
        if len(path) == 1:
            return cls.root(project_id)

        # documents, (collection, key) pairs, leaf collection
        if len(path) % 2 != 0:
            raise WrongNumberOfPartsError(len(parts))

        pairs = path[1:-1]
        parent_path = tuple(zip(pairs[0::2], pairs[1::2]))
        return cls(project_id=project_id, parent_path=parent_path, collection=path[-1])

    def __str__(self) -> str:
        return self.name()


@dataclass(frozen=True)
class DocumentName:
    """Name of a single document: its collection plus a key."""

    collection: CollectionName
    key: str

    def name(self) -> str:
        return f"{self.collection.name()}/{self.key}"

    def leaf_name(self) -> str:
        """The document key, i.e. the last segment of the name."""
        return self.key

    def subcollection(self, collection: str) -> CollectionName:
        return self.collection.subcollection(self.key, collection)

    @classmethod
    def parse(cls, name: str) -> "DocumentName":
        collection_name, sep, key = name.rpartition("/")
        if not sep:
            raise TooFewPartsError(1)

        collection = CollectionName.parse(collection_name)
        if collection.is_root:
            # projects/p/databases/(default)/documents/{key} names a collection
            raise WrongNumberOfPartsError(len(name.split("/")))

        return cls(collection=collection, key=key)

    def __str__(self) -> str:
        return self.name()


DocumentKey = Union[str, DocumentName]


def _is_reserved_key(key: str) -> bool:
    # Firestore rejects these ids server-side
    return key in (".", "..") or (len(key) >= 4 and key.startswith("__") and key.endswith("__"))


def qualify(key: DocumentKey, collection: CollectionName) -> DocumentName:
    """Resolve a key against a collection. DocumentNames are already qualified."""
    if isinstance(key, DocumentName):
        return key
    if not key or "/" in key or _is_reserved_key(key):
        raise InvalidDocumentKeyError(key)
    return collection.document(key)
