"""Shared test fixtures."""

import uuid
from datetime import datetime
from enum import Enum
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest
from google.api_core import exceptions as core_exceptions
from google.cloud.firestore_v1.types import Document
from pydantic import BaseModel

from tiny_firestore_odm.firestore import Database
from tiny_firestore_odm.firestore.serialization import to_document

PROJECT_ID = "test-project"


class User(BaseModel):
    name: str
    email: str
    id: int
    city: Optional[str] = None


class Device(BaseModel):
    id: str


class Status(str, Enum):
    ACTIVE = "active"
    DISABLED = "disabled"


class Profile(BaseModel):
    user: User
    status: Status
    tags: List[str] = []
    joined_at: Optional[datetime] = None


def _copy(document: Document) -> Document:
    return Document.deserialize(Document.serialize(document))


def _precondition(request) -> Optional[bool]:
    """The request's ``exists`` precondition, or None when there is none."""
    if not request._pb.HasField("current_document"):
        return None
    if request.current_document._pb.WhichOneof("condition_type") != "exists":
        return None
    return request.current_document.exists


class FakeFirestoreClient:
    """
    In-memory stand-in for FirestoreAsyncClient.

    Honours exists preconditions and paginates list_documents by name, raising
    the same google.api_core errors as the real service.
    """

    def __init__(self):
        self.documents: Dict[str, Document] = {}
        self.calls: List[tuple] = []
        self.fail_with: Optional[Exception] = None

    def _record(self, method: str, request, metadata) -> None:
        self.calls.append((method, request, tuple(metadata)))
        if self.fail_with is not None:
            raise self.fail_with

    def put_raw(self, name: str, fields: dict) -> None:
        """Store a document bypassing the serialization layer."""
        document = to_document(SimpleModel(**fields)) if fields else Document()
        document.name = name
        self.documents[name] = document

    async def get_document(self, request, metadata=()):
        self._record("get_document", request, metadata)
        if request.name not in self.documents:
            raise core_exceptions.NotFound(f"Document not found: {request.name}")
        return _copy(self.documents[request.name])

    async def create_document(self, request, metadata=()):
        self._record("create_document", request, metadata)
        key = request.document_id or uuid.uuid4().hex[:20]
        name = f"{request.parent}/{request.collection_id}/{key}"
        if name in self.documents:
            raise core_exceptions.AlreadyExists(f"Document already exists: {name}")
        document = _copy(request.document)
        document.name = name
        self.documents[name] = document
        return _copy(document)

    async def update_document(self, request, metadata=()):
        self._record("update_document", request, metadata)
        name = request.document.name
        exists = _precondition(request)
        if exists is True and name not in self.documents:
            raise core_exceptions.NotFound(f"No document to update: {name}")
        if exists is False and name in self.documents:
            raise core_exceptions.AlreadyExists(f"Document already exists: {name}")
        self.documents[name] = _copy(request.document)
        return _copy(request.document)

    async def delete_document(self, request, metadata=()):
        self._record("delete_document", request, metadata)
        if _precondition(request) is True and request.name not in self.documents:
            raise core_exceptions.NotFound(f"No document to update: {request.name}")
        self.documents.pop(request.name, None)

    async def list_documents(self, request, metadata=()):
        self._record("list_documents", request, metadata)
        prefix = f"{request.parent}/{request.collection_id}/"
        names = sorted(
            name
            for name in self.documents
            if name.startswith(prefix) and "/" not in name[len(prefix):]
        )
        start = int(request.page_token or 0)
        end = start + (request.page_size or 300)
        return SimpleNamespace(
            documents=[_copy(self.documents[name]) for name in names[start:end]],
            next_page_token=str(end) if end < len(names) else "",
        )

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


class SimpleModel(BaseModel, extra="allow"):
    pass


@pytest.fixture
def fake_client() -> FakeFirestoreClient:
    return FakeFirestoreClient()


@pytest.fixture
def database(fake_client) -> Database:
    return Database(fake_client, PROJECT_ID, metadata=())


@pytest.fixture
def users(database):
    return database.collection("users", User)


@pytest.fixture
def bob() -> User:
    return User(name="Bob", email="bob@email", id=3)


@pytest.fixture
def alice() -> User:
    return User(name="Alice", email="alice@email", id=4)
