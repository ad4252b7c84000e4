"""
Typed collection handle: keyed create/get/update/delete plus listing.

Each write method maps to one Firestore write precondition:

    create           CreateDocument, key assigned by the server
    create_with_key  UpdateDocument, document must not exist
    try_create       UpdateDocument, document must not exist (conflict is not an error)
    upsert           UpdateDocument, unconditional
    update           UpdateDocument, document must exist
    delete           DeleteDocument, document must exist

Updates carry no field mask, so the stored document is always replaced whole.
"""

from typing import Generic, Optional, Sequence, Tuple, Type, TypeVar

from google.api_core import exceptions as core_exceptions
from google.cloud.firestore_v1.services.firestore import FirestoreAsyncClient
from google.cloud.firestore_v1.types import (
    CreateDocumentRequest,
    DeleteDocumentRequest,
    Document,
    GetDocumentRequest,
    Precondition,
    UpdateDocumentRequest,
)
from pydantic import BaseModel

from tiny_firestore_odm.exceptions import (
    DocumentAlreadyExistsError,
    FirestoreOdmError,
    TransportError,
    translate_error,
)
from tiny_firestore_odm.firestore.list_response import ListResponse
from tiny_firestore_odm.firestore.serialization import from_document, to_document
from tiny_firestore_odm.identifiers import CollectionName, DocumentKey, DocumentName, qualify
from tiny_firestore_odm.logging import get_logger, log_debug, log_error

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)
S = TypeVar("S", bound=BaseModel)


class Collection(Generic[T]):
    """
    A collection of documents in a Firestore database.

    Documents in Firestore have no type, but each Collection is bound to a pydantic
    model. Values are serialized from it on write and validated into it on read.
    """

    def __init__(
        self,
        client: FirestoreAsyncClient,
        name: CollectionName,
        model: Type[T],
        metadata: Sequence[Tuple[str, str]] = (),
    ):
        self._client = client
        self._name = name
        self._model = model
        self._metadata = metadata

    @property
    def name(self) -> CollectionName:
        return self._name

    @property
    def model(self) -> Type[T]:
        return self._model

    def list(self) -> ListResponse[T]:
        """Returns an async iterator over all of the documents in the collection."""
        return ListResponse(self._name, self._client, self._model, self._metadata)

    def subcollection(self, key: DocumentKey, collection: str, model: Type[S]) -> "Collection[S]":
        """Collection ``collection`` nested under the document ``key`` of this collection."""
        parent = qualify(key, self._name)
        return Collection(
            self._client, parent.subcollection(collection), model, self._metadata
        )

    def _translate(
        self, error: core_exceptions.GoogleAPIError, name: str, action: str
    ) -> FirestoreOdmError:
        translated = translate_error(error, name)
        if isinstance(translated, TransportError):
            log_error(
                f"Error during {action}: {error}",
                collection=self._name.name(),
                document=name,
            )
        else:
            logger.debug(f"{action} of {name} rejected: {translated}")
        return translated

    async def _update_document(
        self, document: Document, precondition: Optional[Precondition] = None
    ) -> None:
        request = UpdateDocumentRequest(document=document)
        if precondition is not None:
            request.current_document = precondition
        await self._client.update_document(request=request, metadata=self._metadata)

    async def create(self, value: T) -> DocumentName:
        """Add ``value`` to this collection under a new server-assigned key."""
        request = CreateDocumentRequest(
            parent=self._name.parent_name(),
            collection_id=self._name.leaf_name(),
            document=to_document(value),
        )
        try:
            result = await self._client.create_document(
                request=request, metadata=self._metadata
            )
        except core_exceptions.GoogleAPIError as e:
            raise self._translate(e, self._name.name(), "create") from e

        name = DocumentName.parse(result.name)
        logger.debug(f"Created document: {name}")
        return name

    async def create_with_key(self, value: T, key: DocumentKey) -> None:
        """
        Create ``value`` in this collection under ``key``.

        Raises:
            DocumentAlreadyExistsError: the key is already in use (use upsert to replace)
        """
        name = qualify(key, self._name).name()
        try:
            await self._update_document(
                to_document(value, name), Precondition(exists=False)
            )
        except core_exceptions.GoogleAPIError as e:
            raise self._translate(e, name, "create_with_key") from e
        logger.debug(f"Created document: {name}")

    async def try_create(self, value: T, key: DocumentKey) -> bool:
        """
        Create ``value`` under ``key`` unless a document already exists there.

        Returns:
            True if the document was created, False if it already existed
        """
        try:
            await self.create_with_key(value, key)
        except DocumentAlreadyExistsError:
            log_debug(
                "Document already exists, not created",
                collection=self._name.name(),
                document=qualify(key, self._name).name(),
            )
            return False
        return True

    async def upsert(self, value: T, key: DocumentKey) -> None:
        """Overwrite the document at ``key``, creating it if it does not exist."""
        name = qualify(key, self._name).name()
        try:
            await self._update_document(to_document(value, name))
        except core_exceptions.GoogleAPIError as e:
            raise self._translate(e, name, "upsert") from e
        logger.debug(f"Upserted document: {name}")

    async def update(self, value: T, key: DocumentKey) -> None:
        """
        Replace the document at ``key``.

        Raises:
            DocumentNotFoundError: no document exists at ``key``
        """
        name = qualify(key, self._name).name()
        try:
            await self._update_document(
                to_document(value, name), Precondition(exists=True)
            )
        except core_exceptions.GoogleAPIError as e:
            raise self._translate(e, name, "update") from e
        logger.debug(f"Updated document: {name}")

    async def get(self, key: DocumentKey) -> T:
        """
        Get the document with a given key.

        Raises:
            DocumentNotFoundError: no document exists at ``key``
            DeserializationError: the stored document does not match the model
        """
        name = qualify(key, self._name).name()
        try:
            document = await self._client.get_document(
                request=GetDocumentRequest(name=name), metadata=self._metadata
            )
        except core_exceptions.GoogleAPIError as e:
            raise self._translate(e, name, "get") from e
        return from_document(document, self._model)

    async def delete(self, key: DocumentKey) -> None:
        """
        Delete the document with a given key.

        Raises:
            DocumentNotFoundError: no document exists at ``key``
        """
        name = qualify(key, self._name).name()
        request = DeleteDocumentRequest(
            name=name, current_document=Precondition(exists=True)
        )
        try:
            await self._client.delete_document(request=request, metadata=self._metadata)
        except core_exceptions.GoogleAPIError as e:
            raise self._translate(e, name, "delete") from e
        logger.debug(f"Deleted document: {name}")

    def __repr__(self) -> str:
        return f"Collection({self._name.name()!r}, {self._model.__name__})"
