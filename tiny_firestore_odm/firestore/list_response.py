"""
Lazy, paginated listing of the documents in a collection.
"""

from collections import deque
from typing import Deque, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from google.api_core import exceptions as core_exceptions
from google.cloud.firestore_v1.services.firestore import FirestoreAsyncClient
from google.cloud.firestore_v1.types import Document, ListDocumentsRequest
from pydantic import BaseModel

from tiny_firestore_odm.config import Config
from tiny_firestore_odm.exceptions import translate_error
from tiny_firestore_odm.firestore.serialization import from_document
from tiny_firestore_odm.identifiers import CollectionName, DocumentName
from tiny_firestore_odm.logging import get_logger, log_error, log_warning
from tiny_firestore_odm.models import NamedDocument

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class ListResponse(Generic[T]):
    """
    Async iterator over the documents of a collection, as NamedDocuments.

    Nothing is requested from Firestore until the first item is awaited. Pages are
    then fetched one at a time as the buffer drains, until the server stops
    returning a continuation token. A ListResponse is single use: call
    ``Collection.list()`` again to enumerate a second time.

    A document that fails to deserialize raises DeserializationError at its
    position. It is consumed either way, so a caller that catches the error can
    keep advancing past it.
    """

    def __init__(
        self,
        collection: CollectionName,
        client: FirestoreAsyncClient,
        model: Type[T],
        metadata: Sequence[Tuple[str, str]] = (),
    ):
        self._collection = collection
        self._client = client
        self._model = model
        self._metadata = metadata

        self._page_token: Optional[str] = None
        self._items: Deque[Document] = deque()
        # Set once the server has returned its last page; the buffer may still hold items
        self._depleted = False

        self._page_size = Config.LIST_PAGE_SIZE
        self._order_by = ""

    def with_page_size(self, page_size: int) -> "ListResponse[T]":
        self._page_size = page_size
        return self

    def with_order_by(self, order_by: str) -> "ListResponse[T]":
        self._order_by = order_by
        return self

    @property
    def depleted(self) -> bool:
        """True once every page has been fetched and every buffered document returned."""
        return self._depleted and not self._items

    async def _fetch_documents(self) -> Tuple[List[Document], str]:
        request = ListDocumentsRequest(
            parent=self._collection.parent_name(),
            collection_id=self._collection.leaf_name(),
            page_size=self._page_size,
            page_token=self._page_token or "",
            order_by=self._order_by,
        )
        try:
            # The pager exposes the fields of the first response only
            response = await self._client.list_documents(
                request=request, metadata=self._metadata
            )
        except core_exceptions.GoogleAPIError as e:
            log_error(f"Error listing documents: {e}", collection=self._collection.name())
            raise translate_error(e, self._collection.name()) from e

        documents = list(response.documents)
        logger.debug(
            f"Fetched {len(documents)} documents from {self._collection.name()}"
        )
        return documents, response.next_page_token

    async def _fetch_next_page(self) -> List[Document]:
        documents, page_token = await self._fetch_documents()
        if page_token:
            if not documents:
                log_warning(
                    "Empty page returned with a continuation token",
                    collection=self._collection.name(),
                    page_token=page_token,
                )
            self._page_token = page_token
        else:
            self._page_token = None
            self._depleted = True
        return documents

    def _to_named_document(self, document: Document) -> NamedDocument[T]:
        value = from_document(document, self._model)
        return NamedDocument[self._model](name=DocumentName.parse(document.name), value=value)

    async def get_page(self) -> List[NamedDocument[T]]:
        """
        Fetch a single page starting at the current continuation token.

        Successive calls walk through the pages; once the last page has been
        fetched an empty list is returned. Documents already buffered by
        iteration are not included.
        """
        if self._depleted:
            return []
        documents = await self._fetch_next_page()
        return [self._to_named_document(document) for document in documents]

    def __aiter__(self) -> "ListResponse[T]":
        return self

    async def __anext__(self) -> NamedDocument[T]:
        # Pages may come back empty while still carrying a continuation token
        while not self._items:
            if self._depleted:
                raise StopAsyncIteration
            self._items.extend(await self._fetch_next_page())

        return self._to_named_document(self._items.popleft())

    async def collect(self) -> List[NamedDocument[T]]:
        """Drain the remaining documents into a list."""
        return [document async for document in self]
