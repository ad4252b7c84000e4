"""
Database handle: owns the Firestore client and project, hands out collections.
"""

from typing import Optional, Sequence, Tuple, Type, TypeVar

from google.auth.credentials import Credentials
from google.cloud.firestore_v1.services.firestore import FirestoreAsyncClient
from pydantic import BaseModel

from tiny_firestore_odm.config import Config
from tiny_firestore_odm.exceptions import TransportError
from tiny_firestore_odm.firestore.collection import Collection
from tiny_firestore_odm.firestore.connection import (
    close_client,
    discover_credentials,
    get_call_metadata,
    get_client,
)
from tiny_firestore_odm.identifiers import CollectionName
from tiny_firestore_odm.logging import get_logger, log_info

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class Database:
    """
    A Firestore database.

    The client is shared by every collection handed out; it multiplexes
    concurrent RPCs over one channel.
    """

    def __init__(
        self,
        client: FirestoreAsyncClient,
        project_id: str,
        metadata: Optional[Sequence[Tuple[str, str]]] = None,
    ):
        self._client = client
        self._project_id = project_id
        self._metadata = tuple(get_call_metadata() if metadata is None else metadata)

    @classmethod
    async def connect(
        cls,
        credentials: Optional[Credentials] = None,
        project_id: Optional[str] = None,
    ) -> "Database":
        """
        Connect to Firestore.

        Args:
            credentials: Credentials to authenticate with. Discovered from the
                environment (Application Default Credentials) when omitted.
            project_id: Project to use. Defaults to Config.GOOGLE_CLOUD_PROJECT,
                then to the project attached to the discovered credentials.

        Raises:
            TransportError: credentials or the project could not be determined,
                or the client could not be constructed
        """
        project_id = project_id or Config.GOOGLE_CLOUD_PROJECT

        if credentials is None and not Config.is_emulator():
            credentials, discovered_project = await discover_credentials()
            project_id = project_id or discovered_project

        if not project_id:
            raise TransportError(
                "No Google Cloud project configured; set GOOGLE_CLOUD_PROJECT or pass project_id"
            )

        client = get_client(credentials)
        log_info(f"Connected to Firestore project: {project_id}")
        return cls(client, project_id)

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def client(self) -> FirestoreAsyncClient:
        return self._client

    def collection(self, name: str, model: Type[T]) -> Collection[T]:
        """Returns a top-level collection from this database."""
        return Collection(
            self._client, CollectionName.new(self._project_id, name), model, self._metadata
        )

    async def close(self) -> None:
        await close_client(self._client)

    async def __aenter__(self) -> "Database":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.close()
