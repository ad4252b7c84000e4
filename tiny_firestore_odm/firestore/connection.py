"""
Firestore gRPC client construction.
"""

import asyncio
from typing import Optional, Sequence, Tuple

import google.auth
from google.auth import exceptions as auth_exceptions
from google.auth.credentials import Credentials
from google.cloud.firestore_v1.services.firestore import FirestoreAsyncClient
from google.cloud.firestore_v1.services.firestore.transports import (
    FirestoreGrpcAsyncIOTransport,
)
from grpc import aio

from tiny_firestore_odm.config import Config
from tiny_firestore_odm.exceptions import TransportError
from tiny_firestore_odm.logging import get_logger, log_error, log_info

logger = get_logger(__name__)

FIRESTORE_SCOPES = (
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/datastore",
)

# The emulator treats the "owner" bearer token as an admin, bypassing security rules
EMULATOR_METADATA: Tuple[Tuple[str, str], ...] = (("authorization", "Bearer owner"),)


async def discover_credentials() -> Tuple[Credentials, Optional[str]]:
    """
    Discover Application Default Credentials.

    google.auth.default may read files or query the metadata server, so it runs
    in a worker thread.

    Returns:
        (credentials, project_id) where project_id may be None
    """
    try:
        return await asyncio.to_thread(google.auth.default, scopes=list(FIRESTORE_SCOPES))
    except auth_exceptions.DefaultCredentialsError as e:
        log_error(f"Failed to discover Google Cloud credentials: {e}")
        raise TransportError(f"Failed to discover Google Cloud credentials: {e}") from e


def get_client(credentials: Optional[Credentials] = None) -> FirestoreAsyncClient:
    """Construct a Firestore client, connected to the emulator when one is configured."""
    emulator_host = Config.FIRESTORE_EMULATOR_HOST

    if emulator_host:
        log_info(f"Connecting to Firestore emulator: {emulator_host}")
        # The emulator speaks plaintext gRPC and needs no credentials
        channel = aio.insecure_channel(emulator_host)
        transport = FirestoreGrpcAsyncIOTransport(channel=channel)
        return FirestoreAsyncClient(transport=transport)

    try:
        client = FirestoreAsyncClient(credentials=credentials)
    except (auth_exceptions.GoogleAuthError, ValueError) as e:
        log_error(f"Failed to initialize Firestore client: {e}")
        raise TransportError(f"Failed to initialize Firestore client: {e}") from e
    logger.debug("Firestore client initialized")
    return client


def get_call_metadata() -> Sequence[Tuple[str, str]]:
    """Metadata attached to every RPC."""
    if Config.is_emulator():
        return EMULATOR_METADATA
    return ()


async def close_client(client: FirestoreAsyncClient) -> None:
    """Close the client's gRPC channel."""
    await client.transport.close()
    log_info("Firestore client closed")
