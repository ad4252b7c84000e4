"""
Helpers for the local Firestore emulator.
"""

from typing import Optional

import aiohttp

from tiny_firestore_odm.config import Config
from tiny_firestore_odm.identifiers import DEFAULT_DATABASE
from tiny_firestore_odm.logging import log_info


def get_emulator_documents_url(project_id: str, host: Optional[str] = None) -> str:
    host = host or Config.FIRESTORE_EMULATOR_HOST
    if not host:
        raise RuntimeError("FIRESTORE_EMULATOR_HOST is not set")
    return (
        f"http://{host}/emulator/v1/projects/{project_id}"
        f"/databases/{DEFAULT_DATABASE}/documents"
    )


async def clear_emulator(project_id: str, host: Optional[str] = None) -> None:
    """Delete every document of ``project_id`` stored in the emulator."""
    url = get_emulator_documents_url(project_id, host)
    async with aiohttp.ClientSession() as session:
        async with session.delete(url) as response:
            response.raise_for_status()
    log_info(f"Cleared Firestore emulator data for project: {project_id}")
