"""
Configuration management for the Firestore mapping layer.
"""

import os
from typing import Optional


class Config:
    """Configuration class for client settings."""

    # Firestore Configuration
    GOOGLE_CLOUD_PROJECT: str = os.getenv(
        "GOOGLE_CLOUD_PROJECT", os.getenv("GCP_PROJECT_ID", "")
    )
    FIRESTORE_EMULATOR_HOST: Optional[str] = os.getenv("FIRESTORE_EMULATOR_HOST")

    # Page size requested when listing a collection (0 lets the server decide)
    LIST_PAGE_SIZE: int = int(os.getenv("FIRESTORE_LIST_PAGE_SIZE", "0"))

    # Logging Configuration
    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "tiny_firestore_odm")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Elasticsearch log shipping (optional)
    ELASTICSEARCH_HOST: Optional[str] = os.getenv("ELASTICSEARCH_HOST")
    ELASTICSEARCH_PORT: int = int(os.getenv("ELASTICSEARCH_PORT", "9200"))

    @classmethod
    def is_emulator(cls) -> bool:
        """Whether requests should go to the local Firestore emulator."""
        return bool(cls.FIRESTORE_EMULATOR_HOST)

    @classmethod
    def get_elasticsearch_url(cls) -> Optional[str]:
        """Get the Elasticsearch URL, or None when log shipping is not configured."""
        if not cls.ELASTICSEARCH_HOST:
            return None
        return f"http://{cls.ELASTICSEARCH_HOST}:{cls.ELASTICSEARCH_PORT}"
