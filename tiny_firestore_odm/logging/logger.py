"""
Logging configuration and utilities.
"""

import inspect
import json
import logging
import socket
import sys
from datetime import datetime
from typing import Any, Dict, Optional

from elasticsearch import Elasticsearch

from tiny_firestore_odm.config import Config


class CloudLoggingJSONFormatter(logging.Formatter):
    """
    Formatter that outputs JSON for Cloud Logging when the message carries structured data.
    Cloud Logging parses JSON from stdout if the line starts with '{'.
    """

    def format(self, record):
        message = record.getMessage()
        if message.strip().startswith("{"):
            try:
                parsed = json.loads(message)
            except (json.JSONDecodeError, ValueError, TypeError):
                parsed = None
            if isinstance(parsed, dict):
                log_entry = {
                    "severity": record.levelname,
                    "message": parsed.get("message", message),
                    "timestamp": datetime.utcnow().isoformat() + "Z",
                    "logger": record.name,
                }
                for key, value in parsed.items():
                    if key != "message":
                        log_entry[key] = value
                return json.dumps(log_entry)

        return super().format(record)


class ElasticsearchHandler(logging.Handler):
    """Handler that indexes log records into Elasticsearch."""

    def __init__(self, es_client: Elasticsearch, index_pattern: str = "logs-{date}"):
        super().__init__()
        self.es_client = es_client
        self.index_pattern = index_pattern
        self.hostname = socket.gethostname()
        self._processing = False

    def build_document(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Turn a record into the document stored in Elasticsearch."""
        formatted = self.format(record)
        doc: Dict[str, Any] = {}
        if formatted.strip().startswith("{"):
            try:
                parsed = json.loads(formatted)
                if isinstance(parsed, dict):
                    doc = parsed
            except (json.JSONDecodeError, ValueError, TypeError):
                pass
        if not doc:
            doc = {"message": formatted}

        doc.setdefault("timestamp", datetime.utcnow().isoformat() + "Z")
        doc.setdefault("level", record.levelname)
        doc.setdefault("severity", record.levelname)
        doc.setdefault("service", Config.SERVICE_NAME)
        doc["logger"] = record.name
        doc["hostname"] = self.hostname
        return doc

    def emit(self, record):
        # Indexing can itself log through the elasticsearch client
        if self._processing:
            return

        self._processing = True
        try:
            index_name = self.index_pattern.format(
                date=datetime.utcnow().strftime("%Y.%m.%d")
            )
            self.es_client.index(index=index_name, document=self.build_document(record))
        except Exception:
            self.handleError(record)
        finally:
            self._processing = False


def _create_elasticsearch_handler(
    formatter: logging.Formatter, level: int
) -> Optional[ElasticsearchHandler]:
    url = Config.get_elasticsearch_url()
    if url is None:
        return None

    es_client = Elasticsearch(
        [url],
        verify_certs=False,
        ssl_show_warn=False,
        request_timeout=2,
        max_retries=0,
    )
    # Skip the handler entirely if the cluster is not reachable
    if not es_client.ping(request_timeout=1):
        print(f"[ELASTICSEARCH] Ping to {url} failed, handler not added", file=sys.stderr)
        return None

    handler = ElasticsearchHandler(es_client)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logger(
    service_name: Optional[str] = None, log_level: Optional[str] = None
) -> logging.Logger:
    """Setup and configure the root logger for an application using this package."""

    name = service_name or Config.SERVICE_NAME
    level = getattr(logging, (log_level or Config.LOG_LEVEL).upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    formatter = CloudLoggingJSONFormatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # The host application may already have installed a console handler
    if not any(isinstance(h, logging.StreamHandler) for h in root_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if not any(isinstance(h, ElasticsearchHandler) for h in root_logger.handlers):
        es_handler = _create_elasticsearch_handler(formatter, level)
        if es_handler is not None:
            root_logger.addHandler(es_handler)

    return logging.getLogger(name)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger. Handlers are left to the application (see setup_logger)."""
    return logging.getLogger(name)


class StructuredLogger:
    """
    Wrapper around logger that adds structured fields for Google Cloud Logging.
    This allows filtering by fields like collection or document in Logs Explorer.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _format_structured_message(
        self,
        message: str,
        collection: Optional[str] = None,
        document: Optional[str] = None,
        **kwargs,
    ) -> str:
        """
        Format message with structured fields for Cloud Logging.

        When any structured field is present, the whole message is rendered as a
        JSON object which CloudLoggingJSONFormatter expands into a JSON log line.
        Plain messages are passed through untouched.
        """
        if not (collection or document or kwargs):
            return message

        structured_data: Dict[str, Any] = {"message": message}
        if collection:
            structured_data["collection"] = collection
        if document:
            structured_data["document"] = document
        structured_data.update(kwargs)
        return json.dumps(structured_data, default=str)

    def debug(
        self,
        message: str,
        collection: Optional[str] = None,
        document: Optional[str] = None,
        **kwargs,
    ):
        """Log debug message with optional structured fields."""
        formatted = self._format_structured_message(message, collection, document, **kwargs)
        self.logger.debug(formatted)

    def info(
        self,
        message: str,
        collection: Optional[str] = None,
        document: Optional[str] = None,
        **kwargs,
    ):
        """Log info message with optional structured fields."""
        formatted = self._format_structured_message(message, collection, document, **kwargs)
        self.logger.info(formatted)

    def warning(
        self,
        message: str,
        collection: Optional[str] = None,
        document: Optional[str] = None,
        **kwargs,
    ):
        """Log warning message with optional structured fields."""
        formatted = self._format_structured_message(message, collection, document, **kwargs)
        self.logger.warning(formatted)

    def error(
        self,
        message: str,
        collection: Optional[str] = None,
        document: Optional[str] = None,
        exc_info: bool = False,
        **kwargs,
    ):
        self.logger.error(
            self._format_structured_message(message, collection, document, **kwargs),
            exc_info=exc_info,
        )

    def __getattr__(self, name: str):
        """Delegate other attributes to the underlying logger."""
        return getattr(self.logger, name)


def get_structured_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger that supports collection/document filtering.

    Usage:
        logger = get_structured_logger(__name__)
        logger.info("Document created", collection="users", document="abc")

    In Logs Explorer, you can then filter by:
        jsonPayload.collection="users"
    """
    return StructuredLogger(logging.getLogger(name))


def _caller_logger_name() -> str:
    # Two frames up: the log_* helper, then its caller
    frame = inspect.currentframe()
    try:
        caller_frame = frame.f_back.f_back
        return caller_frame.f_globals.get("__name__", "root")
    finally:
        del frame


def log_debug(message: str, logger_name: Optional[str] = None, **kwargs):
    """Log a debug message with structured fields, under the caller's module logger."""
    get_structured_logger(logger_name or _caller_logger_name()).debug(message, **kwargs)


def log_info(message: str, logger_name: Optional[str] = None, **kwargs):
    """
    Log an info message with structured fields.

    Args:
        message: The log message (collection/document go in kwargs, not in the string)
        logger_name: Optional logger name (defaults to caller's module name)
        **kwargs: Structured fields to include in the log (e.g., collection, document)
    """
    get_structured_logger(logger_name or _caller_logger_name()).info(message, **kwargs)


def log_warning(message: str, logger_name: Optional[str] = None, **kwargs):
    """Log a warning message with structured fields, under the caller's module logger."""
    get_structured_logger(logger_name or _caller_logger_name()).warning(message, **kwargs)


def log_error(message: str, logger_name: Optional[str] = None, **kwargs):
    """Log an error message with structured fields, under the caller's module logger."""
    get_structured_logger(logger_name or _caller_logger_name()).error(message, **kwargs)
