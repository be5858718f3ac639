"""
Logging for muniment.

One package logger shared by adapters, tools and the CLI. Extractors stay
silent; anything they notice goes into ExtractedContent.warnings.
Nothing is configured on import: cli.py calls configure_logging().
"""

import logging
import sys

logger = logging.getLogger("muniment")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Set the package log level and attach a stderr handler once.

    Args:
        level: DEBUG, INFO, WARNING or ERROR (case-insensitive)

    Raises:
        ValueError: Unknown level name
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level '{level}'")
    logger.setLevel(numeric)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(handler)


def log_api_call(service: str, method: str, **params: object) -> None:
    """Debug line for an outgoing request. None-valued params are left out."""
    args = ", ".join(f"{k}={v!r}" for k, v in params.items() if v is not None)
    logger.debug(f"API: {service}.{method}({args})")


def log_api_result(service: str, method: str, result_count: int | None = None) -> None:
    if result_count is None:
        logger.debug(f"API: {service}.{method} completed")
    else:
        logger.debug(f"API: {service}.{method} returned {result_count} results")


def log_page(collection: str, page_number: int, item_count: int, has_more: bool) -> None:
    """Log one page of a paginated enumeration."""
    more = "more to come" if has_more else "last page"
    logger.debug(f"Page {page_number} of {collection or 'collection'}: {item_count} items ({more})")


def log_unit_written(name: str, record_count: int) -> None:
    """Log an output file landing on disk."""
    logger.info(f"Saved {record_count} records to {name}")


def log_collection_failed(collection: str, message: str) -> None:
    """Log an aborted collection. The run carries on with the next one."""
    logger.error(f"Archiving {collection} stopped early: {message}")
