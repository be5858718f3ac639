"""
Shared helpers for the archive tools.

Writing an output unit and recording collection failures look the same
for every source.
"""

from pathlib import Path

from logging_config import log_collection_failed, log_unit_written, logger
from models import ArchiveError, ArchiveResult, ErrorKind, OutputUnit
from workspace import write_output


def write_unit(
    folder: Path,
    unit: OutputUnit,
    record_count: int,
    result: ArchiveResult,
    key: str,
) -> bool:
    """
    Write one unit and account for it in the result.

    Returns:
        True if written. False means the write failed and was recorded
        as WRITE_FAILED for this key; the caller stops that key.
    """
    try:
        path = write_output(folder, unit)
    except OSError as e:
        error = ArchiveError(
            ErrorKind.WRITE_FAILED,
            f"Could not write {unit.name}: {e}",
            details={"file": unit.name},
        )
        logger.error(error.message)
        result.add_error(error, key=key)
        return False

    log_unit_written(path.name, record_count)
    result.files.append(path.name)
    result.items += record_count
    return True


def record_failure(result: ArchiveResult, error: ArchiveError, key: str) -> None:
    """Log and record a collection that stopped early. The run continues."""
    log_collection_failed(key, error.message)
    result.add_error(error, key=key)
