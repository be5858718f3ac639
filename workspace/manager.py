"""
Workspace Manager — Persists output units to the archive directory.

Each unit is written to a hidden .partial file first and renamed into
place, so a file under its final name is always complete. Re-running an
archive overwrites files of the same name.
"""

import os
from pathlib import Path

from models import OutputUnit

PARTIAL_SUFFIX = ".partial"


def prepare_output_dir(path: str | Path) -> Path:
    """
    Create the output directory (and parents) if needed.

    Returns:
        Absolute path to the directory
    """
    folder = Path(path).expanduser().resolve()
    folder.mkdir(parents=True, exist_ok=True)
    return folder


def partial_path(folder: Path, name: str) -> Path:
    """Temporary path used while writing: .<name>.partial"""
    return folder / f".{name}{PARTIAL_SUFFIX}"


def write_output(folder: Path, unit: OutputUnit) -> Path:
    """
    Write one output unit atomically.

    Args:
        folder: Directory from prepare_output_dir()
        unit: File name and complete content

    Returns:
        Path to the written file

    Raises:
        OSError: Write or rename failed; the temporary file is removed
    """
    target = folder / unit.name
    temp = partial_path(folder, unit.name)
    try:
        temp.write_text(unit.content, encoding="utf-8")
        os.replace(temp, target)
    except OSError:
        temp.unlink(missing_ok=True)
        raise
    return target
