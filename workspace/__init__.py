"""
Workspace — Output directory, file naming and batching.

Formatted records are grouped into batches, named from their grouping key
and written to the archive directory with write-then-rename.
"""

from .manager import (
    partial_path,
    prepare_output_dir,
    write_output,
)
from .batching import (
    BatchWriter,
    iter_batches,
    sanitize_name,
    gmail_output_name,
    calendar_output_name,
    chat_output_name,
    group_events_by_month,
)

__all__ = [
    "partial_path",
    "prepare_output_dir",
    "write_output",
    "BatchWriter",
    "iter_batches",
    "sanitize_name",
    "gmail_output_name",
    "calendar_output_name",
    "chat_output_name",
    "group_events_by_month",
]
