"""
Batch Writer — groups formatted records into bounded output units.

Also owns output naming: every file name is derived from a grouping key
sanitized to [A-Za-z0-9_].
"""

import re
from collections.abc import Iterable, Iterator

from extractors.calendar import UNKNOWN_MONTH, event_month_key, event_start_key
from models import Batch, CalendarEvent, ChatConversation

GMAIL_ALL_KEY = "all"

_UNSAFE = re.compile(r"[^A-Za-z0-9]")


class BatchWriter:
    """
    Accumulates records for one grouping key.

    add() hands back a full Batch as soon as max_size records are waiting;
    flush() hands back whatever is left. Indexes start at 1.
    """

    def __init__(self, key: str, max_size: int):
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.key = key
        self.max_size = max_size
        self._pending: list[str] = []
        self._next_index = 1

    def add(self, record: str) -> Batch | None:
        self._pending.append(record)
        if len(self._pending) >= self.max_size:
            return self._emit()
        return None

    def flush(self) -> Batch | None:
        if not self._pending:
            return None
        return self._emit()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def _emit(self) -> Batch:
        batch = Batch(key=self.key, index=self._next_index, records=self._pending)
        self._pending = []
        self._next_index += 1
        return batch


def iter_batches(records: Iterable[str], key: str, max_size: int) -> Iterator[Batch]:
    """Generator form of BatchWriter: every batch, the short one last."""
    writer = BatchWriter(key, max_size)
    for record in records:
        batch = writer.add(record)
        if batch is not None:
            yield batch
    tail = writer.flush()
    if tail is not None:
        yield tail


# =============================================================================
# OUTPUT NAMES
# =============================================================================


def sanitize_name(text: str) -> str:
    """
    Replace every character outside [A-Za-z0-9] with an underscore.

    Examples:
        "general" -> "general"
        "Work/Projects 2024" -> "Work_Projects_2024"
        "café" -> "caf_"
    """
    return _UNSAFE.sub("_", text) or "unnamed"


def gmail_output_name(label: str, index: int) -> str:
    if label == GMAIL_ALL_KEY:
        return f"gmail_archive_batch_{index}.txt"
    return f"gmail_{sanitize_name(label)}_batch_{index}.txt"


def calendar_output_name(calendar_name: str, year: int | None = None) -> str:
    name = sanitize_name(calendar_name)
    if year is None:
        return f"calendar_{name}.txt"
    return f"calendar_{name}_{year}.txt"


def chat_output_name(conversation: ChatConversation) -> str:
    return f"{sanitize_name(conversation.display_name)}.txt"


# =============================================================================
# CALENDAR GROUPING
# =============================================================================


def group_events_by_month(events: Iterable[CalendarEvent]) -> dict[str, list[CalendarEvent]]:
    """
    Group events by start month, months ascending.

    Within a month events are sorted by start time (stable, so events with
    the same start keep API order). Undated events go last under 'unknown'.
    """
    groups: dict[str, list[CalendarEvent]] = {}
    for event in events:
        groups.setdefault(event_month_key(event), []).append(event)

    ordered_keys = sorted(k for k in groups if k != UNKNOWN_MONTH)
    if UNKNOWN_MONTH in groups:
        ordered_keys.append(UNKNOWN_MONTH)

    return {key: sorted(groups[key], key=event_start_key) for key in ordered_keys}
