"""
Record builder — line-oriented text records with fixed delimiters.

Each source formatter describes its layout as an ordered tuple of section
emitters; render_record() runs them against one builder.
"""

from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

HEAVY_RULE = "=" * 80
LIGHT_RULE = "-" * 80
HASH_RULE = "#" * 80

# File banner terminators
BANNER_RULE = "#" + "=" * 79
CHAT_BANNER_RULE = "# " + "=" * 50


class RecordBuilder:
    """Accumulates lines; build() joins them with a trailing newline."""

    def __init__(self) -> None:
        self._lines: list[str] = []

    def rule(self, rule: str = HEAVY_RULE) -> "RecordBuilder":
        self._lines.append(rule)
        return self

    def field(self, key: str, value: object) -> "RecordBuilder":
        self._lines.append(f"{key}: {value}")
        return self

    def optional_field(self, key: str, value: object | None) -> "RecordBuilder":
        """field() only when value is non-empty."""
        if value:
            self.field(key, value)
        return self

    def blank(self) -> "RecordBuilder":
        self._lines.append("")
        return self

    def line(self, text: str) -> "RecordBuilder":
        self._lines.append(text)
        return self

    def lines(self, texts: Sequence[str]) -> "RecordBuilder":
        self._lines.extend(texts)
        return self

    def build(self) -> str:
        return "\n".join(self._lines) + "\n"


Section = Callable[[RecordBuilder, Any], None]


def render_record(record: Any, sections: Sequence[Section]) -> str:
    """Run section emitters in order and return the finished text."""
    builder = RecordBuilder()
    for section in sections:
        section(builder, record)
    return builder.build()


def format_exported(exported_at: datetime) -> str:
    """UTC ISO-8601 with milliseconds: 2026-02-23T09:00:00.000Z"""
    utc = exported_at.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
