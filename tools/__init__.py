"""
Tools — archive implementations.

Each archiver has its own module wiring adapters, extractors and the
workspace together. cli.py provides thin wrappers that call into these.
"""

from .gmail_archive import do_archive_gmail
from .calendar_archive import do_archive_calendar, list_calendars
from .slack_archive import do_archive_slack

__all__ = [
    "do_archive_gmail",
    "do_archive_calendar",
    "list_calendars",
    "do_archive_slack",
]
