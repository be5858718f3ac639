"""
Extractors — Pure functions for content extraction.

No API calls, no logging, no file I/O. Just transform input → output.
Easily testable with fixtures.
"""

from .normalize import normalize_text, strip_email_cruft, FULL_STEPS, CHAT_STEPS
from .parts import (
    extract_content,
    part_from_gmail_payload,
    part_from_slack_message,
    part_from_calendar_event,
)
from .gmail import parse_email, format_email, render_gmail_file
from .slack import (
    parse_chat_message,
    format_chat_message,
    render_chat_file,
    unwrap_slack_markup,
)
from .calendar import parse_event, format_event, render_calendar_file

__all__ = [
    "normalize_text",
    "strip_email_cruft",
    "FULL_STEPS",
    "CHAT_STEPS",
    "extract_content",
    "part_from_gmail_payload",
    "part_from_slack_message",
    "part_from_calendar_event",
    "parse_email",
    "format_email",
    "render_gmail_file",
    "parse_chat_message",
    "format_chat_message",
    "render_chat_file",
    "unwrap_slack_markup",
    "parse_event",
    "format_event",
    "render_calendar_file",
]
