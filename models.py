"""
Type definitions for muniment.

Dataclasses defining the contracts between layers:
- Adapters hand out raw API records page by page
- Extractors turn raw records into these structures and render text
- Tools wire everything together and report ArchiveResult

These types make the adapter→extractor contract explicit and IDE-checkable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# Raw API record (Gmail message, Calendar event, Slack message). Opaque to
# everything except the parse_* functions in extractors/.
RawItem = dict[str, Any]


# ============================================================================
# ERROR TYPES
# ============================================================================

class ErrorKind(Enum):
    """Categories of errors for consistent handling."""
    AUTH_EXPIRED = "auth_expired"        # Token needs refresh
    AUTH_REQUIRED = "auth_required"      # No usable credential at all
    NOT_FOUND = "not_found"              # Resource doesn't exist
    PERMISSION_DENIED = "permission_denied"  # No access to resource
    RATE_LIMITED = "rate_limited"        # Hit API quota
    NETWORK_ERROR = "network_error"      # Connection failed
    TIMEOUT = "timeout"                  # Request timed out
    INVALID_INPUT = "invalid_input"      # Bad configuration or parameters
    FETCH_FAILED = "fetch_failed"        # Enumeration aborted mid-collection
    WRITE_FAILED = "write_failed"        # Output file couldn't be written
    UNKNOWN = "unknown"                  # Unexpected error


class ArchiveError(Exception):
    """
    Structured error for consistent handling across layers.

    Adapters raise these on API failures (converted by @translate_errors).
    Tools catch them per collection and record them in ArchiveResult.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for CLI output."""
        return {
            "error": True,
            "kind": self.kind.value,
            "message": self.message,
            **self.details,
        }


class FetchFailedError(ArchiveError):
    """
    A paginated enumeration stopped because a fetch failed.

    Items yielded before the failure remain with the consumer; this error
    only says how far enumeration got and why it stopped.
    """

    def __init__(
        self,
        collection: str,
        cause: Exception,
        pages_fetched: int = 0,
        items_yielded: int = 0,
    ):
        cause_kind = cause.kind.value if isinstance(cause, ArchiveError) else ErrorKind.UNKNOWN.value
        super().__init__(
            ErrorKind.FETCH_FAILED,
            f"Fetch failed for {collection or 'collection'}: {cause}",
            details={
                "collection": collection,
                "cause_kind": cause_kind,
                "pages_fetched": pages_fetched,
                "items_yielded": items_yielded,
            },
        )
        self.collection = collection
        self.cause = cause
        self.pages_fetched = pages_fetched
        self.items_yielded = items_yielded


# ============================================================================
# PAGINATION TYPES
# ============================================================================

@dataclass
class Page:
    """One page of a cursor-paginated API collection."""
    items: list[RawItem]
    next_cursor: str | None = None


@dataclass
class PageCollection:
    """
    Result of draining a paginated enumeration.

    error is set when enumeration stopped early; items then holds
    everything fetched before the failure.
    """
    items: list[RawItem]
    error: FetchFailedError | None = None

    @property
    def complete(self) -> bool:
        return self.error is None


# ============================================================================
# CONTENT TYPES
# ============================================================================

@dataclass
class Part:
    """
    A node in a nested content tree.

    Gmail MIME parts map onto this directly. Slack messages and Calendar
    events are shaped into the same tree (text body + file children) so
    one visitor handles all three.
    """
    mime_type: str
    body: str | None = None
    filename: str | None = None
    size: int = 0
    parts: list["Part"] = field(default_factory=list)


@dataclass
class AttachmentInfo:
    """Attachment metadata (never the content itself)."""
    name: str
    mime_type: str
    size: int = 0


@dataclass
class ExtractedContent:
    """Plain text plus attachment listing for one item."""
    plain_text: str
    attachments: list[AttachmentInfo] = field(default_factory=list)

    # Guard trips during traversal (cycles, depth limit)
    warnings: list[str] = field(default_factory=list)


# ============================================================================
# GMAIL TYPES
# ============================================================================

@dataclass
class GmailLabel:
    """A Gmail label (system or user)."""
    label_id: str
    name: str
    label_type: str = "user"  # "system" or "user"


@dataclass
class EmailRecord:
    """A single Gmail message, ready for formatting."""
    message_id: str
    thread_id: str
    content: ExtractedContent

    # Header values as sent; None when the header is absent
    from_address: str | None = None
    to_addresses: str | None = None
    cc_addresses: str | None = None
    subject: str | None = None
    date: str | None = None

    label_ids: list[str] = field(default_factory=list)


# ============================================================================
# CALENDAR TYPES
# ============================================================================

@dataclass
class CalendarInfo:
    """An entry from the user's calendar list."""
    calendar_id: str
    summary: str
    primary: bool = False
    access_role: str = "unknown"


@dataclass
class CalendarAttendee:
    """An attendee of a calendar event."""
    email: str
    display_name: str | None = None
    response_status: str | None = None  # needsAction, declined, tentative, accepted
    optional: bool = False
    organizer: bool = False


@dataclass
class ConferenceEntry:
    """A conference entry point (video link, dial-in)."""
    entry_type: str  # video, phone, sip, more
    uri: str


@dataclass
class CalendarReminder:
    """A reminder override on an event."""
    minutes: int
    method: str


@dataclass
class CalendarEvent:
    """A calendar event, ready for formatting."""
    event_id: str
    summary: str | None
    content: ExtractedContent

    # Raw start/end values: dateTime (RFC3339) for timed events,
    # date (YYYY-MM-DD) for all-day events
    start_date_time: str | None = None
    start_date: str | None = None
    end_date_time: str | None = None
    end_date: str | None = None

    status: str | None = None
    visibility: str | None = None
    location: str | None = None
    organizer: str | None = None  # displayName or email

    attendees: list[CalendarAttendee] = field(default_factory=list)
    conference: list[ConferenceEntry] = field(default_factory=list)
    recurrence: list[str] = field(default_factory=list)

    # None = no reminders block; True = default reminders
    reminders_default: bool | None = None
    reminder_overrides: list[CalendarReminder] = field(default_factory=list)

    has_description: bool = False


# ============================================================================
# CHAT TYPES
# ============================================================================

@dataclass
class ChatConversation:
    """A Slack conversation (channel, private group, DM, group DM)."""
    conversation_id: str
    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.conversation_id


@dataclass
class ChatMessage:
    """A single Slack message, ready for formatting."""
    ts: str
    content: ExtractedContent
    user: str | None = None
    bot_id: str | None = None
    username: str | None = None
    reply_count: int = 0

    @property
    def timestamp(self) -> float:
        """Seconds since epoch; unparseable ts sorts first."""
        try:
            return float(self.ts)
        except (TypeError, ValueError):
            return 0.0


# ============================================================================
# OUTPUT TYPES
# ============================================================================

@dataclass
class Batch:
    """Bounded, ordered group of formatted records for one output unit."""
    key: str
    index: int  # 1-based, increasing per key
    records: list[str]

    def __len__(self) -> int:
        return len(self.records)


@dataclass
class OutputUnit:
    """One complete output file: name plus full text content."""
    name: str
    content: str


# ============================================================================
# TOOL RESPONSE TYPES
# ============================================================================

@dataclass
class ArchiveResult:
    """Outcome of one archiving run."""
    source: str                  # 'gmail', 'calendar', 'slack'
    output_dir: str
    files: list[str] = field(default_factory=list)
    collections: int = 0         # labels/queries, calendars, conversations processed
    items: int = 0               # records written across all files
    errors: list[dict[str, Any]] = field(default_factory=list)

    def add_error(self, error: ArchiveError, key: str | None = None) -> None:
        entry = error.to_dict()
        if key is not None:
            entry["key"] = key
        self.errors.append(entry)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "source": self.source,
            "output_dir": self.output_dir,
            "files": self.files,
            "file_count": len(self.files),
            "collections": self.collections,
            "items": self.items,
        }
        # errors is always present; an empty list means no failures
        result["errors"] = self.errors
        return result
