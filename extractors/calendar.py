"""
Calendar Extractor — Pure functions for converting Calendar events to text.

Receives raw Calendar API event resources, returns CalendarEvent and
formatted text. Times are rendered in the event's own UTC offset with
fixed English names, so output never depends on the host locale.
"""

from datetime import date, datetime, timezone
from typing import Any

from models import (
    CalendarAttendee,
    CalendarEvent,
    CalendarInfo,
    CalendarReminder,
    ConferenceEntry,
)

from .parts import extract_content, part_from_calendar_event
from .record import (
    BANNER_RULE,
    HASH_RULE,
    HEAVY_RULE,
    LIGHT_RULE,
    RecordBuilder,
    format_exported,
    render_record,
)


NO_TITLE = "(No title)"
UNKNOWN_TIME = "Unknown time"
UNKNOWN_MONTH = "unknown"

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# Conference entry types that get a line; others (sip, more) are skipped
CONFERENCE_LABELS = {"video": "Video", "phone": "Phone"}


# =============================================================================
# TIME PARSING
# =============================================================================


def parse_rfc3339(value: str | None) -> datetime | None:
    """RFC 3339 dateTime -> aware datetime (naive if no offset given)."""
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_all_day(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def _format_offset(dt: datetime) -> str:
    offset = dt.utcoffset()
    if offset is None:
        return ""
    total = int(offset.total_seconds())
    if total == 0:
        return " UTC"
    sign = "+" if total > 0 else "-"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f" UTC{sign}{hours:02d}:{minutes:02d}"


def _format_day(d: date) -> str:
    return f"{WEEKDAYS[d.weekday()]}, {MONTHS[d.month - 1]} {d.day}, {d.year}"


def format_event_time(date_time: str | None, all_day: str | None) -> str:
    """
    Human-readable start/end.

    Timed:   Monday, February 23, 2026 at 10:00 AM UTC+01:00
    All-day: Monday, February 23, 2026 (All day)
    """
    dt = parse_rfc3339(date_time)
    if dt is not None:
        hour = dt.hour % 12 or 12
        meridiem = "AM" if dt.hour < 12 else "PM"
        return f"{_format_day(dt.date())} at {hour:02d}:{dt.minute:02d} {meridiem}{_format_offset(dt)}"

    d = parse_all_day(all_day)
    if d is not None:
        return f"{_format_day(d)} (All day)"

    return UNKNOWN_TIME


def event_start_key(event: CalendarEvent) -> tuple[int, str]:
    """
    Sort key for start time. Undated events sort last.

    Timed events compare by UTC instant; all-day events by midnight UTC.
    """
    dt = parse_rfc3339(event.start_date_time)
    if dt is not None:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return (0, dt.astimezone(timezone.utc).isoformat())
    d = parse_all_day(event.start_date)
    if d is not None:
        return (0, datetime(d.year, d.month, d.day, tzinfo=timezone.utc).isoformat())
    return (1, "")


def event_month_key(event: CalendarEvent) -> str:
    """'YYYY-MM' of the start, in the event's own offset; 'unknown' if undated."""
    dt = parse_rfc3339(event.start_date_time)
    if dt is not None:
        return f"{dt.year:04d}-{dt.month:02d}"
    d = parse_all_day(event.start_date)
    if d is not None:
        return f"{d.year:04d}-{d.month:02d}"
    return UNKNOWN_MONTH


def month_title(month_key: str) -> str:
    """'2026-02' -> 'February 2026'"""
    year, _, month = month_key.partition("-")
    if year.isdigit() and month.isdigit() and 1 <= int(month) <= 12:
        return f"{MONTHS[int(month) - 1]} {int(year)}"
    return "Unknown date"


# =============================================================================
# PARSING
# =============================================================================


def parse_event(raw: dict[str, Any]) -> CalendarEvent:
    """Turn a Calendar API event resource into a CalendarEvent."""
    start = raw.get("start") or {}
    end = raw.get("end") or {}
    organizer = raw.get("organizer") or {}

    attendees = [
        CalendarAttendee(
            email=a.get("email") or "",
            display_name=a.get("displayName") or None,
            response_status=a.get("responseStatus") or None,
            optional=bool(a.get("optional")),
            organizer=bool(a.get("organizer")),
        )
        for a in raw.get("attendees") or []
    ]

    conference = [
        ConferenceEntry(entry_type=e.get("entryPointType") or "", uri=e.get("uri") or "")
        for e in (raw.get("conferenceData") or {}).get("entryPoints") or []
    ]

    reminders = raw.get("reminders")
    reminders_default = None
    overrides: list[CalendarReminder] = []
    if isinstance(reminders, dict):
        reminders_default = bool(reminders.get("useDefault"))
        overrides = [
            CalendarReminder(minutes=r.get("minutes", 0), method=r.get("method") or "popup")
            for r in reminders.get("overrides") or []
        ]

    return CalendarEvent(
        event_id=raw.get("id") or "",
        summary=raw.get("summary") or None,
        content=extract_content(part_from_calendar_event(raw)),
        start_date_time=start.get("dateTime"),
        start_date=start.get("date"),
        end_date_time=end.get("dateTime"),
        end_date=end.get("date"),
        status=raw.get("status") or None,
        visibility=raw.get("visibility") or None,
        location=raw.get("location") or None,
        organizer=organizer.get("displayName") or organizer.get("email") or None,
        attendees=attendees,
        conference=conference,
        recurrence=list(raw.get("recurrence") or []),
        reminders_default=reminders_default,
        reminder_overrides=overrides,
        has_description=bool(raw.get("description")),
    )


def parse_calendar_info(raw: dict[str, Any]) -> CalendarInfo:
    calendar_id = raw.get("id") or ""
    return CalendarInfo(
        calendar_id=calendar_id,
        summary=raw.get("summaryOverride") or raw.get("summary") or calendar_id,
        primary=bool(raw.get("primary")),
        access_role=raw.get("accessRole") or "unknown",
    )


# =============================================================================
# FORMATTING
# =============================================================================


def _summary(b: RecordBuilder, event: CalendarEvent) -> None:
    b.rule(HEAVY_RULE)
    b.field("Event", event.summary or NO_TITLE)
    b.field("Start", format_event_time(event.start_date_time, event.start_date))
    b.field("End", format_event_time(event.end_date_time, event.end_date))
    b.optional_field("Status", event.status)
    b.optional_field("Visibility", event.visibility)
    b.optional_field("Location", event.location)
    b.optional_field("Organizer", event.organizer)


def _attendees(b: RecordBuilder, event: CalendarEvent) -> None:
    if not event.attendees:
        return
    b.blank()
    b.line(f"Attendees ({len(event.attendees)}):")
    for a in event.attendees:
        line = f"  - {a.display_name or a.email} ({a.response_status or 'no response'})"
        if a.optional:
            line += " [optional]"
        if a.organizer:
            line += " [organizer]"
        b.line(line)


def _conference(b: RecordBuilder, event: CalendarEvent) -> None:
    if not event.conference:
        return
    b.blank()
    b.line("Conference:")
    for entry in event.conference:
        label = CONFERENCE_LABELS.get(entry.entry_type)
        if label:
            b.line(f"  {label}: {entry.uri}")


def _recurrence(b: RecordBuilder, event: CalendarEvent) -> None:
    if not event.recurrence:
        return
    b.blank()
    b.line("Recurrence:")
    b.lines([f"  {rule}" for rule in event.recurrence])


def _reminders(b: RecordBuilder, event: CalendarEvent) -> None:
    if event.reminders_default:
        b.line("Reminders: Default")
    elif event.reminder_overrides:
        b.blank()
        b.line("Reminders:")
        for r in event.reminder_overrides:
            b.line(f"  - {r.minutes} minutes before ({r.method})")


def _description(b: RecordBuilder, event: CalendarEvent) -> None:
    if not event.has_description:
        return
    b.blank()
    b.line("Description:")
    b.rule(LIGHT_RULE)
    b.line(event.content.plain_text)


def _attachments(b: RecordBuilder, event: CalendarEvent) -> None:
    if event.content.attachments:
        b.blank()
        b.line("Attachments:")
        b.lines([f"  - {a.name}" for a in event.content.attachments])
    b.rule(HEAVY_RULE)
    b.blank()


EVENT_SECTIONS = (
    _summary,
    _attendees,
    _conference,
    _recurrence,
    _reminders,
    _description,
    _attachments,
)


def format_event(event: CalendarEvent) -> str:
    """Render one event as a delimited text record."""
    return render_record(event, EVENT_SECTIONS)


def render_calendar_file(
    calendar_name: str,
    year: int | None,
    groups: dict[str, list[str]],
    exported_at: datetime,
) -> str:
    """
    Full file content for one calendar period.

    Args:
        calendar_name: Shown in the banner
        year: Period year, or None when the file covers the whole range
        groups: Month key -> formatted event records, already in order
        exported_at: Timestamp written to the banner
    """
    banner = RecordBuilder().field("# Calendar Archive", calendar_name)
    if year is not None:
        banner.field("# Year", year)
    banner.field("# Total Events", sum(len(records) for records in groups.values()))
    banner.field("# Exported", format_exported(exported_at))
    banner.rule(BANNER_RULE)
    banner.blank()

    chunks = [banner.build()]
    for month_key, records in groups.items():
        chunks.append(
            RecordBuilder()
            .blank()
            .rule(HASH_RULE)
            .line(f"# {month_title(month_key)}")
            .field("# Events", len(records))
            .rule(HASH_RULE)
            .blank()
            .build()
        )
        chunks.extend(records)
    return "".join(chunks)
