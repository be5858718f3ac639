"""
Calendar archive tool implementation.

For each selected calendar and each period (one per year by default),
fetches all events, groups them by month and writes one file to
calendar-archive/.
"""

import time
from datetime import datetime, timezone
from pathlib import Path

from adapters.calendar import calendar_event_pages, calendar_list_pages
from config import CalendarArchiveConfig, DateWindow, format_rfc3339, resolve_date_range, year_windows
from extractors.calendar import format_event, parse_calendar_info, parse_event, render_calendar_file
from logging_config import logger
from models import ArchiveError, ArchiveResult, CalendarInfo, ErrorKind, OutputUnit, PageCollection
from paginator import Sleep, drain, paginate
from workspace import calendar_output_name, group_events_by_month, prepare_output_dir

from .common import record_failure, write_unit


def _calendar_list(sleep: Sleep) -> PageCollection:
    return drain(paginate(calendar_list_pages(), sleep=sleep, collection="calendarList"))


def list_calendars(sleep: Sleep = time.sleep) -> list[CalendarInfo]:
    """
    Every calendar on the user's calendar list.

    Raises:
        ArchiveError: Listing failed (FetchFailedError)
    """
    collection = _calendar_list(sleep)
    if collection.error is not None:
        raise collection.error
    return [parse_calendar_info(item) for item in collection.items]


def _select(
    calendars: list[CalendarInfo],
    calendar_ids: list[str] | None,
    result: ArchiveResult,
) -> list[CalendarInfo]:
    """Calendars to archive, in the requested order. Unknown IDs are recorded."""
    if calendar_ids is None:
        return calendars

    by_id = {c.calendar_id: c for c in calendars}
    selected: list[CalendarInfo] = []
    for calendar_id in calendar_ids:
        if calendar_id in by_id:
            selected.append(by_id[calendar_id])
        else:
            error = ArchiveError(ErrorKind.NOT_FOUND, f"Calendar {calendar_id} is not on your calendar list")
            logger.warning(error.message)
            result.add_error(error, key=calendar_id)
    return selected


def _archive_period(
    calendar: CalendarInfo,
    window: DateWindow,
    config: CalendarArchiveConfig,
    folder: Path,
    result: ArchiveResult,
    exported_at: datetime,
    sleep: Sleep,
) -> None:
    period = str(window.year) if window.year is not None else "all"
    key = f"{calendar.summary}:{period}"

    collection = drain(paginate(
        calendar_event_pages(calendar.calendar_id, format_rfc3339(window.start), format_rfc3339(window.end)),
        delay_ms=config.page_delay_ms,
        sleep=sleep,
        collection=f"calendar:{key}",
    ))
    if collection.error is not None:
        record_failure(result, collection.error, key)

    if not collection.items:
        logger.info(f"No events found for {key}")
        return

    events = [parse_event(raw) for raw in collection.items]
    logger.info(f"Found {len(events)} events for {key}")

    groups = {
        month: [format_event(event) for event in month_events]
        for month, month_events in group_events_by_month(events).items()
    }
    unit = OutputUnit(
        name=calendar_output_name(calendar.summary, window.year),
        content=render_calendar_file(calendar.summary, window.year, groups, exported_at),
    )
    write_unit(folder, unit, len(events), result, key)


def do_archive_calendar(
    config: CalendarArchiveConfig,
    *,
    now: datetime | None = None,
    exported_at: datetime | None = None,
    sleep: Sleep = time.sleep,
) -> ArchiveResult:
    """
    Archive calendar events to text files.

    Args:
        config: Validated CalendarArchiveConfig
        now: Reference time for date range presets (default: now, UTC)
        exported_at: Banner timestamp (default: now)
        sleep: Sleep function for pacing (injectable for tests)

    Returns:
        ArchiveResult with files written and per-period errors. A failed
        calendar list page (credential failures included) is recorded under
        "calendarList"; calendars listed before it are still archived.
    """
    now = now or datetime.now(timezone.utc)
    exported_at = exported_at or now

    folder = prepare_output_dir(config.output_dir)
    result = ArchiveResult(source="calendar", output_dir=str(folder))
    listing = _calendar_list(sleep)
    if listing.error is not None:
        record_failure(result, listing.error, "calendarList")
    calendars = _select([parse_calendar_info(item) for item in listing.items], config.calendar_ids, result)

    window = resolve_date_range(config, now)
    windows = year_windows(window) if config.by_year else [window]
    logger.info(
        f"Archiving {len(calendars)} calendars from {window.start.date()} to {window.end.date()}"
    )

    for calendar in calendars:
        result.collections += 1
        logger.info(f"Fetching events for {calendar.summary}")
        for period in windows:
            _archive_period(calendar, period, config, folder, result, exported_at, sleep)

    logger.info(f"Archive complete: {result.items} events in {len(result.files)} files")
    return result
