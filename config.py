"""
Archive configuration.

One explicit, validated struct per archiver. The CLI builds these from
arguments; tools receive them already validated.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from oauth_config import SLACK_TOKEN_ENV_VARS

# =============================================================================
# GMAIL
# =============================================================================

GMAIL_MODES = ("personal", "all", "labels", "query", "recent")

# Modes where raw HTML can be kept next to the cleaned text
MARKUP_MODES = ("all", "query")

# Label mode skips these system labels
SKIPPED_SYSTEM_LABELS = frozenset({"SPAM", "TRASH", "DRAFT"})

PROMOTION_EXCLUSIONS = "-category:promotions -category:social -category:updates"

# users.messages.list hard limit
GMAIL_MAX_PAGE_SIZE = 500


@dataclass
class GmailArchiveConfig:
    """
    Gmail archiving options.

    Use for_mode() rather than the constructor: promotions are excluded by
    default only in personal mode.
    """
    mode: str = "personal"
    query: str = ""
    max_results: int | None = None
    include_markup: bool = False
    exclude_promotions: bool = False
    include_spam: bool = False
    include_trash: bool = False
    batch_size: int = 100
    recent_days: int = 30
    page_size: int = GMAIL_MAX_PAGE_SIZE
    page_delay_ms: int = 100
    message_delay_ms: int = 200
    output_dir: str = "./gmail-archive"

    @classmethod
    def for_mode(cls, mode: str, **overrides: object) -> "GmailArchiveConfig":
        """Config with the per-mode defaults, then overrides applied."""
        values: dict[str, object] = {"mode": mode, "exclude_promotions": mode == "personal"}
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]

    def validate(self) -> None:
        """Raises ValueError on the first problem found."""
        if self.mode not in GMAIL_MODES:
            raise ValueError(f"Unknown Gmail mode '{self.mode}'. Expected one of: {', '.join(GMAIL_MODES)}")
        if self.mode == "query" and not self.query.strip():
            raise ValueError("Query mode needs a search query")
        if self.query and self.mode != "query":
            raise ValueError(f"A search query is only used in query mode, not '{self.mode}'")
        if self.include_markup and self.mode not in MARKUP_MODES:
            raise ValueError(
                f"HTML markup can only be kept in {' or '.join(MARKUP_MODES)} mode, not '{self.mode}'"
            )
        if self.max_results is not None and self.max_results <= 0:
            raise ValueError(f"max_results must be positive, got {self.max_results}")
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.recent_days <= 0:
            raise ValueError(f"recent_days must be positive, got {self.recent_days}")
        if not 1 <= self.page_size <= GMAIL_MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {GMAIL_MAX_PAGE_SIZE}, got {self.page_size}")
        if self.page_delay_ms < 0 or self.message_delay_ms < 0:
            raise ValueError("Delays must be >= 0")


def build_gmail_query(config: GmailArchiveConfig, today: date) -> str:
    """
    Compose the Gmail search string for every mode except labels.

    Label mode searches each label with label_query() instead, without
    the spam/trash/category filters.

    Args:
        config: Validated config
        today: Reference date for recent mode

    Returns:
        Search string for users.messages.list(q=...)
    """
    if config.mode == "labels":
        raise ValueError("Label mode builds one query per label; use label_query()")

    terms: list[str] = []
    if config.mode == "query":
        terms.append(config.query.strip())
    elif config.mode == "recent":
        since = today - timedelta(days=config.recent_days)
        terms.append(f"after:{since.strftime('%Y/%m/%d')}")

    if not config.include_spam:
        terms.append("-in:spam")
    if not config.include_trash:
        terms.append("-in:trash")
    if config.exclude_promotions:
        terms.append(PROMOTION_EXCLUSIONS)
    return " ".join(terms)


def label_query(label_id: str) -> str:
    return f"label:{label_id}"


# =============================================================================
# CALENDAR
# =============================================================================

DATE_RANGES = ("last-year", "last-5-years", "all-time", "custom")

# Earliest date "all-time" reaches back to
ALL_TIME_START = date(2000, 1, 1)


@dataclass
class CalendarArchiveConfig:
    """Calendar archiving options. calendar_ids=None means every calendar."""
    calendar_ids: list[str] | None = None
    date_range: str = "last-5-years"
    start: date | None = None
    end: date | None = None
    by_year: bool = True
    page_delay_ms: int = 100
    output_dir: str = "./calendar-archive"

    def validate(self) -> None:
        if self.date_range not in DATE_RANGES:
            raise ValueError(
                f"Unknown date range '{self.date_range}'. Expected one of: {', '.join(DATE_RANGES)}"
            )
        if self.date_range == "custom":
            if self.start is None or self.end is None:
                raise ValueError("Custom date range needs both start and end")
            if self.start > self.end:
                raise ValueError(f"Start {self.start} is after end {self.end}")
        elif self.start is not None or self.end is not None:
            raise ValueError("start/end are only used with the custom date range")
        if self.calendar_ids is not None and not self.calendar_ids:
            raise ValueError("calendar_ids must name at least one calendar (or be None for all)")
        if self.page_delay_ms < 0:
            raise ValueError("Delays must be >= 0")


@dataclass
class DateWindow:
    """Half-open [start, end) window in UTC. year is set for by-year windows."""
    start: datetime
    end: datetime
    year: int | None = None


def _midnight(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


def resolve_date_range(config: CalendarArchiveConfig, now: datetime) -> DateWindow:
    """
    Concrete UTC window for the configured range.

    Presets run from January 1st of the start year up to now. A custom
    range includes the whole end day.
    """
    now = now.astimezone(timezone.utc)
    if config.date_range == "custom":
        if config.start is None or config.end is None:
            raise ValueError("Custom date range needs both start and end")
        return DateWindow(_midnight(config.start), _midnight(config.end + timedelta(days=1)))
    if config.date_range == "last-year":
        return DateWindow(_midnight(date(now.year - 1, 1, 1)), now)
    if config.date_range == "all-time":
        return DateWindow(_midnight(ALL_TIME_START), now)
    return DateWindow(_midnight(date(now.year - 5, 1, 1)), now)


def year_windows(window: DateWindow) -> list[DateWindow]:
    """Split a window into calendar years, each clipped to the window."""
    windows: list[DateWindow] = []
    # end is exclusive, so a window ending exactly at New Year stops the year before
    last_year = (window.end - timedelta(microseconds=1)).year
    for year in range(window.start.year, last_year + 1):
        start = max(window.start, _midnight(date(year, 1, 1)))
        end = min(window.end, _midnight(date(year + 1, 1, 1)))
        if start < end:
            windows.append(DateWindow(start, end, year))
    return windows


def format_rfc3339(dt: datetime) -> str:
    """UTC timestamp for timeMin/timeMax."""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# =============================================================================
# SLACK
# =============================================================================

DEFAULT_CONVERSATION_TYPES = "public_channel,private_channel,mpim,im"
SLACK_CONVERSATION_TYPES = frozenset(DEFAULT_CONVERSATION_TYPES.split(","))


@dataclass
class SlackArchiveConfig:
    """Slack archiving options. The token is checked when the client is built."""
    token: str | None = None
    conversation_types: str = DEFAULT_CONVERSATION_TYPES
    page_size: int = 200
    page_delay_ms: int = 1000
    output_dir: str = "./slack-archive"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: object) -> "SlackArchiveConfig":
        """Token from SLACK_BOT_TOKEN, else SLACK_USER_TOKEN."""
        env = os.environ if environ is None else environ
        token = next((env[name] for name in SLACK_TOKEN_ENV_VARS if env.get(name)), None)
        return cls(token=token, **overrides)  # type: ignore[arg-type]

    def validate(self) -> None:
        types = [t.strip() for t in self.conversation_types.split(",") if t.strip()]
        if not types:
            raise ValueError("At least one conversation type is required")
        unknown = [t for t in types if t not in SLACK_CONVERSATION_TYPES]
        if unknown:
            raise ValueError(
                f"Unknown conversation type(s): {', '.join(unknown)}. "
                f"Expected: {DEFAULT_CONVERSATION_TYPES}"
            )
        if not 1 <= self.page_size <= 1000:
            raise ValueError(f"page_size must be between 1 and 1000, got {self.page_size}")
        if self.page_delay_ms < 0:
            raise ValueError("Delays must be >= 0")
