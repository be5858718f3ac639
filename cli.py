#!/usr/bin/env python3
"""
CLI interface for muniment.

Usage:
    muniment gmail --mode personal
    muniment calendar --range last-year
    muniment calendars
    muniment slack

Each archive command prints its ArchiveResult as JSON on stdout; progress
goes to stderr through logging.
"""

import argparse
import json
import sys
from datetime import date
from typing import Any

from config import (
    DATE_RANGES,
    DEFAULT_CONVERSATION_TYPES,
    GMAIL_MODES,
    CalendarArchiveConfig,
    GmailArchiveConfig,
    SlackArchiveConfig,
)
from logging_config import configure_logging
from models import ArchiveError, ArchiveResult, ErrorKind
from tools import do_archive_calendar, do_archive_gmail, do_archive_slack, list_calendars

# Exit statuses
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL = 2  # archive finished but some collections or files failed
EXIT_INTERRUPTED = 130


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


def gmail_config(args: argparse.Namespace) -> GmailArchiveConfig:
    overrides: dict[str, Any] = {
        "query": args.query or "",
        "max_results": args.max_results,
        "include_markup": args.include_markup,
        "include_spam": args.include_spam,
        "include_trash": args.include_trash,
        "batch_size": args.batch_size,
        "output_dir": args.output_dir,
    }
    return GmailArchiveConfig.for_mode(args.mode, **overrides)


def calendar_config(args: argparse.Namespace) -> CalendarArchiveConfig:
    return CalendarArchiveConfig(
        calendar_ids=args.calendar or None,
        date_range=args.range,
        start=args.start,
        end=args.end,
        by_year=not args.no_by_year,
        output_dir=args.output_dir,
    )


def slack_config(args: argparse.Namespace) -> SlackArchiveConfig:
    return SlackArchiveConfig.from_env(
        conversation_types=args.types,
        output_dir=args.output_dir,
    )


def _validated(config: Any) -> Any:
    """Run config.validate(), turning ValueError into INVALID_INPUT."""
    try:
        config.validate()
    except ValueError as e:
        raise ArchiveError(ErrorKind.INVALID_INPUT, str(e)) from e
    return config


def _print_result(result: ArchiveResult) -> int:
    print(json.dumps(result.to_dict(), indent=2))
    return EXIT_PARTIAL if result.errors else EXIT_OK


def cmd_gmail(args: argparse.Namespace) -> int:
    """Archive Gmail messages."""
    return _print_result(do_archive_gmail(_validated(gmail_config(args))))


def cmd_calendar(args: argparse.Namespace) -> int:
    """Archive calendar events."""
    return _print_result(do_archive_calendar(_validated(calendar_config(args))))


def cmd_calendars(args: argparse.Namespace) -> int:
    """List calendars available for --calendar."""
    calendars = list_calendars()
    print(json.dumps(
        [
            {
                "id": c.calendar_id,
                "summary": c.summary,
                "primary": c.primary,
                "access_role": c.access_role,
            }
            for c in calendars
        ],
        indent=2,
    ))
    return EXIT_OK


def cmd_slack(args: argparse.Namespace) -> int:
    """Archive Slack conversations."""
    return _print_result(do_archive_slack(_validated(slack_config(args))))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="muniment",
        description="Archive Gmail, Google Calendar and Slack history to plain text files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    muniment gmail --mode personal
    muniment gmail --mode query --query "from:alice has:attachment" --include-markup
    muniment gmail --mode labels --output-dir ~/archives/gmail
    muniment calendars
    muniment calendar --calendar primary --range custom --start 2020-01-01 --end 2020-12-31
    SLACK_USER_TOKEN=xoxp-... muniment slack --types public_channel,im
""",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for progress output on stderr (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # gmail
    gmail_p = subparsers.add_parser("gmail", help="Archive Gmail messages")
    gmail_p.add_argument(
        "--mode",
        choices=GMAIL_MODES,
        default="personal",
        help="personal: skip promotions/social/updates; all: everything; "
             "labels: one set of files per label; query: custom search; "
             "recent: last 30 days (default: personal)",
    )
    gmail_p.add_argument("--query", help="Gmail search query (query mode)")
    gmail_p.add_argument("--max-results", type=int, help="Stop after this many messages per query")
    gmail_p.add_argument(
        "--include-markup",
        action="store_true",
        help="Keep raw HTML next to the cleaned text (all and query modes)",
    )
    gmail_p.add_argument("--include-spam", action="store_true", help="Include spam")
    gmail_p.add_argument("--include-trash", action="store_true", help="Include trash")
    gmail_p.add_argument(
        "--batch-size",
        type=int,
        default=100,
        help="Messages per output file (default: 100)",
    )
    gmail_p.add_argument("--output-dir", default="./gmail-archive", help="(default: ./gmail-archive)")
    gmail_p.set_defaults(func=cmd_gmail)

    # calendar
    calendar_p = subparsers.add_parser("calendar", help="Archive calendar events")
    calendar_p.add_argument(
        "--calendar",
        action="append",
        metavar="ID",
        help="Calendar ID to archive (repeatable; default: all calendars)",
    )
    calendar_p.add_argument(
        "--range",
        choices=DATE_RANGES,
        default="last-5-years",
        help="Date range (default: last-5-years)",
    )
    calendar_p.add_argument("--start", type=_iso_date, help="Start date, YYYY-MM-DD (custom range)")
    calendar_p.add_argument("--end", type=_iso_date, help="End date, YYYY-MM-DD, inclusive (custom range)")
    calendar_p.add_argument(
        "--no-by-year",
        action="store_true",
        help="One file per calendar instead of one per calendar per year",
    )
    calendar_p.add_argument("--output-dir", default="./calendar-archive", help="(default: ./calendar-archive)")
    calendar_p.set_defaults(func=cmd_calendar)

    # calendars
    calendars_p = subparsers.add_parser("calendars", help="List calendars you can archive")
    calendars_p.set_defaults(func=cmd_calendars)

    # slack
    slack_p = subparsers.add_parser(
        "slack",
        help="Archive Slack conversations (token from SLACK_BOT_TOKEN or SLACK_USER_TOKEN)",
    )
    slack_p.add_argument(
        "--types",
        default=DEFAULT_CONVERSATION_TYPES,
        help=f"Comma-separated conversation types (default: {DEFAULT_CONVERSATION_TYPES})",
    )
    slack_p.add_argument("--output-dir", default="./slack-archive", help="(default: ./slack-archive)")
    slack_p.set_defaults(func=cmd_slack)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        return args.func(args)
    except ArchiveError as e:
        print(json.dumps(e.to_dict(), indent=2))
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
