"""
Gmail archive tool implementation.

Pages through message IDs for one query (or one query per label), fetches
each message, formats it and writes batches of records to
gmail-archive/. A failed fetch stops that query; what was already
formatted is still written.
"""

import time
from datetime import date, datetime, timezone
from pathlib import Path

from adapters.gmail import fetch_message, gmail_message_pages, list_labels
from config import (
    SKIPPED_SYSTEM_LABELS,
    GmailArchiveConfig,
    build_gmail_query,
    label_query,
)
from extractors.gmail import format_email, parse_email, render_gmail_file
from logging_config import logger
from models import ArchiveError, ArchiveResult, Batch, FetchFailedError, OutputUnit
from paginator import Pacer, Sleep, paginate
from workspace import BatchWriter, gmail_output_name, prepare_output_dir, sanitize_name
from workspace.batching import GMAIL_ALL_KEY

from .common import record_failure, write_unit


def _collections(config: GmailArchiveConfig, today: date) -> list[tuple[str, str]]:
    """(grouping key, search query) pairs for the configured mode."""
    if config.mode != "labels":
        return [(GMAIL_ALL_KEY, build_gmail_query(config, today))]

    labels = list_labels()
    logger.info(f"Found {len(labels)} labels")

    selected: list[tuple[str, str]] = []
    for label in labels:
        if label.label_type == "system" and label.label_id in SKIPPED_SYSTEM_LABELS:
            logger.info(f"Skipping {label.name}")
            continue
        selected.append((sanitize_name(label.name), label_query(label.label_id)))
    return selected


def _write_batch(
    folder: Path,
    batch: Batch,
    exported_at: datetime,
    result: ArchiveResult,
) -> bool:
    unit = OutputUnit(
        name=gmail_output_name(batch.key, batch.index),
        content=render_gmail_file(batch, batch.key, exported_at),
    )
    return write_unit(folder, unit, len(batch), result, batch.key)


def _archive_query(
    key: str,
    query: str,
    config: GmailArchiveConfig,
    folder: Path,
    result: ArchiveResult,
    exported_at: datetime,
    sleep: Sleep,
) -> None:
    collection = f"gmail:{key}"
    logger.info(f"Archiving {collection} (query: {query!r})")

    page_size = config.page_size
    if config.max_results is not None:
        page_size = min(page_size, config.max_results)
    refs = paginate(
        gmail_message_pages(query, page_size),
        max_results=config.max_results,
        delay_ms=config.page_delay_ms,
        sleep=sleep,
        collection=collection,
    )
    writer = BatchWriter(key, config.batch_size)
    pacer = Pacer(config.message_delay_ms, sleep)
    processed = 0

    try:
        for ref in refs:
            pacer.wait()
            try:
                raw = fetch_message(ref["id"])
            except ArchiveError as e:
                raise FetchFailedError(collection, e, items_yielded=processed) from e

            batch = writer.add(format_email(parse_email(raw, preserve_markup=config.include_markup)))
            processed += 1
            if processed % 10 == 0:
                logger.debug(f"Processed {processed} messages for {collection}")

            if batch is not None and not _write_batch(folder, batch, exported_at, result):
                return
    except FetchFailedError as e:
        record_failure(result, e, key)

    tail = writer.flush()
    if tail is not None:
        _write_batch(folder, tail, exported_at, result)
    elif processed == 0:
        logger.info(f"No messages found for {collection}")


def do_archive_gmail(
    config: GmailArchiveConfig,
    *,
    today: date | None = None,
    exported_at: datetime | None = None,
    sleep: Sleep = time.sleep,
) -> ArchiveResult:
    """
    Archive Gmail messages to text files.

    Args:
        config: Validated GmailArchiveConfig
        today: Reference date for recent mode (default: today, UTC)
        exported_at: Banner timestamp (default: now, UTC)
        sleep: Sleep function for pacing (injectable for tests)

    Returns:
        ArchiveResult with files written and per-query errors

    Raises:
        ArchiveError: Credentials missing/invalid, or the label list
            could not be fetched
    """
    now = datetime.now(timezone.utc)
    today = today or now.date()
    exported_at = exported_at or now

    folder = prepare_output_dir(config.output_dir)
    result = ArchiveResult(source="gmail", output_dir=str(folder))

    for key, query in _collections(config, today):
        result.collections += 1
        _archive_query(key, query, config, folder, result, exported_at, sleep)

    logger.info(f"Archive complete: {result.items} messages in {len(result.files)} files")
    return result
