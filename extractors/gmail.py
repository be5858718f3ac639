"""
Gmail Extractor — Pure functions for converting Gmail messages to text.

Receives raw Gmail API message resources (format=full), returns EmailRecord
and formatted text. No API calls.
"""

from datetime import datetime, timezone
from typing import Any

from models import Batch, EmailRecord, GmailLabel

from .parts import extract_content, part_from_gmail_payload
from .record import (
    BANNER_RULE,
    HEAVY_RULE,
    LIGHT_RULE,
    RecordBuilder,
    format_exported,
    render_record,
)


NO_SUBJECT = "(No Subject)"
NO_CONTENT = "(No text content)"
UNKNOWN = "Unknown"


# =============================================================================
# PARSING
# =============================================================================


def _header_map(payload: dict[str, Any]) -> dict[str, str]:
    """Lower-cased header name -> first value."""
    headers: dict[str, str] = {}
    for h in payload.get("headers") or []:
        name = h.get("name")
        if name and name.lower() not in headers:
            headers[name.lower()] = h.get("value") or ""
    return headers


def _internal_date(raw: dict[str, Any]) -> str | None:
    """internalDate (epoch ms as string) in RFC 2822 form, UTC."""
    value = raw.get("internalDate")
    if not value:
        return None
    try:
        ms = int(value)
    except (TypeError, ValueError):
        return None
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.strftime("%a, %d %b %Y %H:%M:%S +0000")


def parse_email(raw: dict[str, Any], preserve_markup: bool = False) -> EmailRecord:
    """
    Turn a Gmail API message resource into an EmailRecord.

    Args:
        raw: Message resource from users.messages.get(format=full)
        preserve_markup: Keep raw HTML parts alongside the cleaned text

    Returns:
        EmailRecord; missing headers stay None and get placeholders later
    """
    payload = raw.get("payload") or {}
    headers = _header_map(payload)
    content = extract_content(part_from_gmail_payload(payload), preserve_markup=preserve_markup)

    return EmailRecord(
        message_id=raw.get("id") or UNKNOWN,
        thread_id=raw.get("threadId") or UNKNOWN,
        content=content,
        from_address=headers.get("from") or None,
        to_addresses=headers.get("to") or None,
        cc_addresses=headers.get("cc") or None,
        subject=headers.get("subject") or None,
        date=headers.get("date") or _internal_date(raw),
        label_ids=list(raw.get("labelIds") or []),
    )


def parse_label(raw: dict[str, Any]) -> GmailLabel:
    return GmailLabel(
        label_id=raw.get("id") or "",
        name=raw.get("name") or raw.get("id") or "",
        label_type=raw.get("type") or "user",
    )


# =============================================================================
# FORMATTING
# =============================================================================


def _headers(b: RecordBuilder, email: EmailRecord) -> None:
    b.rule(HEAVY_RULE)
    b.field("Message ID", email.message_id)
    b.field("Thread ID", email.thread_id)
    b.field("From", email.from_address or UNKNOWN)
    b.field("To", email.to_addresses or UNKNOWN)
    b.field("Subject", email.subject or NO_SUBJECT)
    b.field("Date", email.date or UNKNOWN)
    b.optional_field("CC", email.cc_addresses)
    b.optional_field("Labels", ", ".join(email.label_ids))


def _attachments(b: RecordBuilder, email: EmailRecord) -> None:
    attachments = email.content.attachments
    if not attachments:
        return
    b.blank()
    b.line(f"Attachments ({len(attachments)}):")
    for att in attachments:
        b.line(f"  - {att.name} ({att.mime_type}, {att.size} bytes)")


def _body(b: RecordBuilder, email: EmailRecord) -> None:
    b.blank()
    b.rule(LIGHT_RULE)
    b.blank()
    if email.content.plain_text:
        b.line(email.content.plain_text)
    else:
        # the placeholder keeps a blank line before the closing rule
        b.line(NO_CONTENT)
        b.blank()
    b.rule(HEAVY_RULE)
    b.blank()


EMAIL_SECTIONS = (_headers, _attachments, _body)


def format_email(email: EmailRecord) -> str:
    """Render one email as a delimited text record."""
    return render_record(email, EMAIL_SECTIONS)


def render_gmail_file(batch: Batch, label: str, exported_at: datetime) -> str:
    """
    Full file content for one batch: banner, then the batch's records.

    Args:
        batch: Formatted email records (index is 1-based)
        label: Grouping key shown in the banner ('all' or a label name)
        exported_at: Timestamp written to the banner
    """
    banner = (
        RecordBuilder()
        .line("# Gmail Archive")
        .field("# Label", label)
        .field("# Batch", batch.index)
        .field("# Messages", len(batch))
        .field("# Exported", format_exported(exported_at))
        .rule(BANNER_RULE)
        .blank()
        .build()
    )
    return banner + "".join(batch.records)
