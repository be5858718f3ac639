"""
Content Extractor — nested part trees to plain text plus attachment list.

Gmail MIME payloads, Slack messages and Calendar events are first shaped
into a Part tree by the part_from_* builders, then walked by one visitor.
"""

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any

from models import AttachmentInfo, ExtractedContent, Part

from .normalize import FULL_STEPS, Step, normalize_text, strip_email_cruft

MAX_PART_DEPTH = 32

HTML_START = "--- HTML Content ---"
HTML_END = "--- End HTML ---"

# Legacy Slack message attachments (unfurls, bot cards) as opposed to files
SLACK_ATTACHMENT_KIND = "application/x-slack-attachment"


def _media_kind(mime_type: str) -> str:
    """'text/html; charset=UTF-8' -> 'text/html'"""
    return mime_type.split(";", 1)[0].strip().lower()


@dataclass
class _Segment:
    is_markup: bool
    text: str


@dataclass
class _Walk:
    segments: list[_Segment] = field(default_factory=list)
    attachments: list[AttachmentInfo] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    seen: set[int] = field(default_factory=set)


def _visit(part: Part, depth: int, walk: _Walk) -> None:
    if id(part) in walk.seen:
        walk.warnings.append(f"Skipped repeated part ({part.mime_type}) at depth {depth}")
        return
    if depth > MAX_PART_DEPTH:
        walk.warnings.append(f"Stopped descending at depth {MAX_PART_DEPTH}")
        return
    walk.seen.add(id(part))

    kind = _media_kind(part.mime_type)
    if part.filename:
        walk.attachments.append(AttachmentInfo(
            name=part.filename,
            mime_type=part.mime_type or "application/octet-stream",
            size=part.size,
        ))
    if part.body and kind == "text/plain":
        walk.segments.append(_Segment(is_markup=False, text=part.body))
    elif part.body and kind == "text/html" and not part.filename:
        walk.segments.append(_Segment(is_markup=True, text=part.body))

    for child in part.parts:
        _visit(child, depth + 1, walk)


def extract_content(
    root: Part,
    *,
    preserve_markup: bool = False,
    steps: tuple[Step, ...] = FULL_STEPS,
) -> ExtractedContent:
    """
    Walk a part tree depth-first and produce text plus attachments.

    Without preserve_markup, plain segments win: markup segments are only
    used when the tree has no plain text at all (HTML-only mail). With
    preserve_markup, every segment is kept in traversal order and markup
    is emitted verbatim between HTML_START/HTML_END lines.

    Args:
        root: Top of the part tree
        preserve_markup: Keep raw HTML alongside the cleaned text
        steps: Normalizer profile (FULL_STEPS, or CHAT_STEPS for chat)

    Returns:
        ExtractedContent with attachments in traversal order
    """
    walk = _Walk()
    _visit(root, 0, walk)

    if preserve_markup:
        blocks: list[str] = []
        for segment in walk.segments:
            if segment.is_markup:
                blocks.append(f"{HTML_START}\n{segment.text}\n{HTML_END}")
            else:
                cleaned = normalize_text(segment.text, steps)
                if cleaned:
                    blocks.append(cleaned)
        plain_text = "\n\n".join(blocks)
    else:
        plain = [s.text for s in walk.segments if not s.is_markup]
        if plain:
            plain_text = normalize_text("\n".join(plain), steps)
        else:
            markup = [strip_email_cruft(s.text) for s in walk.segments if s.is_markup]
            plain_text = normalize_text("\n".join(markup), steps)

    return ExtractedContent(
        plain_text=plain_text,
        attachments=walk.attachments,
        warnings=walk.warnings,
    )


# =============================================================================
# BUILDERS
# =============================================================================


def _decode_base64url(data: str) -> str:
    """Gmail body data: base64url, padding often stripped."""
    padded = data + "=" * (-len(data) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError):
        return ""
    return raw.decode("utf-8", errors="replace")


def _gmail_part(payload: dict[str, Any]) -> Part:
    body = payload.get("body") or {}
    data = body.get("data")
    return Part(
        mime_type=payload.get("mimeType") or "",
        body=_decode_base64url(data) if data else None,
        filename=payload.get("filename") or None,
        size=body.get("size") or 0,
    )


def part_from_gmail_payload(payload: dict[str, Any]) -> Part:
    """
    Map a Gmail API message payload (format=full) onto a Part tree.

    Bodies stored out of line (attachmentId only) come through with no body;
    their metadata still lists them as attachments. Built iteratively;
    nodes below MAX_PART_DEPTH + 1 are not built and the visitor reports
    the cut as a warning.
    """
    root = _gmail_part(payload)
    stack = [(root, payload, 0)]
    while stack:
        part, raw, depth = stack.pop()
        if depth > MAX_PART_DEPTH:
            continue
        for child_raw in raw.get("parts") or []:
            child = _gmail_part(child_raw)
            part.parts.append(child)
            stack.append((child, child_raw, depth + 1))
    return root


def part_from_slack_message(message: dict[str, Any]) -> Part:
    """Slack message: text body, then files, then legacy attachments."""
    children = [
        Part(
            mime_type=f.get("mimetype") or "unknown",
            filename=f.get("name") or f.get("title") or "Unnamed file",
            size=f.get("size") or 0,
        )
        for f in message.get("files") or []
    ]
    children.extend(
        Part(
            mime_type=SLACK_ATTACHMENT_KIND,
            filename=a.get("title") or a.get("fallback") or "Attachment",
        )
        for a in message.get("attachments") or []
    )
    return Part(
        mime_type="text/plain",
        body=message.get("text") or None,
        parts=children,
    )


def part_from_calendar_event(event: dict[str, Any]) -> Part:
    """Calendar event: description (may be HTML) plus Drive attachments."""
    children = [
        Part(
            mime_type=a.get("mimeType") or "unknown",
            filename=a.get("title") or a.get("fileUrl") or "Attachment",
        )
        for a in event.get("attachments") or []
    ]
    return Part(
        mime_type="multipart/mixed",
        parts=[Part(mime_type="text/html", body=event.get("description") or None), *children],
    )
