"""
Tests for the content extractor.

Covers the depth-first walk (plain preferred over HTML, attachments in
traversal order, cycle and depth guards) and the part_from_* builders.
"""

import base64

from models import AttachmentInfo, Part
from extractors.normalize import CHAT_STEPS
from extractors.parts import (
    HTML_END,
    HTML_START,
    MAX_PART_DEPTH,
    SLACK_ATTACHMENT_KIND,
    extract_content,
    part_from_calendar_event,
    part_from_gmail_payload,
    part_from_slack_message,
)


def _b64(text: str) -> str:
    """Gmail style: base64url with padding stripped."""
    return base64.urlsafe_b64encode(text.encode()).decode().rstrip("=")


def _mail_tree() -> Part:
    """multipart/mixed > multipart/alternative > (plain, html) + attachment."""
    return Part(
        mime_type="multipart/mixed",
        parts=[
            Part(
                mime_type="multipart/alternative",
                parts=[
                    Part(mime_type="text/plain", body="Hello plain"),
                    Part(mime_type="text/html", body="<p>Hello <b>html</b></p>"),
                ],
            ),
            Part(mime_type="application/pdf", filename="report.pdf", size=1024),
        ],
    )


# ============================================================================
# WALK
# ============================================================================

class TestExtractContent:
    """Test the depth-first part walk."""

    def test_nested_tree_prefers_plain(self) -> None:
        content = extract_content(_mail_tree())

        assert content.plain_text == "Hello plain"
        assert content.attachments == [
            AttachmentInfo(name="report.pdf", mime_type="application/pdf", size=1024)
        ]
        assert content.warnings == []

    def test_html_only_falls_back_to_markup(self) -> None:
        root = Part(
            mime_type="multipart/alternative",
            parts=[Part(mime_type="text/html", body="<div>Only <i>html</i></div>")],
        )
        assert extract_content(root).plain_text == "Only html"

    def test_html_only_strips_hidden_preheader(self) -> None:
        html = '<div style="display:none">preview text</div><p>Visible</p>'
        root = Part(mime_type="text/html", body=html)
        assert extract_content(root).plain_text == "Visible"

    def test_media_type_parameters_ignored(self) -> None:
        root = Part(mime_type="TEXT/PLAIN; charset=UTF-8", body="body")
        assert extract_content(root).plain_text == "body"

    def test_multiple_plain_segments_joined_in_order(self) -> None:
        root = Part(
            mime_type="multipart/mixed",
            parts=[
                Part(mime_type="text/plain", body="first"),
                Part(mime_type="text/plain", body="second"),
            ],
        )
        assert extract_content(root).plain_text == "first\nsecond"

    def test_attachments_in_traversal_order(self) -> None:
        root = Part(
            mime_type="multipart/mixed",
            parts=[
                Part(mime_type="image/png", filename="a.png"),
                Part(
                    mime_type="multipart/mixed",
                    parts=[Part(mime_type="text/csv", filename="b.csv")],
                ),
                Part(mime_type="", filename="c.bin"),
            ],
        )
        content = extract_content(root)

        assert [a.name for a in content.attachments] == ["a.png", "b.csv", "c.bin"]
        assert content.attachments[2].mime_type == "application/octet-stream"

    def test_named_text_part_is_body_and_attachment(self) -> None:
        root = Part(
            mime_type="multipart/mixed",
            parts=[
                Part(mime_type="text/plain", body="body"),
                Part(mime_type="text/plain", body="notes inside", filename="notes.txt"),
            ],
        )
        content = extract_content(root)

        assert content.plain_text == "body\nnotes inside"
        assert [a.name for a in content.attachments] == ["notes.txt"]

    def test_named_html_part_is_attachment_only(self) -> None:
        root = Part(
            mime_type="multipart/mixed",
            parts=[
                Part(mime_type="text/plain", body="body"),
                Part(mime_type="text/html", body="<p>saved page</p>", filename="page.html"),
            ],
        )
        content = extract_content(root, preserve_markup=True)

        assert content.plain_text == "body"
        assert [a.name for a in content.attachments] == ["page.html"]

    def test_empty_tree(self) -> None:
        content = extract_content(Part(mime_type="multipart/mixed"))
        assert content.plain_text == ""
        assert content.attachments == []

    def test_cycle_is_visited_once(self) -> None:
        root = Part(mime_type="multipart/mixed", parts=[Part(mime_type="text/plain", body="once")])
        root.parts.append(root)

        content = extract_content(root)

        assert content.plain_text == "once"
        assert len(content.warnings) == 1
        assert "repeated part" in content.warnings[0]

    def test_depth_limit_stops_descent(self) -> None:
        leaf = Part(mime_type="text/plain", body="too deep")
        node = leaf
        for _ in range(MAX_PART_DEPTH + 5):
            node = Part(mime_type="multipart/mixed", parts=[node])

        content = extract_content(node)

        assert content.plain_text == ""
        assert content.warnings == [f"Stopped descending at depth {MAX_PART_DEPTH}"]

    def test_chat_steps_keep_braces(self) -> None:
        root = Part(mime_type="text/plain", body="x = {a: 1}")
        assert extract_content(root, steps=CHAT_STEPS).plain_text == "x = {a: 1}"


class TestPreserveMarkup:
    """Raw HTML kept between delimiters."""

    def test_plain_then_delimited_html(self) -> None:
        content = extract_content(_mail_tree(), preserve_markup=True)

        assert content.plain_text == (
            "Hello plain\n\n"
            f"{HTML_START}\n<p>Hello <b>html</b></p>\n{HTML_END}"
        )

    def test_html_only(self) -> None:
        root = Part(mime_type="text/html", body="<p>x</p>")
        assert extract_content(root, preserve_markup=True).plain_text == (
            f"{HTML_START}\n<p>x</p>\n{HTML_END}"
        )

    def test_attachments_unchanged(self) -> None:
        content = extract_content(_mail_tree(), preserve_markup=True)
        assert [a.name for a in content.attachments] == ["report.pdf"]


# ============================================================================
# BUILDERS
# ============================================================================

class TestPartFromGmailPayload:
    """Gmail API payload -> Part tree."""

    def test_decodes_unpadded_base64url(self) -> None:
        part = part_from_gmail_payload({
            "mimeType": "text/plain",
            "body": {"data": _b64("Hello? ~~ world"), "size": 15},
        })
        assert part.body == "Hello? ~~ world"
        assert part.size == 15

    def test_nested_parts_and_attachment_metadata(self) -> None:
        payload = {
            "mimeType": "multipart/mixed",
            "filename": "",
            "body": {"size": 0},
            "parts": [
                {"mimeType": "text/plain", "filename": "", "body": {"data": _b64("hi"), "size": 2}},
                {
                    "mimeType": "application/pdf",
                    "filename": "doc.pdf",
                    "body": {"attachmentId": "ANGjdJ8", "size": 2048},
                },
            ],
        }
        root = part_from_gmail_payload(payload)

        assert root.filename is None
        assert root.body is None
        assert [p.mime_type for p in root.parts] == ["text/plain", "application/pdf"]
        assert root.parts[1].filename == "doc.pdf"
        assert root.parts[1].body is None
        assert root.parts[1].size == 2048

    def test_deeply_nested_payload_is_cut_at_depth_limit(self) -> None:
        payload = {"mimeType": "text/plain", "body": {"data": _b64("bottom")}}
        for _ in range(3000):
            payload = {"mimeType": "multipart/mixed", "parts": [payload]}

        content = extract_content(part_from_gmail_payload(payload))

        assert content.plain_text == ""
        assert content.warnings == [f"Stopped descending at depth {MAX_PART_DEPTH}"]

    def test_nesting_within_limit_is_kept(self) -> None:
        payload = {"mimeType": "text/plain", "body": {"data": _b64("bottom")}}
        for _ in range(MAX_PART_DEPTH):
            payload = {"mimeType": "multipart/mixed", "parts": [payload]}

        content = extract_content(part_from_gmail_payload(payload))

        assert content.plain_text == "bottom"
        assert content.warnings == []

    def test_invalid_base64_gives_empty_body(self) -> None:
        part = part_from_gmail_payload({"mimeType": "text/plain", "body": {"data": "@@@@!"}})
        assert part.body == ""

    def test_fixture_message(self, gmail_multipart_message) -> None:
        content = extract_content(part_from_gmail_payload(gmail_multipart_message["payload"]))

        assert content.plain_text.startswith("Hi Bob,")
        assert [a.name for a in content.attachments] == ["q3-report.pdf"]


class TestPartFromSlackMessage:
    """Slack message -> Part tree."""

    def test_files_then_attachments(self) -> None:
        root = part_from_slack_message({
            "text": "look",
            "files": [
                {"name": "a.png", "mimetype": "image/png", "size": 10},
                {"title": "Untitled doc"},
                {},
            ],
            "attachments": [{"title": "Card"}, {"fallback": "Fallback text"}, {}],
        })

        assert root.body == "look"
        assert [(p.filename, p.mime_type) for p in root.parts] == [
            ("a.png", "image/png"),
            ("Untitled doc", "unknown"),
            ("Unnamed file", "unknown"),
            ("Card", SLACK_ATTACHMENT_KIND),
            ("Fallback text", SLACK_ATTACHMENT_KIND),
            ("Attachment", SLACK_ATTACHMENT_KIND),
        ]

    def test_empty_text(self) -> None:
        root = part_from_slack_message({"text": ""})
        assert root.body is None
        assert extract_content(root).plain_text == ""


class TestPartFromCalendarEvent:
    """Calendar event -> Part tree."""

    def test_description_is_markup(self) -> None:
        root = part_from_calendar_event({"description": "<b>Agenda</b><br>Item one"})
        assert extract_content(root).plain_text == "Agenda\nItem one"

    def test_attachment_names(self) -> None:
        root = part_from_calendar_event({
            "attachments": [
                {"title": "Deck", "mimeType": "application/vnd.google-apps.presentation"},
                {"fileUrl": "https://drive.google.com/file/d/abc"},
                {},
            ],
        })
        content = extract_content(root)

        assert [a.name for a in content.attachments] == [
            "Deck",
            "https://drive.google.com/file/d/abc",
            "Attachment",
        ]
        assert content.plain_text == ""
