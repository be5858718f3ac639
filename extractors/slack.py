"""
Slack Extractor — Pure functions for converting Slack messages to text.

Receives raw Slack API message objects, returns ChatMessage and formatted
text. Sender names come from an IdentityCache handed in by the caller.
"""

import re
from datetime import datetime, timezone
from typing import Any, Protocol

from models import ChatConversation, ChatMessage

from .normalize import CHAT_STEPS
from .parts import SLACK_ATTACHMENT_KIND, extract_content, part_from_slack_message
from .record import CHAT_BANNER_RULE, RecordBuilder, format_exported, render_record


NO_CONTENT = "(No text content)"
UNKNOWN_USER = "Unknown User"


class Identities(Protocol):
    def resolve(self, user_id: str) -> str: ...


# =============================================================================
# SLACK MARKUP
# =============================================================================

_ANGLE = re.compile(r"<([^<>\n]+)>")


def _unwrap(match: re.Match[str]) -> str:
    inner = match.group(1)
    target, _, label = inner.partition("|")

    if target.startswith("@"):
        return f"@{label}" if label else target
    if target.startswith("#"):
        return f"#{label}" if label else target
    if target.startswith("!"):
        # <!here>, <!channel>, <!subteam^S1|@team>, <!date^...|fallback>
        return label or f"@{target[1:]}"
    if label:
        return f"{label} ({target})"
    return target


def unwrap_slack_markup(text: str) -> str:
    """
    Replace Slack's angle-bracket markup with readable text.

    <https://x|label> -> label (https://x), <https://x> -> https://x,
    <@U123> -> @U123, <#C123|general> -> #general, <!here> -> @here.
    Entities (&lt; &gt; &amp;) are left for the normalizer.
    """
    if not text:
        return text
    return _ANGLE.sub(_unwrap, text)


# =============================================================================
# PARSING
# =============================================================================


def parse_chat_message(raw: dict[str, Any]) -> ChatMessage:
    """Turn a Slack message object into a ChatMessage."""
    unwrapped = {**raw, "text": unwrap_slack_markup(raw.get("text") or "")}
    content = extract_content(part_from_slack_message(unwrapped), steps=CHAT_STEPS)

    reply_count = raw.get("reply_count") or 0
    return ChatMessage(
        ts=str(raw.get("ts") or "0"),
        content=content,
        user=raw.get("user") or None,
        bot_id=raw.get("bot_id") or None,
        username=raw.get("username") or None,
        reply_count=reply_count if isinstance(reply_count, int) else 0,
    )


def parse_conversation(raw: dict[str, Any]) -> ChatConversation:
    return ChatConversation(
        conversation_id=raw.get("id") or "",
        name=raw.get("name") or None,
    )


# =============================================================================
# FORMATTING
# =============================================================================


def format_slack_time(ts: float) -> str:
    """Epoch seconds -> 'YYYY-MM-DD HH:MM:SS' in UTC."""
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def sender_name(message: ChatMessage, identities: Identities) -> str:
    if message.user:
        return identities.resolve(message.user)
    if message.bot_id:
        return f"Bot ({message.username or message.bot_id})"
    if message.username:
        return message.username
    return UNKNOWN_USER


def format_chat_message(message: ChatMessage, identities: Identities) -> str:
    """
    Render one chat message.

    The identity cache is the only collaborator; everything else comes
    from the message itself.
    """
    header = f"[{format_slack_time(message.timestamp)}] {sender_name(message, identities)}:"

    def emit(b: RecordBuilder, msg: ChatMessage) -> None:
        b.line(header)
        b.line(msg.content.plain_text or NO_CONTENT)

        legacy = [a for a in msg.content.attachments if a.mime_type == SLACK_ATTACHMENT_KIND]
        files = [a for a in msg.content.attachments if a.mime_type != SLACK_ATTACHMENT_KIND]
        if legacy:
            b.line("  Attachments:")
            b.lines([f"    {i}. {a.name}" for i, a in enumerate(legacy, 1)])
        if files:
            b.line("  Files:")
            b.lines([f"    {i}. {f.name} ({f.mime_type})" for i, f in enumerate(files, 1)])
        if msg.reply_count > 0:
            b.line(f"  [Thread with {msg.reply_count} replies]")
        b.blank()

    return render_record(message, (emit,))


def sort_messages(messages: list[ChatMessage]) -> list[ChatMessage]:
    """Oldest first. Stable, so equal timestamps keep API order."""
    return sorted(messages, key=lambda m: m.timestamp)


def render_chat_file(
    conversation: ChatConversation,
    records: list[str],
    exported_at: datetime,
) -> str:
    """Banner plus already-formatted, already-ordered message records."""
    banner = (
        RecordBuilder()
        .field("# Slack Archive", conversation.display_name)
        .field("# Channel ID", conversation.conversation_id)
        .field("# Exported", format_exported(exported_at))
        .field("# Total Messages", len(records))
        .rule(CHAT_BANNER_RULE)
        .blank()
        .build()
    )
    return banner + "".join(records)
