"""
Slack archive tool implementation.

Writes one file per conversation to slack-archive/, messages oldest first.
History has to be fully enumerated before sorting, so each conversation
is drained first; a failed page keeps the messages already fetched.
"""

import time
from datetime import datetime, timezone

from adapters.services import check_slack_token
from adapters.slack import lookup_slack_user, slack_conversation_pages, slack_history_pages
from config import SlackArchiveConfig
from extractors.slack import (
    format_chat_message,
    parse_chat_message,
    parse_conversation,
    render_chat_file,
    sort_messages,
)
from identity import IdentityCache
from logging_config import logger
from models import ArchiveResult, OutputUnit
from paginator import Sleep, drain, paginate
from workspace import chat_output_name, prepare_output_dir

from .common import record_failure, write_unit


def do_archive_slack(
    config: SlackArchiveConfig,
    *,
    identities: IdentityCache | None = None,
    exported_at: datetime | None = None,
    sleep: Sleep = time.sleep,
) -> ArchiveResult:
    """
    Archive every accessible Slack conversation to text files.

    Args:
        config: Validated SlackArchiveConfig
        identities: User name cache (default: one backed by users.info)
        exported_at: Banner timestamp (default: now, UTC)
        sleep: Sleep function for pacing (injectable for tests)

    Returns:
        ArchiveResult with files written and per-conversation errors

    Raises:
        ArchiveError: Token missing or malformed (AUTH_REQUIRED)
    """
    token = check_slack_token(config.token)
    exported_at = exported_at or datetime.now(timezone.utc)
    if identities is None:
        identities = IdentityCache(lambda user_id: lookup_slack_user(token, user_id))

    folder = prepare_output_dir(config.output_dir)
    result = ArchiveResult(source="slack", output_dir=str(folder))

    listing = drain(paginate(
        slack_conversation_pages(token, config.conversation_types, config.page_size),
        delay_ms=config.page_delay_ms,
        sleep=sleep,
        collection="conversations",
    ))
    if listing.error is not None:
        record_failure(result, listing.error, "conversations")

    conversations = [parse_conversation(raw) for raw in listing.items]
    logger.info(f"Found {len(conversations)} conversations")

    for conversation in conversations:
        name = conversation.display_name
        result.collections += 1
        logger.info(f"Fetching messages for {name}")

        history = drain(paginate(
            slack_history_pages(token, conversation.conversation_id, config.page_size),
            delay_ms=config.page_delay_ms,
            sleep=sleep,
            collection=f"slack:{name}",
        ))
        if history.error is not None:
            record_failure(result, history.error, name)

        if not history.items:
            logger.warning(f"No messages or no access to {name}")
            continue

        messages = sort_messages([parse_chat_message(raw) for raw in history.items])
        records = [format_chat_message(message, identities) for message in messages]
        unit = OutputUnit(
            name=chat_output_name(conversation),
            content=render_chat_file(conversation, records, exported_at),
        )
        write_unit(folder, unit, len(records), result, name)

    logger.info(
        f"Archive complete: {len(result.files)} conversations, "
        f"{identities.lookups} user lookups"
    )
    return result
