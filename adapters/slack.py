"""
Slack adapter — Slack Web API wrapper.

Pages through conversations and conversation history, looks up users.
Slack returns the next cursor in response_metadata and an empty string
on the last page.
"""

from typing import Any

from slack_sdk.errors import SlackApiError

from adapters.services import get_slack_client
from api_errors import translate_errors
from logging_config import log_api_call, log_api_result
from models import Page
from paginator import FetchPage

# conversations.list / conversations.history page size
SLACK_PAGE_SIZE = 200


def _next_cursor(response: Any) -> str | None:
    metadata = response.get("response_metadata") or {}
    return metadata.get("next_cursor") or None


@translate_errors
def list_conversation_page(
    token: str,
    types: str,
    cursor: str | None,
    page_size: int = SLACK_PAGE_SIZE,
) -> Page:
    """One page of conversations the token can see."""
    client = get_slack_client(token)
    log_api_call("slack", "conversations.list", types=types, cursor=cursor)

    kwargs: dict[str, Any] = {"types": types, "limit": page_size}
    if cursor:
        kwargs["cursor"] = cursor

    response = client.conversations_list(**kwargs)

    items = response.get("channels") or []
    log_api_result("slack", "conversations.list", len(items))
    return Page(items=items, next_cursor=_next_cursor(response))


def slack_conversation_pages(token: str, types: str, page_size: int = SLACK_PAGE_SIZE) -> FetchPage:
    return lambda cursor: list_conversation_page(token, types, cursor, page_size)


@translate_errors
def list_history_page(
    token: str,
    channel_id: str,
    cursor: str | None,
    page_size: int = SLACK_PAGE_SIZE,
) -> Page:
    """One page of a conversation's history, newest first as Slack returns it."""
    client = get_slack_client(token)
    log_api_call("slack", "conversations.history", channel=channel_id, cursor=cursor)

    kwargs: dict[str, Any] = {"channel": channel_id, "limit": page_size}
    if cursor:
        kwargs["cursor"] = cursor

    response = client.conversations_history(**kwargs)

    items = response.get("messages") or []
    log_api_result("slack", "conversations.history", len(items))
    return Page(items=items, next_cursor=_next_cursor(response))


def slack_history_pages(token: str, channel_id: str, page_size: int = SLACK_PAGE_SIZE) -> FetchPage:
    return lambda cursor: list_history_page(token, channel_id, cursor, page_size)


@translate_errors
def lookup_slack_user(token: str, user_id: str) -> str | None:
    """
    Display name for a user ID: real_name, else name.

    Returns None for unknown users; other failures raise ArchiveError.
    """
    client = get_slack_client(token)
    log_api_call("slack", "users.info", user=user_id)

    try:
        response = client.users_info(user=user_id)
    except SlackApiError as e:
        if e.response.get("error") == "user_not_found":
            return None
        raise

    user = response.get("user") or {}
    return user.get("real_name") or user.get("name") or None
