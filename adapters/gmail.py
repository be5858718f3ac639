"""
Gmail adapter — Gmail API wrapper.

Lists labels, pages through message IDs for a search query, fetches full
messages. Returns raw API resources; parsing lives in extractors/gmail.py.
"""

from typing import Any

from adapters.services import get_gmail_service
from api_errors import translate_errors
from logging_config import log_api_call, log_api_result
from models import GmailLabel, Page, RawItem
from paginator import FetchPage
from extractors.gmail import parse_label


@translate_errors
def list_labels() -> list[GmailLabel]:
    """All labels in the mailbox, system and user."""
    service = get_gmail_service()
    log_api_call("gmail", "labels.list")

    response = service.users().labels().list(userId="me").execute()

    labels = [parse_label(item) for item in response.get("labels", [])]
    log_api_result("gmail", "labels.list", len(labels))
    return labels


@translate_errors
def list_message_page(query: str, page_token: str | None, page_size: int) -> Page:
    """
    One page of message references matching a search query.

    Items are {id, threadId} stubs; fetch_message() gets the content.
    """
    service = get_gmail_service()
    log_api_call("gmail", "messages.list", q=query, pageToken=page_token, maxResults=page_size)

    kwargs: dict[str, Any] = {
        "userId": "me",
        "maxResults": page_size,
    }
    if query:
        kwargs["q"] = query
    if page_token:
        kwargs["pageToken"] = page_token

    response = service.users().messages().list(**kwargs).execute()

    items = response.get("messages", [])
    log_api_result("gmail", "messages.list", len(items))
    return Page(items=items, next_cursor=response.get("nextPageToken"))


def gmail_message_pages(query: str, page_size: int = 500) -> FetchPage:
    """fetch_page function over messages.list for one query."""
    return lambda cursor: list_message_page(query, cursor, page_size)


@translate_errors
def fetch_message(message_id: str) -> RawItem:
    """
    Fetch a single message with its full MIME payload.

    Raises:
        ArchiveError: On API failure (converted by @translate_errors)
    """
    service = get_gmail_service()
    log_api_call("gmail", "messages.get", id=message_id)

    return (
        service.users()
        .messages()
        .get(userId="me", id=message_id, format="full")
        .execute()
    )
