"""
Shared test helpers for muniment.

Centralizes mock wiring patterns that repeat across test files.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, seal

from models import Page


def mock_api_chain(
    mock_service: MagicMock,
    chain: str,
    response: Any = None,
    *,
    side_effect: Any = None,
) -> MagicMock:
    """Set up a mock Google API response for a chained call.

    Navigates the MagicMock attribute chain and sets return_value (or side_effect)
    on the final method. Returns the final mock method for adding assertions.

    Args:
        mock_service: The mocked service object (from @patch)
        chain: Dot-separated chain. Each part except the last is treated as
               a callable method (traversed via .return_value).
               Examples: "users.messages.list.execute", "events.list.execute"
        response: The return value for the final method
        side_effect: Alternative to response — sets side_effect instead

    Returns:
        The final mock method (for adding assertions like assert_called_once_with)

    Examples:
        # Simple:
        mock_api_chain(service, "users.labels.list.execute", {"labels": []})
        # equivalent to: service.users().labels().list().execute.return_value = {"labels": []}

        # Pages, one per call:
        mock_api_chain(service, "events.list.execute", side_effect=[page1, page2])
    """
    parts = chain.split(".")
    obj = mock_service
    for part in parts[:-1]:
        obj = getattr(obj, part).return_value
    final = getattr(obj, parts[-1])
    if side_effect is not None:
        final.side_effect = side_effect
    elif response is not None:
        final.return_value = response
    return final


def seal_service(mock_service: MagicMock) -> None:
    """Seal a mock service after all mock_api_chain() calls.

    Prevents MagicMock from silently creating new attributes when
    production code renames an API method.

    Must be called AFTER all mock_api_chain() calls for this service.
    """
    seal(mock_service)


class FakePages:
    """
    Scripted fetch_page function for paginator and tool tests.

    Each entry is a list of items (or an exception to raise). Cursors are
    "c1", "c2", ...; the last page returns no cursor.

        fetch = FakePages([[1, 2], [3]])
        list(paginate(fetch))  # [1, 2, 3]
        fetch.cursors          # [None, "c1"]
    """

    def __init__(self, pages: list[Any]):
        self.pages = pages
        self.cursors: list[str | None] = []

    def __call__(self, cursor: str | None) -> Page:
        index = len(self.cursors)
        self.cursors.append(cursor)
        page = self.pages[index]
        if isinstance(page, Exception):
            raise page
        next_cursor = f"c{index + 1}" if index + 1 < len(self.pages) else None
        return Page(items=list(page), next_cursor=next_cursor)

    @property
    def calls(self) -> int:
        return len(self.cursors)
