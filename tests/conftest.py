"""
Shared pytest fixtures for muniment tests.

Fixtures are loaded from the fixtures/ directory at project root: raw API
responses as the Gmail, Calendar and Slack APIs return them.

Adapter mocking infrastructure is also provided here for testing
adapters without hitting real APIs.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator
from unittest.mock import MagicMock, patch

import pytest

from adapters.services import clear_service_cache

# Project root for fixture loading
PROJECT_ROOT = Path(__file__).parent.parent
FIXTURES_DIR = PROJECT_ROOT / "fixtures"

# Banner timestamp used wherever file content is compared
EXPORTED_AT = datetime(2026, 2, 23, 9, 30, 0, tzinfo=timezone.utc)


def load_fixture(category: str, name: str) -> Any:
    """
    Load a JSON fixture by category and name.

    Args:
        category: Subdirectory (gmail, calendar, slack)
        name: Fixture name without extension

    Example:
        load_fixture("gmail", "multipart")  # loads fixtures/gmail/multipart.json
    """
    fixture_path = FIXTURES_DIR / category / f"{name}.json"
    with open(fixture_path, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture(autouse=True)
def _fresh_service_cache() -> Generator[None, None, None]:
    """Cached clients must not leak between tests."""
    clear_service_cache()
    yield
    clear_service_cache()


@pytest.fixture
def exported_at() -> datetime:
    return EXPORTED_AT


@pytest.fixture
def no_sleep() -> MagicMock:
    """Stand-in for time.sleep that records calls."""
    return MagicMock()


# ============================================================================
# Raw API Fixtures
# ============================================================================

@pytest.fixture
def gmail_multipart_message() -> dict[str, Any]:
    """multipart/mixed message: alternative text/html bodies plus a PDF."""
    return load_fixture("gmail", "multipart")


@pytest.fixture
def gmail_html_only_message() -> dict[str, Any]:
    """Marketing-style message with only an HTML body."""
    return load_fixture("gmail", "html_only")


@pytest.fixture
def slack_history() -> dict[str, Any]:
    """conversations.history response, newest first."""
    return load_fixture("slack", "history")


@pytest.fixture
def calendar_events() -> dict[str, Any]:
    """events.list response with timed, all-day and rich events."""
    return load_fixture("calendar", "events")


# ============================================================================
# Adapter Mocking Infrastructure
# ============================================================================

# Re-export make_http_error / make_slack_error (actual implementation in mock_utils.py)
from tests.mock_utils import make_http_error, make_slack_error  # noqa: F401, E402


@pytest.fixture
def mock_gmail_service() -> MagicMock:
    """
    Create a mock Gmail service.

    Use with patch to replace real service:

        def test_something(mock_gmail_service):
            mock_gmail_service.users().labels().list().execute.return_value = {"labels": []}
            with patch("adapters.gmail.get_gmail_service", return_value=mock_gmail_service):
                result = list_labels()
    """
    return MagicMock()


@pytest.fixture
def mock_calendar_service() -> MagicMock:
    """Create a mock Calendar service."""
    return MagicMock()


@pytest.fixture
def mock_slack_client() -> MagicMock:
    """Create a mock slack_sdk WebClient."""
    return MagicMock()


@pytest.fixture
def patch_gmail_service(mock_gmail_service: MagicMock) -> Generator[MagicMock, None, None]:
    """Fixture that patches get_gmail_service and yields the mock."""
    with patch("adapters.gmail.get_gmail_service", return_value=mock_gmail_service):
        yield mock_gmail_service


@pytest.fixture
def patch_calendar_service(mock_calendar_service: MagicMock) -> Generator[MagicMock, None, None]:
    """Fixture that patches get_calendar_service and yields the mock."""
    with patch("adapters.calendar.get_calendar_service", return_value=mock_calendar_service):
        yield mock_calendar_service


@pytest.fixture
def patch_slack_client(mock_slack_client: MagicMock) -> Generator[MagicMock, None, None]:
    """Fixture that patches get_slack_client and yields the mock."""
    with patch("adapters.slack.get_slack_client", return_value=mock_slack_client):
        yield mock_slack_client
