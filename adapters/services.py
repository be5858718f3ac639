"""
API client initialization.

Shared by all adapters. Loads token.json, builds Google service objects and
the Slack WebClient. Uses lru_cache so a run builds each client once.

All clients use a 60-second timeout to prevent indefinite hangs
when an API is slow or a network connection stalls.
"""

from functools import lru_cache

import google_auth_httplib2
import httplib2
from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build, Resource
from slack_sdk import WebClient

from logging_config import logger
from models import ArchiveError, ErrorKind
from oauth_config import SCOPES, SLACK_TOKEN_ENV_VARS, SLACK_TOKEN_PREFIXES, TOKEN_FILE

__all__ = [
    "get_gmail_service",
    "get_calendar_service",
    "check_slack_token",
    "get_slack_client",
    "clear_service_cache",
]

# Default timeout for all API calls (seconds)
API_TIMEOUT = 60


def _get_credentials() -> Credentials:
    """
    Load OAuth credentials from token.json, refreshing if expired.

    A refreshed token is written back so the next run starts fresh.
    """
    if not TOKEN_FILE.exists():
        raise ArchiveError(
            ErrorKind.AUTH_REQUIRED,
            f"{TOKEN_FILE} not found. Authorize once with Google and save the "
            "authorized-user token there (or point MUNIMENT_TOKEN_FILE at it).",
        )

    try:
        creds = Credentials.from_authorized_user_file(str(TOKEN_FILE), scopes=SCOPES)
    except ValueError as e:
        raise ArchiveError(ErrorKind.AUTH_REQUIRED, f"{TOKEN_FILE} is not a valid token file: {e}") from e

    if creds.valid:
        return creds

    if not creds.refresh_token:
        raise ArchiveError(ErrorKind.AUTH_EXPIRED, f"Token in {TOKEN_FILE} expired and has no refresh token")

    try:
        creds.refresh(google_auth_httplib2.Request(httplib2.Http(timeout=API_TIMEOUT)))
    except RefreshError as e:
        raise ArchiveError(ErrorKind.AUTH_EXPIRED, f"Token refresh failed: {e}") from e

    logger.debug(f"Refreshed Google token, saving to {TOKEN_FILE}")
    TOKEN_FILE.write_text(creds.to_json(), encoding="utf-8")
    return creds


def _get_authorized_http(creds: Credentials) -> google_auth_httplib2.AuthorizedHttp:
    """Create authorized HTTP client with timeout."""
    http = httplib2.Http(timeout=API_TIMEOUT)
    return google_auth_httplib2.AuthorizedHttp(creds, http=http)


@lru_cache(maxsize=1)
def get_gmail_service() -> Resource:
    """Get authenticated Gmail API service (cached)."""
    creds = _get_credentials()
    return build("gmail", "v1", http=_get_authorized_http(creds))


@lru_cache(maxsize=1)
def get_calendar_service() -> Resource:
    """Get authenticated Google Calendar API v3 service (cached)."""
    creds = _get_credentials()
    return build("calendar", "v3", http=_get_authorized_http(creds))


def check_slack_token(token: str | None) -> str:
    """Return the token, or raise AUTH_REQUIRED if it is missing or malformed."""
    if not token:
        raise ArchiveError(
            ErrorKind.AUTH_REQUIRED,
            f"No Slack token. Set {' or '.join(SLACK_TOKEN_ENV_VARS)}.",
        )
    if not token.startswith(SLACK_TOKEN_PREFIXES):
        raise ArchiveError(
            ErrorKind.AUTH_REQUIRED,
            f"Invalid Slack token: expected it to start with {' or '.join(SLACK_TOKEN_PREFIXES)}",
        )
    return token


@lru_cache(maxsize=1)
def get_slack_client(token: str) -> WebClient:
    """Get Slack WebClient for this token (cached)."""
    token = check_slack_token(token)
    kind = "bot" if token.startswith("xoxb-") else "user"
    logger.info(f"Using Slack {kind} token")
    return WebClient(token=token, timeout=API_TIMEOUT)


def clear_service_cache() -> None:
    """Clear cached clients. Useful for testing or after re-auth."""
    get_gmail_service.cache_clear()
    get_calendar_service.cache_clear()
    get_slack_client.cache_clear()
