"""
API error classification.

Used by adapters to turn client-library exceptions (googleapiclient HttpError,
slack_sdk SlackApiError, network errors) into ArchiveError with a kind the
tools can report. Nothing here retries; the pacing delay in paginator.py is
the only rate-limit mitigation.
"""

from functools import wraps
from typing import TypeVar, Callable, Any, ParamSpec
from urllib.error import URLError

from logging_config import logger
from models import ArchiveError, ErrorKind

T = TypeVar("T")
P = ParamSpec("P")


# Exceptions that mean "the network let us down"
NETWORK_EXCEPTIONS: tuple[type[Exception], ...] = (
    ConnectionError,
    URLError,
)

# HTTP status codes that indicate a transient condition
TRANSIENT_STATUS_CODES: frozenset[int] = frozenset({
    429,  # Rate limited
    500,  # Internal server error
    502,  # Bad gateway
    503,  # Service unavailable
    504,  # Gateway timeout
})

# Slack reports most failures as HTTP 200 with an error string
SLACK_ERROR_KINDS: dict[str, ErrorKind] = {
    "not_authed": ErrorKind.AUTH_REQUIRED,
    "invalid_auth": ErrorKind.AUTH_REQUIRED,
    "account_inactive": ErrorKind.AUTH_REQUIRED,
    "token_revoked": ErrorKind.AUTH_EXPIRED,
    "token_expired": ErrorKind.AUTH_EXPIRED,
    "ratelimited": ErrorKind.RATE_LIMITED,
    "rate_limited": ErrorKind.RATE_LIMITED,
    "channel_not_found": ErrorKind.NOT_FOUND,
    "user_not_found": ErrorKind.NOT_FOUND,
    "users_not_found": ErrorKind.NOT_FOUND,
    "not_in_channel": ErrorKind.PERMISSION_DENIED,
    "missing_scope": ErrorKind.PERMISSION_DENIED,
    "access_denied": ErrorKind.PERMISSION_DENIED,
}


def _get_http_status(exception: Exception) -> int | None:
    """
    Extract HTTP status code from exception if available.

    Works with googleapiclient.errors.HttpError, slack_sdk SlackApiError
    and requests-style exceptions.
    """
    # Check for resp.status attribute (googleapiclient.errors.HttpError)
    if hasattr(exception, "resp") and hasattr(exception.resp, "status"):
        status = exception.resp.status
        if isinstance(status, int):
            return status

    # Check for response.status_code attribute (slack_sdk SlackApiError)
    response = getattr(exception, "response", None)
    if response is not None and hasattr(response, "status_code"):
        status = response.status_code
        if isinstance(status, int):
            return status

    # Check for status_code attribute (requests-style)
    if hasattr(exception, "status_code"):
        status = exception.status_code
        if isinstance(status, int):
            return status

    return None


def _get_slack_error(exception: Exception) -> str | None:
    """Extract the Slack `error` string from a SlackApiError, if present."""
    response = getattr(exception, "response", None)
    getter = getattr(response, "get", None)
    if getter is None:
        return None
    try:
        error = getter("error")
    except (TypeError, KeyError):
        return None
    return error if isinstance(error, str) else None


def is_transient(exception: Exception) -> bool:
    """True when a failure looks temporary (network, 429, 5xx)."""
    if isinstance(exception, ArchiveError):
        return exception.kind in (
            ErrorKind.RATE_LIMITED, ErrorKind.NETWORK_ERROR, ErrorKind.TIMEOUT,
        )
    if isinstance(exception, (TimeoutError, *NETWORK_EXCEPTIONS)):
        return True
    status = _get_http_status(exception)
    return status is not None and status in TRANSIENT_STATUS_CODES


def convert_api_error(exception: Exception) -> ArchiveError:
    """Convert an exception to an ArchiveError if not already one."""
    if isinstance(exception, ArchiveError):
        return exception

    # Slack's error string is more specific than its HTTP status
    slack_error = _get_slack_error(exception)
    if slack_error and slack_error in SLACK_ERROR_KINDS:
        return ArchiveError(
            SLACK_ERROR_KINDS[slack_error], str(exception), details={"slack_error": slack_error},
        )

    # Check HTTP status first (more reliable than string matching)
    status = _get_http_status(exception)
    if status is not None:
        if status == 401:
            return ArchiveError(ErrorKind.AUTH_EXPIRED, str(exception))
        elif status == 403:
            return ArchiveError(ErrorKind.PERMISSION_DENIED, str(exception))
        elif status == 404:
            return ArchiveError(ErrorKind.NOT_FOUND, str(exception))
        elif status == 429:
            return ArchiveError(ErrorKind.RATE_LIMITED, str(exception))
        elif status >= 500:
            return ArchiveError(ErrorKind.NETWORK_ERROR, str(exception))

    # Fall back to exception type
    if isinstance(exception, TimeoutError):
        return ArchiveError(ErrorKind.TIMEOUT, str(exception))
    if isinstance(exception, NETWORK_EXCEPTIONS):
        return ArchiveError(ErrorKind.NETWORK_ERROR, str(exception))

    return ArchiveError(ErrorKind.UNKNOWN, str(exception))


def translate_errors(func: Callable[P, T]) -> Callable[P, T]:
    """
    Decorator for adapter calls: any exception leaves as an ArchiveError.

    Example:
        @translate_errors
        def fetch_message(message_id: str) -> dict:
            return service.users().messages().get(...).execute()
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return func(*args, **kwargs)
        except ArchiveError:
            raise
        except Exception as e:
            error = convert_api_error(e)
            logger.debug(f"{func.__name__} failed ({error.kind.value}): {e}")
            raise error from e

    return wrapper
