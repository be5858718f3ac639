"""
Identity resolution cache.

Maps chat user IDs to display names. One cache lives for one archiving run
and is handed to the chat formatter explicitly, so tests can pass a fake
lookup and count calls.
"""

from collections.abc import Callable

from logging_config import logger
from models import ArchiveError

# lookup(user_id) -> display name, or None when the user is unknown
Lookup = Callable[[str], str | None]


class IdentityCache:
    """
    Write-once-per-key cache in front of an identity lookup.

    Every ID is looked up at most once. Not-found and failed lookups are
    cached too and resolve to the raw ID.
    """

    def __init__(self, lookup: Lookup, seed: dict[str, str] | None = None):
        self._lookup = lookup
        self._names: dict[str, str] = dict(seed or {})
        self.lookups = 0

    def resolve(self, user_id: str) -> str:
        """Display name for user_id, falling back to the ID itself."""
        if user_id in self._names:
            return self._names[user_id]

        self.lookups += 1
        try:
            name = self._lookup(user_id)
        except ArchiveError as e:
            logger.debug(f"Identity lookup for {user_id} failed ({e.kind.value}), using raw ID")
            name = None

        resolved = name or user_id
        self._names[user_id] = resolved
        return resolved

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._names

    def __len__(self) -> int:
        return len(self._names)
