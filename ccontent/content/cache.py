"""Per-id cache of structured content with stale-result cancellation.

Each transformation for an id is tagged with a monotonically increasing
request token. Only the result carrying the latest token for that id is kept,
and it replaces whatever was cached before; results from superseded requests
are discarded. The cache is meant to be driven from a single event loop or
thread.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from .models import Subsection

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def needs_processing(entry: Any) -> bool:
    """True when ``entry`` lacks already-structured pages."""
    if entry is None:
        return True
    if isinstance(entry, Subsection):
        return False
    if isinstance(entry, Sequence) and not isinstance(entry, (str, bytes)):
        return not entry or any(needs_processing(item) for item in entry)
    if not isinstance(entry, Mapping):
        return True
    pages = entry.get("pages")
    if not isinstance(pages, Sequence) or isinstance(pages, str) or not pages:
        return True
    for page in pages:
        if isinstance(page, Mapping):
            if not str(page.get("content") or "").strip():
                return True
        elif not hasattr(page, "content"):
            return True
    return False


class SubsectionCache(Generic[T]):
    """Cache keyed by subsection/module id; recomputation always replaces."""

    def __init__(self) -> None:
        self._entries: Dict[str, T] = {}
        self._tokens: Dict[str, int] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[T]:
        return self._entries.get(key)

    def latest_token(self, key: str) -> int:
        return self._tokens.get(key, 0)

    def issue_token(self, key: str) -> int:
        """Start a new request for ``key``; earlier tokens become stale."""
        token = self._tokens.get(key, 0) + 1
        self._tokens[key] = token
        return token

    def is_current(self, key: str, token: int) -> bool:
        return self._tokens.get(key) == token

    def store(self, key: str, token: int, value: T) -> bool:
        """Keep ``value`` only if ``token`` is still the latest for ``key``."""
        if not self.is_current(key, token):
            LOGGER.debug("Discarding stale result for %s (token %s, latest %s)", key, token, self.latest_token(key))
            return False
        self._entries[key] = value
        return True

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def get_or_process(self, key: str, process: Callable[[], T], *, force: bool = False) -> T:
        """Return the cached value unless it still needs processing."""
        cached = self._entries.get(key)
        if not force and cached is not None and not needs_processing(cached):
            return cached
        token = self.issue_token(key)
        value = process()
        if not self.store(key, token, value):
            # A newer request for this id finished while we were processing.
            newer = self._entries.get(key)
            return newer if newer is not None else value
        return value


__all__ = ["SubsectionCache", "needs_processing"]
