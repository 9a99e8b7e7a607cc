"""In-memory cache of rendered pages keyed by the exact requested URL."""

from __future__ import annotations

from collections import OrderedDict
from typing import Any, Optional


class ResponseCache:
    """First-write-wins map of URL -> HTML.

    Unbounded by default. With ``max_entries`` > 0 the least recently used
    entry is evicted once the bound is exceeded. No locking: a key is only
    ever written once, so a concurrent reader sees either nothing or the
    final value.
    """

    def __init__(self, max_entries: int = 0):
        self._entries: OrderedDict[str, str] = OrderedDict()
        self._max_entries = max_entries
        self.hits = 0
        self.misses = 0

    def get(self, url: str) -> Optional[str]:
        html = self._entries.get(url)
        if html is None:
            self.misses += 1
            return None
        self.hits += 1
        if self._max_entries:
            self._entries.move_to_end(url)
        return html

    def put(self, url: str, html: str) -> str:
        """Store ``html`` unless ``url`` is already cached. Returns the stored value."""
        existing = self._entries.get(url)
        if existing is not None:
            return existing
        self._entries[url] = html
        if self._max_entries and len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
        return html

    def __contains__(self, url: object) -> bool:
        return url in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> dict[str, Any]:
        return {"size": len(self._entries), "hits": self.hits, "misses": self.misses}
