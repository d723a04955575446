"""In-memory cache of parsed region forests shared across worker threads."""

from __future__ import annotations

import hashlib
import threading
from typing import Callable, Dict, Tuple

from ..markers import DOXYGEN, MarkerSyntax, extract
from ..models import RegionForest

_CacheKey = Tuple[str, str, str]


def fingerprint(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


class ForestCache:
    """Stores region forests keyed by source path, content hash and marker syntax.

    Entries are populated once per key; concurrent lookups for a key that is
    being built may extract twice but only the first result is kept.
    """

    def __init__(
        self, extractor: Callable[[str, MarkerSyntax], RegionForest] = extract
    ) -> None:
        self._extractor = extractor
        self._entries: Dict[_CacheKey, RegionForest] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get_or_extract(
        self, path: str, text: str, syntax: MarkerSyntax = DOXYGEN
    ) -> RegionForest:
        """Return the cached forest for ``text`` or extract and store it."""
        key = (path, fingerprint(text), syntax.name)
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self.hits += 1
                return cached
            self.misses += 1

        forest = self._extractor(text, syntax)
        with self._lock:
            return self._entries.setdefault(key, forest)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["ForestCache", "fingerprint"]
