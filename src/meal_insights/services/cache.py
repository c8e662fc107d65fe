"""Single-entry cache state shared by the analysis caches."""

import logging
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")

_logger = logging.getLogger(__name__)


@dataclass
class _CacheEntry(Generic[K, V]):
    key: K
    value: V


class SingleEntryCache(Generic[K, V]):
    """Holds at most one key/value pair, replaced wholesale on a new key."""

    def __init__(self, name: str = "cache") -> None:
        self.name = name
        self._entry: _CacheEntry[K, V] | None = None

    def is_valid(self, key: K) -> bool:
        """Return True when a value is held for a key equal to ``key``."""
        return self._entry is not None and self._entry.key == key

    def get(self, key: K) -> V | None:
        """Return the held value for ``key``, or None on a miss."""
        if self._entry is None or self._entry.key != key:
            _logger.debug("%s miss: key=%s", self.name, key)
            return None
        _logger.debug("%s hit: key=%s", self.name, key)
        return self._entry.value

    def store(self, key: K, value: V) -> None:
        """Replace the held pair."""
        self._entry = _CacheEntry(key=key, value=value)

    def invalidate(self) -> None:
        """Drop the held pair, if any."""
        if self._entry is not None:
            _logger.debug("%s invalidated: key=%s", self.name, self._entry.key)
        self._entry = None

    @property
    def key(self) -> K | None:
        return None if self._entry is None else self._entry.key
