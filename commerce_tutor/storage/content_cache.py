"""
Write-through cache for generated content.

All entries live in a single JSON container persisted as one record. When
a write pushes the serialized container past the size ceiling, the whole
container is discarded and replaced by one holding only the new entry.
"""

from __future__ import annotations

import json
from typing import Any

from loguru import logger

from commerce_tutor.errors import StorageCorruption, StorageOverflow
from commerce_tutor.storage.substrate import KeyValueStore

CONTENT_CACHE_RECORD = "gseb_content_cache"
DEFAULT_MAX_CHARS = 4_500_000


class ContentCache:
    """Keyed cache of provider output over a key/value substrate."""

    def __init__(
        self,
        substrate: KeyValueStore,
        max_chars: int = DEFAULT_MAX_CHARS,
        record_name: str = CONTENT_CACHE_RECORD,
    ):
        if max_chars <= 0:
            raise ValueError("max_chars must be positive")
        self.substrate = substrate
        self.max_chars = max_chars
        self.record_name = record_name

    def _read_container(self) -> dict[str, Any]:
        raw = self.substrate.get(self.record_name)
        if raw is None:
            return {}
        try:
            container = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageCorruption(self.record_name, str(e)) from e
        if not isinstance(container, dict):
            raise StorageCorruption(self.record_name, "container is not a JSON object")
        return container

    def _write(self, serialized: str) -> None:
        self.substrate.set(self.record_name, serialized.encode("utf-8"))

    def _serialize(self, container: dict[str, Any]) -> str:
        serialized = json.dumps(container, ensure_ascii=False)
        if len(serialized) > self.max_chars:
            raise StorageOverflow(len(serialized), self.max_chars)
        return serialized

    def get(self, key: str) -> Any | None:
        """
        Look up a cached value.

        Returns:
            The stored value, or None on a miss or unreadable container
        """
        try:
            container = self._read_container()
        except StorageCorruption as e:
            logger.warning(f"Content cache unreadable, treating as miss: {e}")
            return None

        value = container.get(key)
        logger.debug(f"Cache {'hit' if value is not None else 'miss'}: {key}")
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Store a value and persist the container immediately.

        If the container would exceed ``max_chars`` it is flushed first, so
        other entries may disappear; ``key`` itself always survives unless
        the value alone is over the ceiling.
        """
        try:
            container = self._read_container()
        except StorageCorruption as e:
            logger.warning(f"Replacing unreadable content cache: {e}")
            container = {}

        container[key] = value
        try:
            self._write(self._serialize(container))
            return
        except StorageOverflow as e:
            logger.warning(f"Content cache overflow ({e}); flushing {len(container) - 1} entries")

        try:
            self._write(self._serialize({key: value}))
        except StorageOverflow as e:
            logger.error(f"Entry {key} alone exceeds the cache ceiling, not cached: {e}")
            self.clear()

    def clear(self) -> None:
        """Drop every cached entry."""
        self.substrate.delete(self.record_name)

    def keys(self) -> list[str]:
        try:
            return list(self._read_container())
        except StorageCorruption:
            return []

    def size_chars(self) -> int:
        """Serialized size of the stored container."""
        raw = self.substrate.get(self.record_name)
        if raw is None:
            return 0
        return len(raw.decode("utf-8", errors="replace"))

    def __len__(self) -> int:
        return len(self.keys())
