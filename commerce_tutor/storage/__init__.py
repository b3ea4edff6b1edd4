"""Local persistence: key/value substrate, progress record and content cache."""

from commerce_tutor.storage.content_cache import CONTENT_CACHE_RECORD, ContentCache
from commerce_tutor.storage.progress_store import PROGRESS_RECORD, ProgressStore
from commerce_tutor.storage.substrate import (
    KeyValueStore,
    MemoryKeyValueStore,
    SQLiteKeyValueStore,
)

__all__ = [
    "CONTENT_CACHE_RECORD",
    "PROGRESS_RECORD",
    "ContentCache",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "ProgressStore",
    "SQLiteKeyValueStore",
]
