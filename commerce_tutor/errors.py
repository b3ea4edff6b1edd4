"""Error taxonomy for the tutor's state and caching layer."""

from __future__ import annotations


class TutorError(Exception):
    """Base class for tutor errors."""


class ProviderError(TutorError):
    """The content provider rejected the request or returned unusable data."""

    def __init__(self, kind: str, message: str):
        self.kind = kind
        super().__init__(f"{kind}: {message}")


class ParseError(ProviderError):
    """Provider response was not well-formed for its expected shape."""


class StorageOverflow(TutorError):
    """Serialized cache container exceeded its size ceiling."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"cache container is {size} chars, limit is {limit}")


class StorageCorruption(TutorError):
    """Persisted bytes could not be decoded into a record."""

    def __init__(self, record: str, reason: str):
        self.record = record
        super().__init__(f"record {record!r} is unreadable: {reason}")
