"""
NewsPulse exceptions.

Scoring and analysis never raise for bad text; these errors describe
configuration and storage failures. Cache and persistence errors are raised
internally and caught at the cache boundary so a broken store only costs a
cold cache.
"""

from typing import Any, Dict, Optional


class NewsPulseError(Exception):
    """Base exception for all NewsPulse errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class LexiconError(NewsPulseError):
    """A lexicon document is missing, unreadable or has the wrong shape."""

    def __init__(self, message: str, path: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.path = path


class CacheCorruptionError(NewsPulseError):
    """A persisted cache snapshot could not be decoded."""

    def __init__(self, message: str, raw_data: Optional[bytes] = None, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.raw_preview = raw_data[:100] if raw_data else None


class PersistenceError(NewsPulseError):
    """The durable store failed to load or save a snapshot."""
    pass
