"""Durable snapshots of the result cache."""

import json
import logging
import time
from typing import Callable, Dict, List, Optional, Protocol

from diskcache import Cache
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.constants import CacheConstants, FileConstants
from ..core.exceptions import CacheCorruptionError, PersistenceError
from ..core.models import CachedEntry

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class PersistenceBackend(Protocol):
    """Opaque key/value store the cache snapshots into."""

    def load(self, key: str) -> Optional[bytes]:
        ...

    def save(self, key: str, data: bytes) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryBackend:
    """In-process backend, mostly for tests."""

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}

    def load(self, key: str) -> Optional[bytes]:
        return self.blobs.get(key)

    def save(self, key: str, data: bytes) -> None:
        self.blobs[key] = data

    def delete(self, key: str) -> None:
        self.blobs.pop(key, None)


class DiskCacheBackend:
    """Backend on a diskcache directory."""

    def __init__(self, directory: str = FileConstants.CACHE_DIR):
        self.directory = directory
        self.cache = Cache(directory)
        logger.info(f"Disk persistence initialized at {directory}")

    def load(self, key: str) -> Optional[bytes]:
        return self.cache.get(key)

    def save(self, key: str, data: bytes) -> None:
        self.cache.set(key, data)

    def delete(self, key: str) -> None:
        self.cache.delete(key)

    def close(self) -> None:
        self.cache.close()


class CachePersistence:
    """Encodes cache entries into a versioned JSON snapshot on a backend.

    Failures never reach the caller: a broken or missing snapshot loads as an
    empty list, and a failed save is retried and then reported as ``False``.
    """

    def __init__(
        self,
        backend: PersistenceBackend,
        key: str = CacheConstants.PERSIST_KEY,
        max_age_days: float = CacheConstants.PERSIST_MAX_AGE_DAYS,
        max_bytes: int = CacheConstants.PERSIST_MAX_BYTES,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        retry_backoff: float = 2.0,
        clock: Callable[[], float] = time.time,
    ):
        self.backend = backend
        self.key = key
        self.max_age_seconds = max_age_days * 24 * 3600
        self.max_bytes = max_bytes
        self.max_retries = max(1, int(max_retries))
        self.retry_delay = retry_delay
        self.retry_backoff = retry_backoff
        self._clock = clock

    def encode(self, entries: List[CachedEntry]) -> bytes:
        snapshot = {
            "version": SNAPSHOT_VERSION,
            "timestamp": self._clock(),
            "entries": [e.to_dict() for e in entries],
        }
        return json.dumps(snapshot, ensure_ascii=False).encode("utf-8")

    def decode(self, blob: bytes) -> Dict:
        try:
            snapshot = json.loads(blob.decode("utf-8") if isinstance(blob, bytes) else blob)
            if not isinstance(snapshot, dict) or not isinstance(snapshot.get("entries"), list):
                raise ValueError("snapshot has no entry list")
            snapshot["timestamp"] = float(snapshot.get("timestamp", 0))
            snapshot["entries"] = [CachedEntry.from_dict(e) for e in snapshot["entries"]]
        except (UnicodeDecodeError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise CacheCorruptionError(
                f"Unreadable cache snapshot: {e}",
                raw_data=blob if isinstance(blob, bytes) else None,
                details={"key": self.key},
            ) from e
        return snapshot

    def load(self, ttl_seconds: float) -> List[CachedEntry]:
        """Entries still within TTL from the last snapshot, or [] on any problem."""
        try:
            blob = self.backend.load(self.key)
        except Exception as e:
            logger.warning(f"Failed to load cache snapshot: {e}. Starting cold.")
            return []
        if not blob:
            return []

        try:
            snapshot = self.decode(blob)
        except CacheCorruptionError as e:
            logger.warning(f"{e.message}. Dropping snapshot and starting cold.")
            self._discard()
            return []

        now = self._clock()
        if now - snapshot["timestamp"] > self.max_age_seconds:
            logger.info("Cache snapshot too old, discarding")
            self._discard()
            return []

        entries = [e for e in snapshot["entries"] if now - e.timestamp < ttl_seconds]
        logger.info(f"Loaded {len(entries)} cached results ({len(snapshot['entries']) - len(entries)} expired)")
        return entries

    def _discard(self):
        try:
            self.backend.delete(self.key)
        except Exception as e:
            logger.warning(f"Failed to delete cache snapshot: {e}")

    def _save_once(self, blob: bytes):
        try:
            self.backend.save(self.key, blob)
        except Exception as e:
            raise PersistenceError(f"Backend save failed: {e}", details={"key": self.key}) from e

    def save(self, entries: List[CachedEntry]) -> bool:
        """Write a snapshot, shrinking it to the newest entries if oversized."""
        entries = sorted(entries, key=lambda e: e.timestamp, reverse=True)
        blob = self.encode(entries)
        while len(blob) > self.max_bytes and entries:
            entries = entries[:len(entries) // 2]
            blob = self.encode(entries)
            logger.info(f"Cache snapshot oversized, keeping newest {len(entries)} entries")

        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_delay, max=self.retry_backoff * 10),
            retry=retry_if_exception_type(PersistenceError),
            reraise=True,
        )
        try:
            retrying(self._save_once, blob)
        except PersistenceError as e:
            logger.warning(f"Giving up on cache snapshot after {self.max_retries} attempts: {e.message}")
            return False
        logger.info(f"Saved {len(entries)} cached results")
        return True
