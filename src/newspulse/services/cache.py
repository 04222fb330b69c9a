"""Content-addressed cache of sentiment results."""

import hashlib
import logging
import threading
import time
from dataclasses import replace
from typing import Callable, Dict, Iterable, Optional, Tuple

from ..core.constants import CacheConstants
from ..core.models import Article, BatchPartition, CachedEntry, SentimentResult
from ..utils.text import normalize_whitespace
from .persistence import CachePersistence

logger = logging.getLogger(__name__)


class ResultCache:
    """Memoizes scoring results by a hash of the article text.

    Keys ignore article ids, so the same text under two ids shares one entry
    and an edited text misses. Entries expire after the TTL and are evicted
    when read. Persistence happens only when the host calls ``load`` or
    ``flush``.
    """

    def __init__(
        self,
        ttl_hours: float = CacheConstants.CACHE_TTL_HOURS,
        max_entries: int = CacheConstants.MAX_CACHE_SIZE,
        persistence: Optional[CachePersistence] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_hours * 3600
        self.max_entries = max(1, int(max_entries))
        self.persistence = persistence
        self._clock = clock
        self._entries: Dict[str, CachedEntry] = {}
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(title: str, content: str) -> str:
        """Stable hash of the normalized start of title + content."""
        text = normalize_whitespace(f"{title or ''} {content or ''}".lower())
        prefix = text[:CacheConstants.HASH_PREFIX_CHARS]
        return hashlib.md5(prefix.encode("utf-8")).hexdigest()[:16]

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, entry: CachedEntry, now: float) -> bool:
        return now - entry.timestamp >= self.ttl_seconds

    def _lookup(self, key: str) -> Optional[CachedEntry]:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            logger.debug(f"Cache miss: {key[:CacheConstants.CACHE_KEY_LENGTH]}...")
            return None
        if self._expired(entry, self._clock()):
            del self._entries[key]
            self.misses += 1
            logger.debug(f"Cache entry expired: {key[:CacheConstants.CACHE_KEY_LENGTH]}...")
            return None
        self.hits += 1
        logger.debug(f"Cache hit: {key[:CacheConstants.CACHE_KEY_LENGTH]}...")
        return entry

    def get(self, article_id: str, title: str, content: str) -> Optional[SentimentResult]:
        with self._lock:
            entry = self._lookup(self.make_key(title, content))
            return entry.result if entry else None

    def set(self, article_id: str, title: str, content: str, result: SentimentResult) -> None:
        with self._lock:
            if len(self._entries) >= self.max_entries:
                self._cleanup()
            key = self.make_key(title, content)
            self._entries[key] = CachedEntry(key=key, result=result, timestamp=self._clock(), article_id=article_id)

    def set_batch(self, items: Iterable[Tuple[Article, SentimentResult]]) -> None:
        with self._lock:
            for article, result in items:
                self.set(article.id, article.title, article.content, result)

    def _cleanup(self):
        """Drop expired entries, then the oldest share if still near capacity."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if self._expired(e, now)]
        for key in expired:
            del self._entries[key]

        evicted = 0
        if len(self._entries) > self.max_entries * CacheConstants.CLEANUP_HIGH_WATER:
            count = max(1, int(len(self._entries) * CacheConstants.CLEANUP_EVICT_SHARE))
            oldest = sorted(self._entries.values(), key=lambda e: e.timestamp)[:count]
            for entry in oldest:
                del self._entries[entry.key]
            evicted = len(oldest)
        logger.info(f"Cache cleanup: {len(expired)} expired, {evicted} evicted, {len(self._entries)} remain")

    def analyze_batch(self, articles: Iterable[Article]) -> BatchPartition:
        """Split articles into cache hits and articles still to be scored."""
        cached, to_analyze = [], []
        with self._lock:
            for article in articles:
                entry = self._lookup(self.make_key(article.title, article.content))
                if entry is None:
                    to_analyze.append(article)
                else:
                    cached.append(replace(entry, article_id=article.id))
        logger.info(f"Batch partition: {len(cached)} cached, {len(to_analyze)} to analyze")
        return BatchPartition(cached=cached, to_analyze=to_analyze)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def stats(self) -> Dict[str, object]:
        with self._lock:
            lookups = self.hits + self.misses
            timestamps = [e.timestamp for e in self._entries.values()]
            return {
                "size": len(self._entries),
                "max_entries": self.max_entries,
                "hits": self.hits,
                "misses": self.misses,
                "hit_rate": self.hits / lookups if lookups else 0.0,
                "oldest": min(timestamps) if timestamps else None,
                "newest": max(timestamps) if timestamps else None,
            }

    # --- Persistence --------------------------------------------------------

    def load(self) -> int:
        """Warm start from the persisted snapshot. Returns entries loaded."""
        if self.persistence is None:
            return 0
        entries = self.persistence.load(self.ttl_seconds)
        with self._lock:
            for entry in entries:
                current = self._entries.get(entry.key)
                if current is None or current.timestamp < entry.timestamp:
                    self._entries[entry.key] = entry
        return len(entries)

    def flush(self) -> bool:
        """Persist live entries. Returns False if there is no store or it failed."""
        if self.persistence is None:
            return False
        with self._lock:
            now = self._clock()
            entries = [e for e in self._entries.values() if not self._expired(e, now)]
        return self.persistence.save(entries)

    def close(self) -> None:
        self.flush()
        backend = getattr(self.persistence, "backend", None)
        if hasattr(backend, "close"):
            backend.close()
