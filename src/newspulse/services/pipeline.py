"""Wiring of scorer, cache, validator and aggregator."""

import logging
import sqlite3
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.aggregation import SentimentAggregator
from ..core.config import Settings, settings as default_settings
from ..core.lexicon import load_lexicon
from ..core.models import Article, CalibrationResult, SentimentOverview, SentimentResult, ValidationMetrics
from ..core.scoring import SentimentScorer
from ..core.semantic import SemanticAnalyzer
from ..core.validation import SentimentValidator
from .cache import ResultCache
from .persistence import CachePersistence, DiskCacheBackend, PersistenceBackend

logger = logging.getLogger(__name__)

ScoredArticle = Tuple[Article, SentimentResult]


def _open_disk_backend(directory: str) -> Optional[DiskCacheBackend]:
    """Open the durable store, or None when it is unavailable."""
    try:
        return DiskCacheBackend(directory)
    except (OSError, sqlite3.Error) as e:
        logger.warning(f"Cache store at {directory} unavailable, running without persistence: {e}")
        return None


class SentimentPipeline:
    """Scores articles through the cache; everything is injected."""

    def __init__(
        self,
        scorer: SentimentScorer,
        cache: Optional[ResultCache] = None,
        validator: Optional[SentimentValidator] = None,
        aggregator: Optional[SentimentAggregator] = None,
    ):
        self.scorer = scorer
        self.cache = cache if cache is not None else ResultCache()
        self.validator = validator if validator is not None else SentimentValidator()
        self.aggregator = aggregator if aggregator is not None else SentimentAggregator()

    def score_articles(self, articles: Sequence[Article]) -> List[ScoredArticle]:
        """One (article, result) pair per input, in input order."""
        partition = self.cache.analyze_batch(articles)
        by_key: Dict[str, SentimentResult] = {e.key: e.result for e in partition.cached}

        fresh: List[ScoredArticle] = []
        for article in partition.to_analyze:
            key = self.cache.make_key(article.title, article.content)
            if key not in by_key:
                by_key[key] = self.scorer.score(article)
                fresh.append((article, by_key[key]))
        self.cache.set_batch(fresh)
        if fresh:
            logger.info(f"Scored {len(fresh)} new articles")

        return [(a, by_key[self.cache.make_key(a.title, a.content)]) for a in articles]

    def score(self, article: Article) -> SentimentResult:
        return self.score_articles([article])[0][1]

    def validate(self, articles: Sequence[Article]) -> ValidationMetrics:
        pairs = self.score_articles(articles)
        return self.validator.validate([a for a, _ in pairs], [r for _, r in pairs])

    def calibrate(self, apply: bool = False) -> CalibrationResult:
        """Compute a calibration; feed it to the scorer only when asked."""
        calibration = self.validator.calibrate()
        if apply:
            self.scorer.apply_calibration(calibration)
        return calibration

    def overview(self, articles: Sequence[Article], now: Optional[datetime] = None) -> SentimentOverview:
        pairs = self.score_articles(articles)
        return self.aggregator.aggregate([a for a, _ in pairs], [r for _, r in pairs], now=now)

    def close(self) -> None:
        self.cache.close()


class PipelineFactory:
    """Factory for creating sentiment pipelines."""

    @staticmethod
    def create(settings: Optional[Settings] = None, backend: Optional[PersistenceBackend] = None) -> SentimentPipeline:
        """Build a pipeline from settings and warm its cache."""
        settings = settings or default_settings
        lexicon = load_lexicon(settings.lexicon_path) if settings.lexicon_path else None

        scorer = SentimentScorer(
            lexicon=lexicon,
            analyzer=SemanticAnalyzer(),
            negation_factor=settings.negation_factor,
            negation_shift=settings.negation_shift,
            double_negation_damping=settings.double_negation_damping,
        )
        if backend is None:
            backend = _open_disk_backend(settings.cache_dir)
        persistence = None
        if backend is not None:
            persistence = CachePersistence(
                backend,
                key=settings.cache_persist_key,
                max_age_days=settings.cache_persist_max_age_days,
                max_retries=settings.max_retries,
                retry_delay=settings.retry_delay,
                retry_backoff=settings.retry_backoff,
            )
        cache = ResultCache(
            ttl_hours=settings.cache_ttl_hours,
            max_entries=settings.cache_max_entries,
            persistence=persistence,
        )
        cache.load()

        logger.info("Sentiment pipeline initialized")
        return SentimentPipeline(
            scorer=scorer,
            cache=cache,
            validator=SentimentValidator(history_size=settings.validation_history_size),
        )
