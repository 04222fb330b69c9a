"""Core modules for NewsPulse."""

from .models import *
from .config import settings
from .lexicon import Lexicon, LexiconEntry, default_lexicon, load_lexicon
from .semantic import SemanticAnalyzer
from .scoring import SentimentScorer
from .validation import SentimentValidator
from .aggregation import SentimentAggregator

__all__ = [
    "settings",
    "Article",
    "SemanticEntity",
    "SemanticRelation",
    "TopicSentiment",
    "SentimentResult",
    "CachedEntry",
    "ValidationMetrics",
    "CalibrationResult",
    "Lexicon",
    "LexiconEntry",
    "default_lexicon",
    "load_lexicon",
    "SemanticAnalyzer",
    "SentimentScorer",
    "SentimentValidator",
    "SentimentAggregator",
]
