"""NewsPulse - semantic sentiment analysis for French news."""

__version__ = "1.0.0"
__author__ = "NewsPulse Team"

from .core.models import *
from .core.config import settings, setup_logging
from .core.scoring import SentimentScorer
from .core.semantic import SemanticAnalyzer
from .core.validation import SentimentValidator
from .services.cache import ResultCache
from .services.pipeline import PipelineFactory, SentimentPipeline

__all__ = [
    "settings",
    "setup_logging",
    "SentimentScorer",
    "SemanticAnalyzer",
    "SentimentValidator",
    "ResultCache",
    "SentimentPipeline",
    "PipelineFactory",
]
