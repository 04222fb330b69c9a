"""Services for NewsPulse."""

from .cache import ResultCache
from .persistence import CachePersistence, DiskCacheBackend, MemoryBackend
from .pipeline import PipelineFactory, SentimentPipeline

__all__ = [
    "ResultCache",
    "CachePersistence",
    "DiskCacheBackend",
    "MemoryBackend",
    "PipelineFactory",
    "SentimentPipeline",
]
