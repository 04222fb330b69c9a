"""Data models for NewsPulse."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class EntityType(str, Enum):
    PERSON = "person"
    PLACE = "place"
    ORGANIZATION = "organization"
    TOPIC = "topic"


class SentimentLabel(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Intensity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Trend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


def _parse_date(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def utc_date(value: Optional[datetime]) -> Optional[date]:
    """Calendar day in UTC; naive datetimes are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


@dataclass(frozen=True)
class Article:
    """A news article as delivered by the collection layer."""
    id: str
    title: str
    content: str = ""
    summary: str = ""
    category: str = ""
    source: str = ""
    publish_date: Optional[datetime] = None
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Article":
        """Build an article from a collector record (camelCase or snake_case keys)."""
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or "",
            content=data.get("content") or "",
            summary=data.get("summary") or "",
            category=data.get("category") or "",
            source=data.get("source") or "",
            publish_date=_parse_date(data.get("publish_date", data.get("publishDate"))),
            tags=list(data.get("tags") or []),
        )

    @property
    def full_text(self) -> str:
        return " ".join(part for part in (self.title, self.summary, self.content) if part)


@dataclass
class SemanticEntity:
    """A named person, place, organization or topic found in a text."""
    name: str
    type: EntityType
    confidence: float
    mentions: int
    contexts: List[str] = field(default_factory=list)


@dataclass
class SemanticRelation:
    """Relation between two entities co-occurring in one sentence."""
    subject: str
    predicate: str
    object: str
    sentiment: SentimentLabel
    strength: float


@dataclass
class TopicSentiment:
    """Sentence-level sentiment tallies for one topic."""
    topic: str
    positive: int
    negative: int
    neutral: int
    dominant_sentiment: SentimentLabel
    related_entities: List[str] = field(default_factory=list)


@dataclass
class SemanticAnalysis:
    """Output of one SemanticAnalyzer.analyze call."""
    entities: List[SemanticEntity]
    relations: List[SemanticRelation]
    topic_sentiments: List[TopicSentiment]
    key_phrases: List[str]
    semantic_density: float

    @classmethod
    def empty(cls) -> "SemanticAnalysis":
        return cls(entities=[], relations=[], topic_sentiments=[], key_phrases=[], semantic_density=0.0)


@dataclass
class ContextualFactors:
    """How a score was put together."""
    title_weight: float = 0.0
    summary_weight: float = 0.0
    content_weight: float = 0.0
    temporal_relevance: float = 1.0
    linguistic_complexity: float = 0.0
    semantic_entities: int = 0
    semantic_density: float = 0.0


@dataclass
class SentimentResult:
    """Sentiment of one article."""
    sentiment: SentimentLabel
    score: float  # -1.0 to +1.0
    confidence: float  # 0.0 to 1.0
    intensity: Intensity
    emotions: List[str] = field(default_factory=list)
    contextual_factors: Optional[ContextualFactors] = None
    nuances: List[str] = field(default_factory=list)

    @classmethod
    def neutral(cls) -> "SentimentResult":
        return cls(
            sentiment=SentimentLabel.NEUTRAL,
            score=0.0,
            confidence=0.0,
            intensity=Intensity.LOW,
        )

    def to_dict(self) -> Dict[str, Any]:
        factors = self.contextual_factors
        return {
            "sentiment": self.sentiment.value,
            "score": self.score,
            "confidence": self.confidence,
            "intensity": self.intensity.value,
            "emotions": list(self.emotions),
            "contextual_factors": vars(factors).copy() if factors else None,
            "nuances": list(self.nuances),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SentimentResult":
        factors = data.get("contextual_factors")
        return cls(
            sentiment=SentimentLabel(data["sentiment"]),
            score=float(data["score"]),
            confidence=float(data["confidence"]),
            intensity=Intensity(data.get("intensity", Intensity.LOW.value)),
            emotions=list(data.get("emotions") or []),
            contextual_factors=ContextualFactors(**factors) if factors else None,
            nuances=list(data.get("nuances") or []),
        )


@dataclass
class CachedEntry:
    """A scoring result stored under the content hash of its article."""
    key: str
    result: SentimentResult
    timestamp: float
    article_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "result": self.result.to_dict(),
            "timestamp": self.timestamp,
            "article_id": self.article_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CachedEntry":
        return cls(
            key=data["key"],
            result=SentimentResult.from_dict(data["result"]),
            timestamp=float(data["timestamp"]),
            article_id=str(data.get("article_id", "")),
        )


@dataclass
class BatchPartition:
    """Articles split into cache hits and work still to be scored."""
    cached: List[CachedEntry]
    to_analyze: List[Article]


@dataclass
class ValidationMetrics:
    """Quality metrics of one validation run."""
    accuracy: float
    precision: float
    recall: float
    f1_score: float
    coherence_index: float
    confidence: float


@dataclass
class ValidationRecord:
    timestamp: datetime
    metrics: ValidationMetrics
    sample_size: int


@dataclass
class CalibrationResult:
    """Adjustment derived from recent validation history."""
    is_calibrated: bool
    adjustment_factor: float
    recommended_threshold: float
    quality_score: float
    issues: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)


@dataclass
class ConsistencyReport:
    temporal: float
    source: float
    topic: float
    overall: float


@dataclass
class QualityReport:
    grade: str  # "A" to "F"
    metrics: Optional[ValidationMetrics]
    trends: Dict[str, Trend]
    recommendations: List[str]


@dataclass
class RecentArticle:
    id: str
    title: str
    sentiment: SentimentLabel
    timestamp: Optional[datetime]


@dataclass
class RegionalSentiment:
    """Sentiment rollup for one French region."""
    region: str
    region_code: str
    coordinates: tuple  # (longitude, latitude)
    positive_count: int = 0
    negative_count: int = 0
    neutral_count: int = 0
    total_articles: int = 0
    dominant_sentiment: SentimentLabel = SentimentLabel.NEUTRAL
    sentiment_score: float = 0.0
    top_keywords: List[str] = field(default_factory=list)
    recent_articles: List[RecentArticle] = field(default_factory=list)


@dataclass
class SentimentTrendPoint:
    date: str  # YYYY-MM-DD
    positive: int
    negative: int
    neutral: int
    total_articles: int


@dataclass
class KeywordSentiment:
    keyword: str
    positive: int
    negative: int
    neutral: int
    trend: str
    regions: List[str] = field(default_factory=list)


@dataclass
class OverallSentiment:
    positive: int
    negative: int
    neutral: int
    dominant_sentiment: SentimentLabel
    sentiment_score: float


@dataclass
class SentimentOverview:
    """Regional, trend and keyword rollup of a scored batch."""
    overall: OverallSentiment
    regional: List[RegionalSentiment]
    trends: List[SentimentTrendPoint]
    keywords: List[KeywordSentiment]
    last_updated: datetime
