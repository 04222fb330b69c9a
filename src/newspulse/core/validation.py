"""Validation, consistency testing and calibration of sentiment results."""

import logging
from collections import defaultdict
from datetime import datetime
from itertools import combinations
from typing import Dict, List, Optional, Sequence

from .constants import ValidationConstants
from .models import (
    Article,
    CalibrationResult,
    ConsistencyReport,
    QualityReport,
    SentimentLabel,
    SentimentResult,
    Trend,
    ValidationMetrics,
    ValidationRecord,
    utc_date,
)
from ..utils.text import clamp, jaccard_similarity

logger = logging.getLogger(__name__)

# Deliberately tiny and independent from the scoring lexicon
REFERENCE_POSITIVE = ["succès", "victoire", "excellent", "bon", "amélioration", "croissance"]
REFERENCE_NEGATIVE = ["échec", "crise", "problème", "mauvais", "chute", "difficulté"]


def reference_label(article: Article) -> SentimentLabel:
    """Keyword-count label used as a stand-in for ground truth."""
    text = f"{article.title} {article.content}".lower()
    positive = sum(text.count(word) for word in REFERENCE_POSITIVE)
    negative = sum(text.count(word) for word in REFERENCE_NEGATIVE)
    if positive > negative:
        return SentimentLabel.POSITIVE
    if negative > positive:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


def _variance(values: List[float]) -> float:
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


def _group_consistency(groups: Dict[str, List[float]], min_size: int, k: float, default: float) -> float:
    scores = [max(0.0, 1 - _variance(v) * k) for v in groups.values() if len(v) >= min_size]
    return sum(scores) / len(scores) if scores else default


def _slope(values: List[float]) -> float:
    """Least-squares slope of values against their index."""
    n = len(values)
    if n < 2:
        return 0.0
    sum_x = n * (n - 1) / 2
    sum_y = sum(values)
    sum_xy = sum(i * v for i, v in enumerate(values))
    sum_x2 = sum(i * i for i in range(n))
    return (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)


def _trend(values: List[float]) -> Trend:
    slope = _slope(values)
    if slope > ValidationConstants.TREND_SLOPE:
        return Trend.IMPROVING
    if slope < -ValidationConstants.TREND_SLOPE:
        return Trend.DECLINING
    return Trend.STABLE


class SentimentValidator:
    """Measures pipeline quality over time and derives a calibration.

    Holds a bounded, append-only history of validation runs. Nothing here
    changes scoring by itself; see ``SentimentScorer.apply_calibration``.
    """

    def __init__(self, history_size: int = ValidationConstants.HISTORY_SIZE, clock=datetime.now):
        self.history_size = max(1, int(history_size))
        self.history: List[ValidationRecord] = []
        self._clock = clock

    def _check_aligned(self, articles: Sequence[Article], results: Sequence[SentimentResult]):
        if len(articles) != len(results):
            raise ValueError(
                f"articles and results must be aligned: got {len(articles)} articles, {len(results)} results"
            )

    def validate(self, articles: Sequence[Article], results: Sequence[SentimentResult]) -> ValidationMetrics:
        """Score results against reference labels and record the run."""
        self._check_aligned(articles, results)
        if not articles:
            return ValidationMetrics(0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

        references = [reference_label(a) for a in articles]
        predicted = [r.sentiment for r in results]

        correct = sum(1 for ref, pred in zip(references, predicted) if ref == pred)
        accuracy = correct / len(articles)

        positive = SentimentLabel.POSITIVE
        true_pos = sum(1 for ref, pred in zip(references, predicted) if ref == positive and pred == positive)
        predicted_pos = sum(1 for pred in predicted if pred == positive)
        actual_pos = sum(1 for ref in references if ref == positive)
        precision = true_pos / predicted_pos if predicted_pos else 0.0
        recall = true_pos / actual_pos if actual_pos else 0.0
        f1_score = 2 * precision * recall / (precision + recall) if precision + recall else 0.0

        metrics = ValidationMetrics(
            accuracy=accuracy,
            precision=precision,
            recall=recall,
            f1_score=f1_score,
            coherence_index=self.coherence_index(articles, results),
            confidence=sum(r.confidence for r in results) / len(results),
        )
        self._record(metrics, len(articles))
        logger.info(
            f"Validated {len(articles)} results: accuracy={accuracy:.2f}, f1={f1_score:.2f}, "
            f"coherence={metrics.coherence_index:.2f}"
        )
        return metrics

    def _record(self, metrics: ValidationMetrics, sample_size: int):
        self.history.append(ValidationRecord(self._clock(), metrics, sample_size))
        if len(self.history) > self.history_size:
            del self.history[:-self.history_size]

    def coherence_index(self, articles: Sequence[Article], results: Sequence[SentimentResult]) -> float:
        """Similar texts should score alike, in proportion to how similar they are."""
        texts = [f"{a.title} {a.content}" for a in articles]
        coherences = []
        for i, j in combinations(range(len(texts)), 2):
            similarity = jaccard_similarity(texts[i], texts[j])
            if similarity <= ValidationConstants.SIMILARITY_THRESHOLD:
                continue
            actual = abs(results[i].score - results[j].score)
            expected = (1 - similarity) * 0.5
            coherences.append(max(0.0, 1 - abs(actual - expected) * 2))
        if not coherences:
            return ValidationConstants.DEFAULT_COHERENCE
        return sum(coherences) / len(coherences)

    def test_consistency(self, articles: Sequence[Article], results: Sequence[SentimentResult]) -> ConsistencyReport:
        """Score variance within day, source and category groups."""
        self._check_aligned(articles, results)
        by_day: Dict[str, List[float]] = defaultdict(list)
        by_source: Dict[str, List[float]] = defaultdict(list)
        by_topic: Dict[str, List[float]] = defaultdict(list)
        for article, result in zip(articles, results):
            day = utc_date(article.publish_date)
            by_day[day.isoformat() if day else "unknown"].append(result.score)
            by_source[article.source or "unknown"].append(result.score)
            by_topic[article.category or "general"].append(result.score)

        temporal = _group_consistency(
            by_day, 2, ValidationConstants.TEMPORAL_VARIANCE_K, ValidationConstants.DEFAULT_TEMPORAL_CONSISTENCY
        )
        source = _group_consistency(
            by_source, ValidationConstants.MIN_SOURCE_GROUP, ValidationConstants.SOURCE_VARIANCE_K,
            ValidationConstants.DEFAULT_SOURCE_CONSISTENCY,
        )
        topic = _group_consistency(
            by_topic, 2, ValidationConstants.TOPIC_VARIANCE_K, ValidationConstants.DEFAULT_TOPIC_CONSISTENCY
        )
        return ConsistencyReport(
            temporal=temporal,
            source=source,
            topic=topic,
            overall=(temporal + source + topic) / 3,
        )

    def calibrate(self) -> CalibrationResult:
        """Derive an adjustment factor and threshold from recent runs."""
        if len(self.history) < ValidationConstants.MIN_CALIBRATION_RUNS:
            return CalibrationResult(
                is_calibrated=False,
                adjustment_factor=1.0,
                recommended_threshold=ValidationConstants.DEFAULT_THRESHOLD,
                quality_score=ValidationConstants.DEFAULT_QUALITY,
                issues=["Insufficient validation history for calibration"],
                suggestions=["Collect more validation runs"],
            )

        recent = [r.metrics for r in self.history[-ValidationConstants.CALIBRATION_WINDOW:]]
        avg_accuracy = sum(m.accuracy for m in recent) / len(recent)
        avg_coherence = sum(m.coherence_index for m in recent) / len(recent)
        avg_confidence = sum(m.confidence for m in recent) / len(recent)

        quality_score = 0.4 * avg_accuracy + 0.3 * avg_coherence + 0.3 * avg_confidence

        issues, suggestions = [], []
        if avg_accuracy < 0.7:
            issues.append("Insufficient accuracy")
            suggestions.append("Review classification thresholds")
        if avg_coherence < 0.6:
            issues.append("Low coherence")
            suggestions.append("Improve contextual detection")
        if avg_confidence < 0.5:
            issues.append("Low confidence")
            suggestions.append("Enrich the sentiment lexicon")

        if avg_accuracy < 0.8:
            adjustment_factor = 0.9
        elif avg_accuracy > 0.9:
            adjustment_factor = 1.1
        else:
            adjustment_factor = 1.0

        result = CalibrationResult(
            is_calibrated=quality_score > ValidationConstants.CALIBRATED_QUALITY,
            adjustment_factor=adjustment_factor,
            recommended_threshold=clamp(0.2 - (avg_accuracy - 0.7) * 0.1, 0.1, 0.25),
            quality_score=quality_score,
            issues=issues,
            suggestions=suggestions,
        )
        logger.info(
            f"Calibration over {len(recent)} runs: quality={quality_score:.2f}, "
            f"factor={adjustment_factor}, calibrated={result.is_calibrated}"
        )
        return result

    def trends(self) -> Dict[str, Trend]:
        if len(self.history) < ValidationConstants.MIN_CALIBRATION_RUNS:
            return {"accuracy": Trend.STABLE, "coherence": Trend.STABLE}
        recent = [r.metrics for r in self.history[-ValidationConstants.TREND_WINDOW:]]
        return {
            "accuracy": _trend([m.accuracy for m in recent]),
            "coherence": _trend([m.coherence_index for m in recent]),
        }

    @staticmethod
    def grade(overall: float) -> str:
        for grade, cutoff in ValidationConstants.GRADES:
            if overall >= cutoff:
                return grade
        return "F"

    def report(self) -> QualityReport:
        """Grade the latest run and recommend follow-ups."""
        if not self.history:
            return QualityReport(
                grade="F",
                metrics=None,
                trends={"accuracy": Trend.STABLE, "coherence": Trend.STABLE},
                recommendations=["Run validation tests"],
            )

        latest = self.history[-1].metrics
        overall = (
            0.3 * latest.accuracy + 0.3 * latest.f1_score
            + 0.2 * latest.coherence_index + 0.2 * latest.confidence
        )
        return QualityReport(
            grade=self.grade(overall),
            metrics=latest,
            trends=self.trends(),
            recommendations=self._recommendations(latest, overall),
        )

    def _recommendations(self, metrics: ValidationMetrics, overall: float) -> List[str]:
        recommendations = []
        if metrics.accuracy < 0.8:
            recommendations.append("Refine classification thresholds to improve accuracy")
        if metrics.coherence_index < 0.7:
            recommendations.append("Strengthen contextual coherence with more semantic analysis")
        if metrics.confidence < 0.6:
            recommendations.append("Enrich the lexicon and linguistic patterns")
        if metrics.f1_score < 0.7:
            recommendations.append("Balance precision and recall")
        if overall < 0.7:
            recommendations.append("Full system review recommended")
        if not recommendations:
            recommendations.append("Performance satisfactory, keep monitoring")
        return recommendations

    @property
    def latest(self) -> Optional[ValidationMetrics]:
        return self.history[-1].metrics if self.history else None
