"""Tests for validation and calibration."""

from datetime import datetime, timedelta, timezone

import pytest

from newspulse.core.models import Article, Intensity, SentimentLabel, SentimentResult, Trend, ValidationMetrics
from newspulse.core.validation import SentimentValidator, _slope, reference_label


def _result(label: SentimentLabel, score: float, confidence: float = 1.0) -> SentimentResult:
    return SentimentResult(sentiment=label, score=score, confidence=confidence, intensity=Intensity.MEDIUM)


def _labelled_batch():
    """Distinct texts whose reference labels are unambiguous, with matching results."""
    articles = [
        Article(id="1", title="Victoire historique", content="Un succès pour tous."),
        Article(id="2", title="Crise sociale", content="Un échec cuisant."),
        Article(id="3", title="Réunion du conseil", content="Ordre du jour habituel."),
    ]
    results = [
        _result(SentimentLabel.POSITIVE, 0.8),
        _result(SentimentLabel.NEGATIVE, -0.8),
        _result(SentimentLabel.NEUTRAL, 0.0),
    ]
    return articles, results


class TestReferenceLabels:

    def test_keyword_heuristic(self):
        assert reference_label(Article(id="1", title="Un succès", content="")) == SentimentLabel.POSITIVE
        assert reference_label(Article(id="2", title="La crise", content="et la chute")) == SentimentLabel.NEGATIVE
        assert reference_label(Article(id="3", title="Succès et échec", content="")) == SentimentLabel.NEUTRAL


class TestValidate:
    """Metrics of a single validation run."""

    def setup_method(self):
        self.validator = SentimentValidator()

    def test_perfect_agreement(self):
        articles, results = _labelled_batch()
        metrics = self.validator.validate(articles, results)
        assert metrics.accuracy == 1.0
        assert metrics.precision == 1.0
        assert metrics.recall == 1.0
        assert metrics.f1_score == 1.0
        assert metrics.confidence == 1.0
        assert len(self.validator.history) == 1

    def test_no_positive_predictions(self):
        articles, _ = _labelled_batch()
        results = [_result(SentimentLabel.NEUTRAL, 0.0)] * 3
        metrics = self.validator.validate(articles, results)
        assert metrics.precision == 0.0
        assert metrics.recall == 0.0
        assert metrics.f1_score == 0.0
        assert metrics.accuracy == pytest.approx(1 / 3)

    def test_misaligned_inputs(self):
        articles, results = _labelled_batch()
        with pytest.raises(ValueError):
            self.validator.validate(articles, results[:2])

    def test_empty_batch_not_recorded(self):
        metrics = self.validator.validate([], [])
        assert metrics == ValidationMetrics(0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
        assert self.validator.history == []

    def test_history_is_bounded(self):
        validator = SentimentValidator(history_size=2)
        articles, results = _labelled_batch()
        for _ in range(5):
            validator.validate(articles, results)
        assert len(validator.history) == 2


class TestCoherence:

    def setup_method(self):
        self.validator = SentimentValidator()

    def test_default_without_similar_pairs(self):
        articles, results = _labelled_batch()
        assert self.validator.coherence_index(articles, results) == 0.8

    def test_similar_pair_with_expected_gap(self):
        articles = [Article(id="1", title="a b c", content="d"), Article(id="2", title="a b c", content="e")]
        # Jaccard 0.6, so the expected score gap is 0.2
        results = [_result(SentimentLabel.POSITIVE, 0.5), _result(SentimentLabel.POSITIVE, 0.3)]
        assert self.validator.coherence_index(articles, results) == pytest.approx(1.0)

    def test_similar_pair_with_large_gap(self):
        articles = [Article(id="1", title="a b c", content="d"), Article(id="2", title="a b c", content="e")]
        results = [_result(SentimentLabel.POSITIVE, 1.0), _result(SentimentLabel.NEGATIVE, -1.0)]
        assert self.validator.coherence_index(articles, results) == 0.0


class TestConsistency:

    def setup_method(self):
        self.validator = SentimentValidator()

    def test_uniform_groups(self):
        day = datetime(2024, 3, 1, 9, 0)
        articles = [
            Article(id=str(i), title=f"t{i}", source="AFP", category="economy", publish_date=day)
            for i in range(3)
        ]
        results = [_result(SentimentLabel.POSITIVE, 0.5)] * 3
        report = self.validator.test_consistency(articles, results)
        assert report.temporal == 1.0
        assert report.source == 1.0
        assert report.topic == 1.0
        assert report.overall == 1.0

    def test_days_bucketed_in_utc(self):
        paris = timezone(timedelta(hours=2))
        articles = [
            Article(id="1", title="t", publish_date=datetime(2024, 3, 2, 1, 0, tzinfo=paris)),
            Article(id="2", title="t", publish_date=datetime(2024, 3, 1, 20, 0, tzinfo=timezone.utc)),
        ]
        results = [_result(SentimentLabel.POSITIVE, 0.5)] * 2
        # both fall on 2024-03-01 UTC, one group of identical scores
        assert self.validator.test_consistency(articles, results).temporal == 1.0

    def test_defaults_without_groups(self):
        articles = [Article(id="1", title="t", source="AFP", category="economy", publish_date=datetime(2024, 3, 1))]
        report = self.validator.test_consistency(articles, [_result(SentimentLabel.POSITIVE, 0.5)])
        assert report.temporal == 0.8
        assert report.source == 0.7
        assert report.topic == 0.75
        assert report.overall == pytest.approx((0.8 + 0.7 + 0.75) / 3)

    def test_source_group_needs_three(self):
        articles = [Article(id=str(i), title="t", source="AFP") for i in range(2)]
        results = [_result(SentimentLabel.POSITIVE, 1.0), _result(SentimentLabel.NEGATIVE, -1.0)]
        report = self.validator.test_consistency(articles, results)
        assert report.source == 0.7
        # variance 1.0 with k=1.5 floors at zero
        assert report.topic == 0.0


class TestCalibration:

    def setup_method(self):
        self.validator = SentimentValidator()

    def test_not_calibrated_with_short_history(self):
        articles, results = _labelled_batch()
        for _ in range(2):
            self.validator.validate(articles, results)
        calibration = self.validator.calibrate()
        assert calibration.is_calibrated is False
        assert calibration.adjustment_factor == 1.0
        assert calibration.recommended_threshold == 0.15
        assert calibration.quality_score == 0.5
        assert calibration.issues

    def test_calibrated_with_good_history(self):
        articles, results = _labelled_batch()
        for _ in range(3):
            self.validator.validate(articles, results)
        calibration = self.validator.calibrate()
        # accuracy 1.0, coherence 0.8 (no similar pairs), confidence 1.0
        assert calibration.quality_score == pytest.approx(0.4 + 0.24 + 0.3)
        assert calibration.is_calibrated is True
        assert calibration.adjustment_factor == 1.1
        assert calibration.recommended_threshold == pytest.approx(0.17)
        assert calibration.issues == []

    def test_poor_accuracy_is_conservative(self):
        articles, _ = _labelled_batch()
        wrong = [
            _result(SentimentLabel.NEGATIVE, -0.5, 0.3),
            _result(SentimentLabel.POSITIVE, 0.5, 0.3),
            _result(SentimentLabel.POSITIVE, 0.5, 0.3),
        ]
        for _ in range(3):
            self.validator.validate(articles, wrong)
        calibration = self.validator.calibrate()
        assert calibration.adjustment_factor == 0.9
        assert calibration.recommended_threshold == 0.25
        assert calibration.is_calibrated is False
        assert "Insufficient accuracy" in calibration.issues
        assert "Low confidence" in calibration.issues


class TestReport:

    def setup_method(self):
        self.validator = SentimentValidator()

    def test_empty_history(self):
        report = self.validator.report()
        assert report.grade == "F"
        assert report.metrics is None
        assert report.recommendations

    def test_grade_a(self):
        articles, results = _labelled_batch()
        self.validator.validate(articles, results)
        report = self.validator.report()
        # 0.3 + 0.3 + 0.2 * 0.8 + 0.2
        assert report.grade == "A"
        assert report.trends == {"accuracy": Trend.STABLE, "coherence": Trend.STABLE}

    def test_grade_cutoffs(self):
        assert SentimentValidator.grade(0.95) == "A"
        assert SentimentValidator.grade(0.85) == "B"
        assert SentimentValidator.grade(0.75) == "C"
        assert SentimentValidator.grade(0.65) == "D"
        assert SentimentValidator.grade(0.2) == "F"

    def test_improving_trend(self):
        articles, good = _labelled_batch()
        bad = [_result(SentimentLabel.NEUTRAL, 0.0)] * 3
        for results in (bad, bad, good, good):
            self.validator.validate(articles, results)
        assert self.validator.report().trends["accuracy"] == Trend.IMPROVING

    def test_slope(self):
        assert _slope([0.1, 0.2, 0.3]) == pytest.approx(0.1)
        assert _slope([0.5]) == 0.0
