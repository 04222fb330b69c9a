"""Tests for regional, trend and keyword rollups."""

from datetime import datetime, timedelta, timezone

import pytest

from newspulse.core.aggregation import SentimentAggregator
from newspulse.core.models import Article, Intensity, SentimentLabel, SentimentResult

NOW = datetime(2024, 3, 15, 18, 0, tzinfo=timezone.utc)


def _result(label: SentimentLabel) -> SentimentResult:
    score = {SentimentLabel.POSITIVE: 0.6, SentimentLabel.NEGATIVE: -0.6}.get(label, 0.0)
    return SentimentResult(sentiment=label, score=score, confidence=0.8, intensity=Intensity.MEDIUM)


class TestRegionDetection:

    def setup_method(self):
        self.aggregator = SentimentAggregator()

    def test_city_keyword(self):
        article = Article(id="1", title="Le tramway de Lyon prolongé")
        assert self.aggregator.detect_region(article) == "Auvergne-Rhône-Alpes"

    def test_toulouse_is_occitanie(self):
        article = Article(id="1", title="Airbus recrute à Toulouse")
        assert self.aggregator.detect_region(article) == "Occitanie"

    def test_whole_words_only(self):
        """"dimanche" and "heure" do not point at Normandie."""
        article = Article(id="1", title="Rendez-vous dimanche", content="à une heure tardive")
        assert self.aggregator.detect_region(article) is None

    def test_tours_is_not_a_city_keyword(self):
        article = Article(id="1", title="Élection en deux tours", content="plusieurs tours de scrutin")
        assert self.aggregator.detect_region(article) is None

    def test_summary_is_searched(self):
        article = Article(id="1", title="Inauguration", summary="Un nouveau musée à Strasbourg")
        assert self.aggregator.detect_region(article) == "Grand Est"


class TestKeywords:

    def test_extract_keywords(self):
        aggregator = SentimentAggregator()
        articles = [
            Article(id="1", title="Grève des transports", content="grève massive dans les transports"),
            Article(id="2", title="Transports perturbés", content="la grève continue"),
        ]
        keywords = aggregator.extract_keywords(articles)
        assert keywords[0] == "grève"
        assert "transports" in keywords
        assert "dans" not in keywords
        assert "les" not in keywords


class TestAggregate:

    def setup_method(self):
        self.aggregator = SentimentAggregator()
        self.articles = [
            Article(id="1", title="Succès du métro de Lyon", content="Lyon inaugure sa ligne",
                    publish_date=NOW - timedelta(hours=2)),
            Article(id="2", title="Lyon accueille le sommet", content="sommet européen à Lyon",
                    publish_date=NOW - timedelta(days=1)),
            Article(id="3", title="Inondations à Rennes", content="Rennes sous les eaux",
                    publish_date=NOW - timedelta(days=2)),
            Article(id="4", title="Une réunion sans lieu", content="aucune ville citée",
                    publish_date=NOW - timedelta(days=30)),
        ]
        self.results = [
            _result(SentimentLabel.POSITIVE),
            _result(SentimentLabel.POSITIVE),
            _result(SentimentLabel.NEGATIVE),
            _result(SentimentLabel.NEUTRAL),
        ]

    def test_overall(self):
        overview = self.aggregator.aggregate(self.articles, self.results, now=NOW)
        assert overview.overall.positive == 2
        assert overview.overall.negative == 1
        assert overview.overall.neutral == 1
        assert overview.overall.sentiment_score == pytest.approx(0.25)
        assert overview.overall.dominant_sentiment == SentimentLabel.POSITIVE
        assert overview.last_updated == NOW

    def test_regional(self):
        overview = self.aggregator.aggregate(self.articles, self.results, now=NOW)
        regions = {r.region: r for r in overview.regional}
        assert set(regions) == {"Auvergne-Rhône-Alpes", "Bretagne"}

        lyon = regions["Auvergne-Rhône-Alpes"]
        assert lyon.region_code == "ARA"
        assert lyon.total_articles == 2
        assert lyon.dominant_sentiment == SentimentLabel.POSITIVE
        assert lyon.sentiment_score == 1.0
        assert lyon.top_keywords[0] == "lyon"
        assert [a.id for a in lyon.recent_articles] == ["1", "2"]

        assert regions["Bretagne"].dominant_sentiment == SentimentLabel.NEGATIVE

    def test_trend_days_are_utc(self):
        paris = timezone(timedelta(hours=2))
        article = Article(id="1", title="Rennes", publish_date=datetime(2024, 3, 15, 1, 0, tzinfo=paris))
        overview = self.aggregator.aggregate([article], [_result(SentimentLabel.NEGATIVE)], now=NOW)
        by_date = {p.date: p for p in overview.trends}
        assert by_date["2024-03-14"].negative == 1
        assert by_date["2024-03-15"].total_articles == 0

    def test_trends_cover_seven_days(self):
        overview = self.aggregator.aggregate(self.articles, self.results, now=NOW)
        assert len(overview.trends) == 7
        assert overview.trends[-1].date == "2024-03-15"
        assert overview.trends[0].date == "2024-03-09"
        assert overview.trends[-1].positive == 1
        assert sum(p.total_articles for p in overview.trends) == 3

    def test_keyword_rows(self):
        overview = self.aggregator.aggregate(self.articles, self.results, now=NOW)
        assert len(overview.keywords) <= 15
        row = next(k for k in overview.keywords if k.keyword == "lyon")
        assert row.positive == 2
        assert row.regions == ["Auvergne-Rhône-Alpes"]
        assert row.trend == "stable"

    def test_empty_batch(self):
        overview = self.aggregator.aggregate([], [], now=NOW)
        assert overview.overall.sentiment_score == 0.0
        assert overview.overall.dominant_sentiment == SentimentLabel.NEUTRAL
        assert overview.regional == []
        assert len(overview.trends) == 7

    def test_misaligned(self):
        with pytest.raises(ValueError):
            self.aggregator.aggregate(self.articles, self.results[:1], now=NOW)
