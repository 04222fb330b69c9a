"""Regional, daily-trend and keyword rollups of scored articles."""

import logging
import re
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

from .constants import AggregationConstants
from .lexicon import STOPWORDS, term_pattern
from .models import (
    Article,
    KeywordSentiment,
    OverallSentiment,
    RecentArticle,
    RegionalSentiment,
    SentimentLabel,
    SentimentOverview,
    SentimentResult,
    SentimentTrendPoint,
    utc_date,
)
from ..utils.text import normalize_apostrophes

logger = logging.getLogger(__name__)

# name -> (code, (longitude, latitude))
FRENCH_REGIONS = {
    "Île-de-France": ("IDF", (2.3522, 48.8566)),
    "Provence-Alpes-Côte d'Azur": ("PACA", (5.3698, 43.2965)),
    "Auvergne-Rhône-Alpes": ("ARA", (4.8357, 45.7640)),
    "Nouvelle-Aquitaine": ("NA", (-0.5792, 44.8378)),
    "Occitanie": ("OCC", (1.4442, 43.6047)),
    "Hauts-de-France": ("HDF", (3.0573, 50.6292)),
    "Grand Est": ("GE", (6.1757, 48.5734)),
    "Normandie": ("NOR", (-0.3707, 49.1829)),
    "Bretagne": ("BRE", (-2.7574, 48.2020)),
    "Pays de la Loire": ("PDL", (-1.5534, 47.2184)),
    "Centre-Val de Loire": ("CVL", (1.9040, 47.7516)),
    "Bourgogne-Franche-Comté": ("BFC", (5.0415, 47.2805)),
    "Corse": ("COR", (9.1500, 42.0396)),
}

REGIONAL_KEYWORDS = {
    "Île-de-France": ["paris", "île-de-france", "ile-de-france", "idf", "région parisienne", "banlieue"],
    "Provence-Alpes-Côte d'Azur": ["marseille", "nice", "cannes", "provence", "paca", "côte d'azur", "alpes-maritimes"],
    "Auvergne-Rhône-Alpes": ["lyon", "grenoble", "saint-étienne", "rhône-alpes", "auvergne", "isère", "rhône"],
    "Nouvelle-Aquitaine": ["bordeaux", "limoges", "poitiers", "nouvelle-aquitaine", "gironde", "landes"],
    "Occitanie": ["toulouse", "montpellier", "occitanie", "languedoc", "hérault", "pyrénées"],
    "Hauts-de-France": ["lille", "amiens", "hauts-de-france", "pas-de-calais", "picardie"],
    "Grand Est": ["strasbourg", "metz", "reims", "grand est", "alsace", "lorraine", "champagne"],
    "Normandie": ["rouen", "caen", "le havre", "normandie", "calvados"],
    "Bretagne": ["rennes", "brest", "bretagne", "finistère", "morbihan", "côtes-d'armor"],
    "Pays de la Loire": ["nantes", "angers", "le mans", "pays de la loire", "loire-atlantique", "maine-et-loire"],
    "Centre-Val de Loire": ["orléans", "bourges", "centre-val de loire", "indre-et-loire", "loiret"],
    "Bourgogne-Franche-Comté": ["dijon", "besançon", "bourgogne", "franche-comté", "côte-d'or", "doubs"],
    "Corse": ["ajaccio", "bastia", "corse", "corse-du-sud", "haute-corse"],
}

_KEYWORD_TOKEN = re.compile(r"^[a-zàâäéèêëïîôöùûüÿçœ]+$")


def _sortable(value: Optional[datetime]) -> datetime:
    if value is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _dominant(positive: int, negative: int, neutral: int) -> SentimentLabel:
    if positive >= negative and positive >= neutral:
        return SentimentLabel.POSITIVE
    if negative >= neutral:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


class SentimentAggregator:
    """Rolls scored articles up into the map, trend and keyword views."""

    def __init__(self, regional_keywords: Optional[Dict[str, List[str]]] = None,
                 stopwords: Optional[Sequence[str]] = None):
        keywords = regional_keywords or REGIONAL_KEYWORDS
        self._region_patterns = {
            region: [term_pattern(normalize_apostrophes(k)) for k in terms]
            for region, terms in keywords.items()
        }
        self.stopwords = set(stopwords or STOPWORDS)

    def detect_region(self, article: Article) -> Optional[str]:
        """First region, in table order, with a keyword in the article."""
        text = normalize_apostrophes(f"{article.title} {article.content} {article.summary}")
        for region, patterns in self._region_patterns.items():
            if any(p.search(text) for p in patterns):
                return region
        return None

    def extract_keywords(self, articles: Sequence[Article], limit: int = AggregationConstants.MAX_KEYWORDS) -> List[str]:
        """Most frequent content words (longer than 3 letters) across the articles."""
        text = " ".join(f"{a.title} {a.content}" for a in articles).lower()
        tokens = [
            w for w in text.split()
            if len(w) > 3 and w not in self.stopwords and _KEYWORD_TOKEN.match(w)
        ]
        return [word for word, _ in Counter(tokens).most_common(limit)]

    def aggregate(self, articles: Sequence[Article], results: Sequence[SentimentResult],
                  now: Optional[datetime] = None) -> SentimentOverview:
        if len(articles) != len(results):
            raise ValueError(
                f"articles and results must be aligned: got {len(articles)} articles, {len(results)} results"
            )
        now = now or datetime.now(timezone.utc)
        regions = [self.detect_region(a) for a in articles]

        counts = Counter(r.sentiment for r in results)
        total = len(results)
        overall_score = (counts[SentimentLabel.POSITIVE] - counts[SentimentLabel.NEGATIVE]) / total if total else 0.0
        if overall_score > AggregationConstants.DOMINANT_MARGIN:
            overall_label = SentimentLabel.POSITIVE
        elif overall_score < -AggregationConstants.DOMINANT_MARGIN:
            overall_label = SentimentLabel.NEGATIVE
        else:
            overall_label = SentimentLabel.NEUTRAL

        overview = SentimentOverview(
            overall=OverallSentiment(
                positive=counts[SentimentLabel.POSITIVE],
                negative=counts[SentimentLabel.NEGATIVE],
                neutral=counts[SentimentLabel.NEUTRAL],
                dominant_sentiment=overall_label,
                sentiment_score=overall_score,
            ),
            regional=self._regional(articles, results, regions),
            trends=self._trends(articles, results, now),
            keywords=self._keywords(articles, results, regions),
            last_updated=now,
        )
        logger.info(f"Aggregated {total} articles into {len(overview.regional)} regions")
        return overview

    def _regional(self, articles, results, regions) -> List[RegionalSentiment]:
        rollups: Dict[str, RegionalSentiment] = {}
        members: Dict[str, List[Article]] = {}
        for article, result, region in zip(articles, results, regions):
            if region is None or region not in FRENCH_REGIONS:
                continue
            if region not in rollups:
                code, coordinates = FRENCH_REGIONS[region]
                rollups[region] = RegionalSentiment(region=region, region_code=code, coordinates=coordinates)
                members[region] = []
            rollup = rollups[region]
            rollup.total_articles += 1
            if result.sentiment == SentimentLabel.POSITIVE:
                rollup.positive_count += 1
            elif result.sentiment == SentimentLabel.NEGATIVE:
                rollup.negative_count += 1
            else:
                rollup.neutral_count += 1
            rollup.recent_articles.append(
                RecentArticle(article.id, article.title, result.sentiment, article.publish_date)
            )
            members[region].append(article)

        for region, rollup in rollups.items():
            rollup.dominant_sentiment = _dominant(rollup.positive_count, rollup.negative_count, rollup.neutral_count)
            rollup.sentiment_score = (rollup.positive_count - rollup.negative_count) / rollup.total_articles
            rollup.top_keywords = self.extract_keywords(members[region])
            rollup.recent_articles.sort(key=lambda a: _sortable(a.timestamp), reverse=True)
            del rollup.recent_articles[AggregationConstants.MAX_RECENT_ARTICLES:]

        # table order keeps the output stable
        return [rollups[name] for name in FRENCH_REGIONS if name in rollups]

    def _trends(self, articles, results, now: datetime) -> List[SentimentTrendPoint]:
        today = utc_date(now)
        by_day: Dict[str, Counter] = {}
        for article, result in zip(articles, results):
            day = utc_date(article.publish_date)
            if day is not None:
                by_day.setdefault(day.isoformat(), Counter())[result.sentiment] += 1

        points = []
        for offset in range(AggregationConstants.TREND_DAYS - 1, -1, -1):
            day = (today - timedelta(days=offset)).isoformat()
            tally = by_day.get(day, Counter())
            points.append(SentimentTrendPoint(
                date=day,
                positive=tally[SentimentLabel.POSITIVE],
                negative=tally[SentimentLabel.NEGATIVE],
                neutral=tally[SentimentLabel.NEUTRAL],
                total_articles=sum(tally.values()),
            ))
        return points

    def _keywords(self, articles, results, regions) -> List[KeywordSentiment]:
        rows = []
        texts = [f"{a.title} {a.content}".lower() for a in articles]
        for keyword in self.extract_keywords(articles):
            tally = Counter()
            keyword_regions: List[str] = []
            for text, result, region in zip(texts, results, regions):
                if keyword not in text:
                    continue
                tally[result.sentiment] += 1
                if region and region not in keyword_regions:
                    keyword_regions.append(region)
            rows.append(KeywordSentiment(
                keyword=keyword,
                positive=tally[SentimentLabel.POSITIVE],
                negative=tally[SentimentLabel.NEGATIVE],
                neutral=tally[SentimentLabel.NEUTRAL],
                trend="stable",
                regions=keyword_regions,
            ))
        return rows[:AggregationConstants.MAX_KEYWORD_ROWS]
