"""Data preparation for export."""

import json
from dataclasses import asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .. import __version__
from ..core.models import Article, QualityReport, SentimentLabel, SentimentResult


def _plain(value: Any) -> Any:
    """Enums to values, recursively, so asdict output is JSON-ready."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def prepare_export(
    pairs: List[Tuple[Article, SentimentResult]],
    report: Optional[QualityReport] = None,
) -> Dict[str, Any]:
    """Prepare scored articles (and optionally a quality report) for JSON export."""

    articles_data = []
    for article, result in pairs:
        articles_data.append({
            "id": article.id,
            "title": article.title,
            "source": article.source,
            "category": article.category,
            "publish_date": article.publish_date.isoformat() if article.publish_date else None,
            "sentiment": result.to_dict(),
        })

    labels = [result.sentiment for _, result in pairs]
    export_data = {
        "summary": {
            "total": len(pairs),
            "positive": labels.count(SentimentLabel.POSITIVE),
            "negative": labels.count(SentimentLabel.NEGATIVE),
            "neutral": labels.count(SentimentLabel.NEUTRAL),
            "average_score": sum(r.score for _, r in pairs) / len(pairs) if pairs else 0.0,
        },
        "articles": articles_data,
        "quality": _plain(asdict(report)) if report else None,
        "metadata": {
            "export_timestamp": None,  # Will be set by export_to_json
            "version": __version__,
        },
    }

    return export_data


def export_to_json(data: Dict[str, Any], filename: str) -> None:
    """Export data to JSON file."""
    import datetime

    data.setdefault("metadata", {})["export_timestamp"] = datetime.datetime.now().isoformat()

    with open(filename, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
