# backend/normalize.py
"""
Shaping of upstream documents.

Every function here is total: whatever shape the provider sends back (an error
dict, a missing key, a list where a dict was expected) the result is a value
of the documented type, never an exception.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

MOVERS_LIMIT = 20
UNUSUAL_VOLUME_THRESHOLD = 10_000_000


def _safe_float(v):
    try:
        return float(v)
    except Exception:
        return None


def _first_or_empty(seq) -> Dict[str, Any]:
    if isinstance(seq, list) and seq and isinstance(seq[0], dict):
        return seq[0]
    return {}


def movers_list(data: Any, field: str, limit: int = MOVERS_LIMIT) -> List[Any]:
    if not isinstance(data, dict):
        return []
    items = data.get(field)
    if not isinstance(items, list):
        return []
    return items[:limit]


def income_statement(doc: Any) -> Dict[str, Any]:
    """Most recent quarterly report (first element), or {}."""
    if not isinstance(doc, dict):
        return {}
    return _first_or_empty(doc.get("quarterlyReports"))


def news_feed(doc: Any) -> List[Dict[str, Any]]:
    if not isinstance(doc, dict):
        return []
    feed = doc.get("feed")
    return feed if isinstance(feed, list) else []


def recommendations(seq: Any) -> Dict[str, Any]:
    """Most recent analyst recommendation (upstream sends newest first), or {}."""
    return _first_or_empty(seq)


def average_sentiment(feed: List[Dict[str, Any]]) -> Optional[str]:
    """
    Mean of `overall_sentiment_score` across the feed as a 2-decimal string.

    A missing or unreadable score counts as 0 and stays in the denominator.
    Returns None for an empty feed.
    """
    if not feed:
        return None
    scores = []
    for item in feed:
        score = _safe_float(item.get("overall_sentiment_score")) if isinstance(item, dict) else None
        if score is None or not math.isfinite(score):
            score = 0.0
        scores.append(score)
    mean = sum(scores) / len(scores)
    # half away from zero on the exact binary value
    return str(Decimal(mean).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def is_unusual_volume(quote: Any, threshold: int = UNUSUAL_VOLUME_THRESHOLD) -> bool:
    if not isinstance(quote, dict):
        return False
    volume = _safe_float(quote.get("v"))
    return volume is not None and volume > threshold
