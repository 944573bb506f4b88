"""
Keyword Aggregator -- collapses a batch of items into per-keyword frequency records.

Every keyword of every item counts as one mention, attributed to the
item's source and to the hour it was collected in.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from collectors import NormalizedItem
from keyword_trends.sources import is_known_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeywordFrequency:
    """Mention statistics for one keyword within one batch."""
    keyword: str
    category: str                       # from the first item that mentioned it
    total_mentions: int
    total_score: float
    source_breakdown: Dict[str, int] = field(default_factory=dict)   # source -> mentions
    hourly_buckets: Dict[str, int] = field(default_factory=dict)     # "YYYY-MM-DDTHH" -> mentions
    first_seen: str = ""
    last_seen: str = ""

    @property
    def source_count(self) -> int:
        return len(self.source_breakdown)

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "category": self.category,
            "totalMentions": self.total_mentions,
            "totalScore": self.total_score,
            "sourceBreakdown": dict(self.source_breakdown),
            "hourlyBuckets": dict(self.hourly_buckets),
            "firstSeen": self.first_seen,
            "lastSeen": self.last_seen,
        }


def to_hour_bucket(iso_timestamp: str) -> str:
    """ISO timestamp -> hour bucket key ("2025-06-01T14")."""
    return iso_timestamp[:13]


def aggregate_keywords(items: Iterable[NormalizedItem]) -> List[KeywordFrequency]:
    """
    Flatten every item's keywords into per-keyword frequency records.

    Records come back in first-seen order. Each call builds fresh
    dicts, so no two results share a histogram.
    """
    entries: Dict[str, dict] = {}
    unknown_sources = set()

    for item in items:
        ts = item.collected_at
        hour_key = to_hour_bucket(ts)

        if item.keywords and not is_known_source(item.source):
            unknown_sources.add(item.source)

        for kw in item.keywords:
            entry = entries.get(kw)
            if entry is None:
                entry = {
                    "category": item.category,
                    "total_mentions": 0,
                    "total_score": 0,
                    "source_breakdown": {},
                    "hourly_buckets": {},
                    "first_seen": ts,
                    "last_seen": ts,
                }
                entries[kw] = entry

            entry["total_mentions"] += 1
            entry["total_score"] += item.score or 0

            breakdown = entry["source_breakdown"]
            breakdown[item.source] = breakdown.get(item.source, 0) + 1

            buckets = entry["hourly_buckets"]
            buckets[hour_key] = buckets.get(hour_key, 0) + 1

            if ts < entry["first_seen"]:
                entry["first_seen"] = ts
            if ts > entry["last_seen"]:
                entry["last_seen"] = ts

    if unknown_sources:
        logger.debug(f"Unlisted sources in batch (weight 1): {sorted(unknown_sources)}")

    return [KeywordFrequency(keyword=kw, **entry) for kw, entry in entries.items()]


def top_keywords(frequencies: List[KeywordFrequency],
                 limit: int = 50) -> List[KeywordFrequency]:
    """Most-mentioned keywords first, ties broken by total score."""
    ranked = sorted(
        frequencies,
        key=lambda f: (f.total_mentions, f.total_score),
        reverse=True,
    )
    return ranked[:limit]


def filter_by_category(frequencies: List[KeywordFrequency],
                       category: str) -> List[KeywordFrequency]:
    return [f for f in frequencies if f.category == category]


def filter_by_source(frequencies: List[KeywordFrequency],
                     source: str) -> List[KeywordFrequency]:
    """Keywords mentioned at least once by the given source."""
    return [f for f in frequencies if f.source_breakdown.get(source, 0) > 0]
