"""
Cross-Source Analyzer -- how keywords travel between independent sources.

A keyword mentioned on three or more sources at once is "spreading".
Sources that mention many of the same keywords are correlated
(Jaccard similarity of their keyword sets).
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from keyword_trends.aggregator import KeywordFrequency
from keyword_trends.scorer import TrendScore
from keyword_trends.sources import round_half_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrossSourceSpread:
    """A keyword seen across several sources."""
    keyword: str
    category: str
    sources: List[dict]           # [{"source", "mentions"}]
    source_count: int
    spread_score: float           # source_count x avg mentions per source
    spread_level: str             # "emerging", "growing" or "viral"

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "category": self.category,
            "sources": [dict(s) for s in self.sources],
            "sourceCount": self.source_count,
            "spreadScore": self.spread_score,
            "spreadLevel": self.spread_level,
        }


@dataclass(frozen=True)
class ViralTrend(CrossSourceSpread):
    """A spread joined with its keyword's trend score."""
    trend_score: float = 0

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["trendScore"] = self.trend_score
        return d


@dataclass(frozen=True)
class SourceCorrelation:
    """Keyword overlap between two sources (unordered pair)."""
    source_a: str
    source_b: str
    shared_keywords: int
    similarity: float             # Jaccard, 0..1

    def to_dict(self) -> dict:
        return {
            "sourceA": self.source_a,
            "sourceB": self.source_b,
            "sharedKeywords": self.shared_keywords,
            "similarity": self.similarity,
        }


@dataclass(frozen=True)
class SourceShare:
    source: str
    mentions: int
    percentage: int               # share of the keyword's total mentions

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "mentions": self.mentions,
            "percentage": self.percentage,
        }


def classify_spread_level(source_count: int, avg_mentions: float) -> str:
    if source_count >= 6 and avg_mentions >= 3:
        return "viral"
    if source_count >= 4 or avg_mentions >= 5:
        return "growing"
    return "emerging"


def detect_cross_source_spreads(frequencies: List[KeywordFrequency],
                                min_sources: int = 3) -> List[CrossSourceSpread]:
    """
    Keywords appearing on at least min_sources sources, widest spread first.
    """
    results = []
    for freq in frequencies:
        source_count = len(freq.source_breakdown)
        if source_count < min_sources or source_count == 0:
            continue

        avg_mentions = freq.total_mentions / source_count
        results.append(CrossSourceSpread(
            keyword=freq.keyword,
            category=freq.category,
            sources=[
                {"source": src, "mentions": count}
                for src, count in freq.source_breakdown.items()
            ],
            source_count=source_count,
            spread_score=round_half_up(source_count * avg_mentions),
            spread_level=classify_spread_level(source_count, avg_mentions),
        ))

    results.sort(key=lambda s: s.spread_score, reverse=True)
    return results


def analyze_source_correlations(frequencies: List[KeywordFrequency]) -> List[SourceCorrelation]:
    """
    Pairwise Jaccard similarity of the keyword sets of each source.

    Pairs without a shared keyword are left out.
    """
    source_keywords: Dict[str, Set[str]] = {}
    for freq in frequencies:
        for src in freq.source_breakdown:
            source_keywords.setdefault(src, set()).add(freq.keyword)

    sources = list(source_keywords)
    correlations = []
    for i, source_a in enumerate(sources):
        set_a = source_keywords[source_a]
        for source_b in sources[i + 1:]:
            set_b = source_keywords[source_b]

            shared = len(set_a & set_b)
            if shared == 0:
                continue
            union = len(set_a | set_b)
            similarity = round_half_up(shared / union, 3) if union else 0.0

            correlations.append(SourceCorrelation(
                source_a=source_a,
                source_b=source_b,
                shared_keywords=shared,
                similarity=similarity,
            ))

    correlations.sort(key=lambda c: c.similarity, reverse=True)
    logger.debug(f"{len(correlations)} correlated pairs across {len(sources)} sources")
    return correlations


def get_keyword_source_map(frequencies: List[KeywordFrequency],
                           keyword: str) -> Optional[List[SourceShare]]:
    """
    Which sources a keyword came from, and what share of its mentions each had.

    Returns None if the keyword isn't in the batch.
    """
    freq = next((f for f in frequencies if f.keyword == keyword), None)
    if freq is None:
        return None

    total = freq.total_mentions
    shares = [
        SourceShare(
            source=src,
            mentions=count,
            percentage=int(round_half_up(count / total * 100, 0)) if total else 0,
        )
        for src, count in freq.source_breakdown.items()
    ]
    shares.sort(key=lambda s: s.mentions, reverse=True)
    return shares


def get_viral_trends(spreads: List[CrossSourceSpread],
                     scores: List[TrendScore],
                     limit: int = 10) -> List[ViralTrend]:
    """Spreads ranked by trend score x spread score."""
    score_map = {s.keyword: s.score for s in scores}

    viral = [
        ViralTrend(
            keyword=s.keyword,
            category=s.category,
            sources=[dict(src) for src in s.sources],
            source_count=s.source_count,
            spread_score=s.spread_score,
            spread_level=s.spread_level,
            trend_score=score_map.get(s.keyword, 0),
        )
        for s in spreads
    ]
    viral.sort(key=lambda v: v.trend_score * v.spread_score, reverse=True)
    return viral[:limit]
