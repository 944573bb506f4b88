"""
Trend Scorer -- multi-factor trend scoring over keyword frequency records.

    score = mention score + source quality + cross-source bonus

Mentions are log-damped so one enormous keyword can't drown out the rest;
source quality rewards mentions on high-tier sources; the cross-source
bonus multiplies source quality when a keyword shows up in several
independent places at once.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from keyword_trends.aggregator import KeywordFrequency
from keyword_trends.sources import get_source_weight, round_half_up

logger = logging.getLogger(__name__)

# ── Cross-Source Bonus ──
# Index = number of distinct sources. 0 entries mean "no bonus" (x1).
CROSS_SOURCE_BONUS = [0, 0, 1.2, 1.5, 2.0, 2.5, 3.0]
MAX_CROSS_SOURCE_MULTIPLIER = 3.5

# A keyword seen on this many sources is "spreading".
SPREADING_MIN_SOURCES = 3

# First appearance counts as +100% growth.
NEW_KEYWORD_VELOCITY = 100.0


@dataclass(frozen=True)
class TrendScore:
    """Composite trend score for a single keyword."""
    keyword: str
    category: str
    score: float                  # mention + source quality + cross-source
    mention_score: float
    source_quality_score: float
    cross_source_score: float
    source_count: int
    velocity: float               # % change vs. the previous period
    is_spreading: bool

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "category": self.category,
            "score": self.score,
            "mentionScore": self.mention_score,
            "sourceQualityScore": self.source_quality_score,
            "crossSourceScore": self.cross_source_score,
            "sourceCount": self.source_count,
            "velocity": self.velocity,
            "isSpreading": self.is_spreading,
        }

    @classmethod
    def empty(cls, keyword: str, category: str) -> "TrendScore":
        """Zero-valued score for a keyword that was never scored."""
        return cls(
            keyword=keyword, category=category, score=0, mention_score=0,
            source_quality_score=0, cross_source_score=0, source_count=0,
            velocity=0, is_spreading=False,
        )


@dataclass(frozen=True)
class KeywordTrend:
    """Time-series view of one keyword, for charting."""
    keyword: str
    category: str
    hourly_mentions: List[dict]   # [{"hour", "count"}], chronological
    daily_mentions: List[dict]    # [{"date", "count"}], chronological
    sources: List[dict]           # [{"source", "count"}]
    velocity: float
    total_mentions: int
    first_seen: str
    last_seen: str

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "category": self.category,
            "hourlyMentions": [dict(h) for h in self.hourly_mentions],
            "dailyMentions": [dict(d) for d in self.daily_mentions],
            "sources": [dict(s) for s in self.sources],
            "velocity": self.velocity,
            "totalMentions": self.total_mentions,
            "firstSeen": self.first_seen,
            "lastSeen": self.last_seen,
        }


@dataclass(frozen=True)
class HotKeyword:
    """Entry in the ranked hot-keyword list."""
    keyword: str
    category: str
    velocity: float
    mentions: int
    sources: List[str]
    rank: int                     # 1-based

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "category": self.category,
            "velocity": self.velocity,
            "mentions": self.mentions,
            "sources": list(self.sources),
            "rank": self.rank,
        }


def get_cross_source_multiplier(source_count: int) -> float:
    if source_count >= len(CROSS_SOURCE_BONUS):
        return MAX_CROSS_SOURCE_MULTIPLIER
    return CROSS_SOURCE_BONUS[source_count] or 1


def compute_velocity(current: int, previous: int) -> float:
    """
    Percentage change in mentions between two periods.

    previous == 0 is short-circuited: a keyword with current mentions is
    brand new (+100%), one without any is flat (0).
    """
    if previous > 0:
        return (current - previous) / previous * 100
    if current > 0:
        return NEW_KEYWORD_VELOCITY
    return 0.0


def calculate_trend_scores(frequencies: List[KeywordFrequency],
                           previous_frequencies: Optional[List[KeywordFrequency]] = None,
                           source_weights: Optional[Mapping[str, float]] = None,
                           ) -> List[TrendScore]:
    """
    Score every keyword in the batch.

    Args:
        frequencies: Output of aggregate_keywords() for the current period.
        previous_frequencies: Same for the previous period, used for velocity.
        source_weights: Per-source weight overrides on top of SOURCE_WEIGHTS.

    Returns list of TrendScore in the same order as frequencies, all
    numbers rounded to 2 decimals.
    """
    prev_mentions: Dict[str, int] = {}
    if previous_frequencies:
        for f in previous_frequencies:
            prev_mentions[f.keyword] = f.total_mentions

    scores = []
    for freq in frequencies:
        # 1) Mentions, log-damped
        mention_score = math.log2(freq.total_mentions + 1) * 10

        # 2) Source quality: each source's mentions times its weight
        source_quality_score = 0.0
        for src, count in freq.source_breakdown.items():
            source_quality_score += count * get_source_weight(src, source_weights)
        source_count = len(freq.source_breakdown)

        # 3) Cross-source bonus
        multiplier = get_cross_source_multiplier(source_count)
        cross_source_score = source_quality_score * (multiplier - 1)

        # 4) Velocity vs. previous period
        velocity = compute_velocity(freq.total_mentions,
                                    prev_mentions.get(freq.keyword, 0))

        score = mention_score + source_quality_score + cross_source_score

        scores.append(TrendScore(
            keyword=freq.keyword,
            category=freq.category,
            score=round_half_up(score),
            mention_score=round_half_up(mention_score),
            source_quality_score=round_half_up(source_quality_score),
            cross_source_score=round_half_up(cross_source_score),
            source_count=source_count,
            velocity=round_half_up(velocity),
            is_spreading=source_count >= SPREADING_MIN_SOURCES,
        ))

    logger.debug(f"Scored {len(scores)} keywords "
                 f"({len(prev_mentions)} in previous period)")
    return scores


def rank_by_score(scores: List[TrendScore]) -> List[TrendScore]:
    """Highest score first; equal scores keep their input order."""
    return sorted(scores, key=lambda s: s.score, reverse=True)


def to_keyword_trend(freq: KeywordFrequency, trend_score: TrendScore) -> KeywordTrend:
    """Combine a frequency record and its score into a charting view."""
    hourly = [
        {"hour": hour, "count": count}
        for hour, count in sorted(freq.hourly_buckets.items())
    ]
    sources = [
        {"source": source, "count": count}
        for source, count in freq.source_breakdown.items()
    ]

    return KeywordTrend(
        keyword=freq.keyword,
        category=freq.category,
        hourly_mentions=hourly,
        daily_mentions=_daily_from_hourly(hourly),
        sources=sources,
        velocity=trend_score.velocity,
        total_mentions=freq.total_mentions,
        first_seen=freq.first_seen,
        last_seen=freq.last_seen,
    )


def to_hot_keywords(scores: List[TrendScore],
                    frequencies: List[KeywordFrequency],
                    limit: int = 20) -> List[HotKeyword]:
    """Top N keywords by score, with mentions and contributing sources."""
    freq_map = {f.keyword: f for f in frequencies}

    hot = []
    for i, s in enumerate(rank_by_score(scores)[:limit], 1):
        freq = freq_map.get(s.keyword)
        hot.append(HotKeyword(
            keyword=s.keyword,
            category=s.category,
            velocity=s.velocity,
            mentions=freq.total_mentions if freq else 0,
            sources=list(freq.source_breakdown) if freq else [],
            rank=i,
        ))
    return hot


def _daily_from_hourly(hourly: List[dict]) -> List[dict]:
    """Sum hourly buckets by their "YYYY-MM-DD" prefix."""
    daily: Dict[str, int] = {}
    for h in hourly:
        date = h["hour"][:10]
        daily[date] = daily.get(date, 0) + h["count"]
    return [{"date": d, "count": c} for d, c in sorted(daily.items())]
