"""
Analysis Engine -- runs the full trend pipeline over one collection cycle.

  1. Aggregate keyword frequencies (current + optional previous period)
  2. Score and rank keywords
  3. Build the time-series and hot-keyword views
  4. Detect surges against the previous period
  5. Detect cross-source spreads and source correlations
  6. Rank viral trends

Pure computation: no I/O, nothing kept between runs.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

import config
from collectors import NormalizedItem
from keyword_trends.aggregator import KeywordFrequency, aggregate_keywords, top_keywords
from keyword_trends.cross_source import (
    CrossSourceSpread, SourceCorrelation, ViralTrend,
    analyze_source_correlations, detect_cross_source_spreads, get_viral_trends,
)
from keyword_trends.scorer import (
    HotKeyword, KeywordTrend, TrendScore,
    calculate_trend_scores, rank_by_score, to_hot_keywords, to_keyword_trend,
)
from keyword_trends.surge import (
    SurgeAlert, SurgeConfig, build_previous_mention_map, detect_surges,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisOptions:
    top_keywords_limit: int = config.TOP_KEYWORDS_LIMIT
    hot_keywords_limit: int = config.HOT_KEYWORDS_LIMIT
    viral_limit: int = config.VIRAL_LIMIT
    min_cross_sources: int = config.MIN_CROSS_SOURCES
    surge_config: Optional[Dict] = None       # partial SurgeConfig override
    source_weights: Optional[Dict[str, float]] = None  # per-source weight overrides


@dataclass(frozen=True)
class AnalysisMeta:
    total_items: int
    unique_keywords: int
    analyzed_at: str
    duration_ms: int

    def to_dict(self) -> dict:
        return {
            "totalItems": self.total_items,
            "uniqueKeywords": self.unique_keywords,
            "analyzedAt": self.analyzed_at,
            "durationMs": self.duration_ms,
        }


@dataclass(frozen=True)
class AnalysisResult:
    frequencies: List[KeywordFrequency]
    top_frequencies: List[KeywordFrequency]
    trend_scores: List[TrendScore]            # ranked
    keyword_trends: List[KeywordTrend]
    hot_keywords: List[HotKeyword]
    surge_alerts: List[SurgeAlert]
    cross_source_spreads: List[CrossSourceSpread]
    source_correlations: List[SourceCorrelation]
    viral_trends: List[ViralTrend]
    meta: AnalysisMeta

    def to_dict(self) -> dict:
        """JSON-serializable form (camelCase keys)."""
        return {
            "frequencies": [f.to_dict() for f in self.frequencies],
            "topFrequencies": [f.to_dict() for f in self.top_frequencies],
            "trendScores": [s.to_dict() for s in self.trend_scores],
            "keywordTrends": [t.to_dict() for t in self.keyword_trends],
            "hotKeywords": [h.to_dict() for h in self.hot_keywords],
            "surgeAlerts": [a.to_dict() for a in self.surge_alerts],
            "crossSourceSpreads": [s.to_dict() for s in self.cross_source_spreads],
            "sourceCorrelations": [c.to_dict() for c in self.source_correlations],
            "viralTrends": [v.to_dict() for v in self.viral_trends],
            "meta": self.meta.to_dict(),
        }


def run_analysis(current_items: List[NormalizedItem],
                 previous_items: Optional[List[NormalizedItem]] = None,
                 options: Optional[AnalysisOptions] = None) -> AnalysisResult:
    """
    Run the whole pipeline over the current (and optional previous) batch.

    Args:
        current_items: Items collected in the period being analyzed.
        previous_items: Items from the period before, for velocity/surges.
        options: Limits and thresholds; config.py defaults when omitted.

    Returns:
        AnalysisResult. An empty batch gives empty collections and
        meta.total_items == 0.
    """
    opts = options or AnalysisOptions()
    start = time.perf_counter()

    # 1) Keyword frequencies
    frequencies = aggregate_keywords(current_items)
    top_frequencies = top_keywords(frequencies, opts.top_keywords_limit)

    # 2) Previous period (if any)
    previous_frequencies = (
        aggregate_keywords(previous_items) if previous_items is not None else None
    )

    # 3) Trend scores
    trend_scores = rank_by_score(calculate_trend_scores(
        frequencies, previous_frequencies, source_weights=opts.source_weights,
    ))

    # 4) Time-series view, top keywords only
    score_map = {s.keyword: s for s in trend_scores}
    keyword_trends = [
        to_keyword_trend(
            freq, score_map.get(freq.keyword) or TrendScore.empty(freq.keyword, freq.category)
        )
        for freq in top_frequencies
    ]

    # 5) Hot keywords
    hot_keywords = to_hot_keywords(trend_scores, frequencies, opts.hot_keywords_limit)

    # 6) Surge alerts
    previous_mentions = (
        build_previous_mention_map(previous_frequencies) if previous_frequencies else {}
    )
    surge_alerts = detect_surges(
        trend_scores, previous_mentions, SurgeConfig().merged(opts.surge_config),
    )

    # 7) Cross-source analysis
    spreads = detect_cross_source_spreads(frequencies, opts.min_cross_sources)
    correlations = analyze_source_correlations(frequencies)
    viral_trends = get_viral_trends(spreads, trend_scores, opts.viral_limit)

    duration_ms = int((time.perf_counter() - start) * 1000)

    return AnalysisResult(
        frequencies=frequencies,
        top_frequencies=top_frequencies,
        trend_scores=trend_scores,
        keyword_trends=keyword_trends,
        hot_keywords=hot_keywords,
        surge_alerts=surge_alerts,
        cross_source_spreads=spreads,
        source_correlations=correlations,
        viral_trends=viral_trends,
        meta=AnalysisMeta(
            total_items=len(current_items),
            unique_keywords=len(frequencies),
            analyzed_at=datetime.now(timezone.utc).isoformat(),
            duration_ms=duration_ms,
        ),
    )


class AnalysisEngine:
    """
    Runs trend analysis with a fixed set of options.

    Holds no state between runs beyond the options, so one engine can be
    shared across threads.
    """

    def __init__(self, options: Optional[AnalysisOptions] = None):
        self.options = options or AnalysisOptions()

    def run(self, current_items: List[NormalizedItem],
            previous_items: Optional[List[NormalizedItem]] = None) -> AnalysisResult:
        logger.info(
            f"Analyzing {len(current_items)} items"
            + (f" against {len(previous_items)} previous" if previous_items is not None else "")
        )
        result = run_analysis(current_items, previous_items, self.options)

        meta = result.meta
        logger.info(
            f"Analysis complete: {meta.unique_keywords} keywords, "
            f"{len(result.surge_alerts)} surges, "
            f"{len(result.cross_source_spreads)} spreading, "
            f"{len(result.source_correlations)} source pairs "
            f"({meta.duration_ms}ms)"
        )
        return result
