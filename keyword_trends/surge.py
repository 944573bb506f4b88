"""
Surge Detector -- flags keywords whose mention volume jumped since the previous period.

Strategy:
  1. velocity >= threshold          -> candidate
  2. too few mentions                -> dropped as noise
  3. too few sources                 -> dropped (single-source spikes are low confidence)
  4. remaining candidates are tiered: spike (50%+) / surge (200%+) / explosion (500%+)
"""

import logging
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional

import config
from keyword_trends.aggregator import KeywordFrequency
from keyword_trends.scorer import TrendScore, compute_velocity
from keyword_trends.sources import round_half_up

logger = logging.getLogger(__name__)

# (min velocity %, level), highest first
SURGE_LEVELS = [
    (500, "explosion"),
    (200, "surge"),
    (50, "spike"),
]


@dataclass(frozen=True)
class SurgeConfig:
    velocity_threshold: float = config.SURGE_VELOCITY_THRESHOLD  # % growth
    min_mentions: int = config.SURGE_MIN_MENTIONS
    min_sources: int = config.SURGE_MIN_SOURCES

    def merged(self, overrides: Optional[Mapping] = None) -> "SurgeConfig":
        """Copy with any non-None values from overrides applied."""
        if not overrides:
            return self
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown surge setting(s): {', '.join(sorted(unknown))}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


@dataclass(frozen=True)
class SurgeAlert:
    keyword: str
    level: str                    # "spike", "surge" or "explosion"
    velocity: float
    current_mentions: int
    previous_mentions: int
    source_count: int
    is_spreading: bool
    trend_score: float
    detected_at: str

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "level": self.level,
            "velocity": self.velocity,
            "currentMentions": self.current_mentions,
            "previousMentions": self.previous_mentions,
            "sourceCount": self.source_count,
            "isSpreading": self.is_spreading,
            "trendScore": self.trend_score,
            "detectedAt": self.detected_at,
        }


def classify_surge_level(velocity: float) -> str:
    for min_velocity, level in SURGE_LEVELS:
        if velocity >= min_velocity:
            return level
    return SURGE_LEVELS[-1][1]


def mentions_from_score(mention_score: float) -> int:
    """Invert mention_score = log2(n + 1) * 10 back to a mention count."""
    if mention_score <= 0:
        return 0
    return int(round_half_up(2 ** (mention_score / 10) - 1, 0))


def detect_surges(current_scores: List[TrendScore],
                  previous_mention_map: Mapping[str, int],
                  surge_config: Optional[SurgeConfig] = None,
                  detected_at: Optional[str] = None) -> List[SurgeAlert]:
    """
    Compare current scores against previous-period mention counts.

    Current mentions are reconstructed from each score's mention_score
    rather than read from the aggregator, so thresholds apply to the
    reconstructed count.

    Returns alerts sorted by trend score, highest first.
    """
    cfg = surge_config or SurgeConfig()
    now = detected_at or datetime.now(timezone.utc).isoformat()

    alerts = []
    for score in current_scores:
        prev = previous_mention_map.get(score.keyword, 0)
        current = mentions_from_score(score.mention_score)
        velocity = compute_velocity(current, prev)

        if velocity < cfg.velocity_threshold:
            continue
        if current < cfg.min_mentions:
            continue
        if score.source_count < cfg.min_sources:
            continue

        alerts.append(SurgeAlert(
            keyword=score.keyword,
            level=classify_surge_level(velocity),
            velocity=round_half_up(velocity),
            current_mentions=current,
            previous_mentions=prev,
            source_count=score.source_count,
            is_spreading=score.is_spreading,
            trend_score=score.score,
            detected_at=now,
        ))

    alerts.sort(key=lambda a: a.trend_score, reverse=True)
    if alerts:
        levels = {}
        for a in alerts:
            levels[a.level] = levels.get(a.level, 0) + 1
        logger.info(f"Detected {len(alerts)} surges: {levels}")
    return alerts


def build_previous_mention_map(previous_frequencies: List[KeywordFrequency]) -> Dict[str, int]:
    """keyword -> total mentions in the previous period."""
    return {f.keyword: f.total_mentions for f in previous_frequencies}
