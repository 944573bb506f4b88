"""
Source registry -- the sources and categories the engine knows about.

Both sets are open: items from an unlisted source or category flow
through the pipeline untouched, they just get default treatment
(weight 1, no tier).
"""

import math
from enum import Enum
from typing import Dict, Mapping, Optional


class Source(str, Enum):
    GITHUB = "github"
    YOUTUBE = "youtube"
    GOOGLE_TRENDS = "google-trends"
    GOOGLE_SEARCH = "google-search"
    HACKERNEWS = "hackernews"
    X_TWITTER = "x-twitter"
    REDDIT = "reddit"
    PRODUCTHUNT = "producthunt"
    DEVTO = "devto"
    FACEBOOK = "facebook"
    MEDIUM = "medium"
    STACKOVERFLOW = "stackoverflow"
    NAVER = "naver"
    GEEKNEWS = "geeknews"
    KAKAO_TECH = "kakao-tech"
    TOSS_TECH = "toss-tech"
    YOZM = "yozm"
    CODENARY = "codenary"
    NPM = "npm"
    PYPI = "pypi"
    DOCKERHUB = "dockerhub"
    TECHCRUNCH = "techcrunch"
    THEVERGE = "theverge"
    ARSTECHNICA = "arstechnica"
    INFOQ = "infoq"
    THENEWSTACK = "thenewstack"
    LOBSTERS = "lobsters"
    SLASHDOT = "slashdot"
    DZONE = "dzone"


KNOWN_SOURCES = frozenset(s.value for s in Source)


class Category(str, Enum):
    AI_ML = "ai-ml"
    FRONTEND = "frontend"
    BACKEND = "backend"
    DEVOPS = "devops"
    MOBILE = "mobile"
    DATABASE = "database"
    TOOLS = "tools"
    SECURITY = "security"
    CLOUD = "cloud"
    OTHER = "other"


# ── Source Tiers ──
# 1 = primary signal (big tech-news / trend feeds), 3 = niche or RSS-only.
SOURCE_TIERS: Dict[str, int] = {
    "hackernews": 1,
    "github": 1,
    "youtube": 1,
    "google-trends": 1,
    "google-search": 1,
    "reddit": 2,
    "producthunt": 2,
    "devto": 2,
    "medium": 2,
    "stackoverflow": 2,
    "x-twitter": 2,
    "geeknews": 3,
    "naver": 3,
    "kakao-tech": 3,
    "toss-tech": 3,
    "yozm": 3,
    "codenary": 3,
}

# ── Scoring Weights ──
# Seeded from the tiers, then hand-tuned. Each mention at a source is
# worth this many points of source quality.
SOURCE_WEIGHTS: Dict[str, float] = {
    "hackernews": 3,
    "github": 3,
    "youtube": 2.5,
    "google-trends": 3,
    "google-search": 2,
    "reddit": 2,
    "producthunt": 2,
    "devto": 1.5,
    "medium": 1.5,
    "stackoverflow": 2,
    "x-twitter": 2,
    "geeknews": 1.5,
    "naver": 1.5,
    "kakao-tech": 1,
    "toss-tech": 1,
    "yozm": 1,
    "codenary": 1,
}

DEFAULT_SOURCE_WEIGHT = 1


def get_source_weight(source: str,
                      overrides: Optional[Mapping[str, float]] = None) -> float:
    """Return the scoring weight for a source; unlisted sources get 1."""
    if overrides and source in overrides:
        return overrides[source]
    return SOURCE_WEIGHTS.get(source, DEFAULT_SOURCE_WEIGHT)


def get_source_tier(source: str) -> Optional[int]:
    """Return the source's tier, or None for sources we don't collect from."""
    return SOURCE_TIERS.get(source)


def is_known_source(source: str) -> bool:
    return source in KNOWN_SOURCES


def round_half_up(value: float, digits: int = 2) -> float:
    """
    Round halves upward (0.125 -> 0.13), i.e. floor(x * 10^d + 0.5).

    Built-in round() rounds halves to even.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
