"""
Collectors -- the hand-off point between source fetching and analysis.

Source-specific fetchers live outside this repo. Whatever they collect
arrives here already mapped to NormalizedItem, usually as JSON.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

logger = logging.getLogger(__name__)


class ItemValidationError(Exception):
    """Raised when a collected record cannot be turned into a NormalizedItem."""
    pass


@dataclass(frozen=True)
class NormalizedItem:
    """Source-agnostic item shape produced by every collector."""
    source: str                         # "hackernews", "github", "youtube", ...
    title: str
    url: str
    collected_at: str                   # ISO 8601, string-comparable
    score: float = 0                    # stars, points, votes -- source-specific popularity
    description: str = ""
    author: str = ""
    keywords: List[str] = field(default_factory=list)
    category: str = "other"
    # Open per-source extras (e.g. "stars"/"language" for github,
    # "comments" for hackernews). Not a closed schema.
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NormalizedItem":
        """
        Build an item from a collector record.

        Accepts the camelCase wire format ("collectedAt") as well as
        snake_case keys. Optional text fields default to empty strings.

        Raises:
            ItemValidationError: if source, url or collectedAt is missing,
                or score is negative.
        """
        if not isinstance(data, dict):
            raise ItemValidationError(
                f"Item must be an object, got {type(data).__name__}"
            )

        collected_at = data.get("collectedAt", data.get("collected_at"))
        if isinstance(collected_at, datetime):
            collected_at = collected_at.isoformat()

        missing = [
            name for name, value in (
                ("source", data.get("source")),
                ("url", data.get("url")),
                ("collectedAt", collected_at),
            ) if not value
        ]
        if missing:
            raise ItemValidationError(
                f"Item {data.get('url') or data.get('title') or '?'!r} "
                f"missing required field(s): {', '.join(missing)}"
            )

        score = data.get("score")
        if score is None:
            score = 0
        if not isinstance(score, (int, float)) or isinstance(score, bool):
            raise ItemValidationError(f"Item {data['url']!r} has non-numeric score {score!r}")
        if not math.isfinite(score):
            raise ItemValidationError(f"Item {data['url']!r} has non-finite score {score}")
        if score < 0:
            raise ItemValidationError(f"Item {data['url']!r} has negative score {score}")

        keywords = data.get("keywords") or []
        if not isinstance(keywords, list):
            raise ItemValidationError(f"Item {data['url']!r} keywords must be a list")
        dropped = [k for k in keywords if not k]
        if dropped:
            logger.debug(f"Item {data['url']!r} has empty keywords, skipped: {dropped!r}")

        return cls(
            source=str(data["source"]),
            title=data.get("title") or "",
            url=str(data["url"]),
            collected_at=str(collected_at),
            score=score,
            description=data.get("description") or "",
            author=data.get("author") or "",
            keywords=[str(k) for k in keywords if k],
            category=data.get("category") or "other",
            metadata=dict(data.get("metadata") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the camelCase wire format."""
        return {
            "source": self.source,
            "title": self.title,
            "url": self.url,
            "score": self.score,
            "description": self.description,
            "author": self.author,
            "keywords": list(self.keywords),
            "category": self.category,
            "collectedAt": self.collected_at,
            "metadata": dict(self.metadata),
        }


def load_items(records: Iterable[Dict[str, Any]]) -> List[NormalizedItem]:
    """Convert raw collector records into NormalizedItems."""
    return [NormalizedItem.from_dict(r) for r in records]


def load_items_file(path: Union[str, Path]) -> List[NormalizedItem]:
    """
    Load a JSON snapshot of collected items.

    The file holds either a bare list of items or an object with an
    "items" key (the shape the collection job writes).
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except UnicodeDecodeError as e:
        raise ItemValidationError(f"{path} is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise ItemValidationError(f"{path} is not valid JSON: {e}") from e

    if isinstance(payload, dict):
        payload = payload.get("items")
    if not isinstance(payload, list):
        raise ItemValidationError(f"{path} must contain a list of items")

    items = load_items(payload)
    logger.info(f"Loaded {len(items)} items from {path}")
    return items


def deduplicate_by_url(items: Iterable[NormalizedItem]) -> List[NormalizedItem]:
    """Drop repeat URLs (case-insensitive). The first collected copy wins."""
    seen = set()
    deduped = []
    for item in items:
        key = item.url.lower()
        if key in seen:
            continue
        seen.add(key)
        deduped.append(item)
    return deduped
