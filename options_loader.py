"""
Options Loader -- loads and validates analysis option profiles from YAML.

A profile tunes one kind of run (e.g. a daily digest vs. an hourly surge
watch) without touching code. Anything a profile leaves out falls back
to the defaults in config.py.

Example profile (profiles/hourly.yaml):

    limits:
      top_keywords: 30
      hot_keywords: 10
      viral: 5
      min_cross_sources: 3
    surge:
      velocity_threshold: 80
      min_mentions: 5
    source_weights:
      hackernews: 4
"""

import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import Dict, Optional, Union

import yaml

import config
from keyword_trends.engine import AnalysisOptions
from keyword_trends.sources import is_known_source

logger = logging.getLogger(__name__)


class OptionsValidationError(Exception):
    """Raised when an options profile is malformed."""
    pass


# section -> {yaml key: AnalysisOptions field}
LIMIT_FIELDS = {
    "top_keywords": "top_keywords_limit",
    "hot_keywords": "hot_keywords_limit",
    "viral": "viral_limit",
    "min_cross_sources": "min_cross_sources",
}
SURGE_FIELDS = {"velocity_threshold", "min_mentions", "min_sources"}
KNOWN_SECTIONS = {"limits", "surge", "source_weights"}


def _resolve_path(profile: Union[str, Path]) -> Path:
    """A bare name means profiles/<name>.yaml; anything else is a path."""
    path = Path(profile)
    if path.suffix in (".yaml", ".yml") or path.parent != Path("."):
        return path
    return config.PROFILES_DIR / f"{profile}.yaml"


def load_options(profile: Optional[Union[str, Path]] = None) -> AnalysisOptions:
    """
    Load analysis options from a YAML profile.

    Args:
        profile: Profile name (looked up in profiles/) or path to a YAML file.
                 Defaults to OPTIONS_PROFILE from .env; with neither set,
                 returns the config.py defaults.

    Raises:
        OptionsValidationError: If the profile is malformed.
        FileNotFoundError: If the profile file doesn't exist.
    """
    if profile is None:
        profile = config.OPTIONS_PROFILE
    if not profile:
        return AnalysisOptions()

    path = _resolve_path(profile)
    if not path.exists():
        available = sorted(f.stem for f in config.PROFILES_DIR.glob("*.yaml")) \
            if config.PROFILES_DIR.exists() else []
        raise FileNotFoundError(
            f"Options profile not found at {path}\n"
            f"Available profiles: {available}"
        )

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise OptionsValidationError(f"Profile {path} is not valid YAML: {e}") from e

    if data is None:
        logger.info(f"Options profile {path} is empty, using defaults")
        return AnalysisOptions()

    return options_from_dict(data, name=str(path))


def options_from_dict(data: dict, name: str = "<dict>") -> AnalysisOptions:
    """Validate a parsed profile and build AnalysisOptions from it."""
    _validate_options(data, name)

    kwargs = {}
    for key, value in (data.get("limits") or {}).items():
        kwargs[LIMIT_FIELDS[key]] = int(value)

    surge = data.get("surge") or {}
    if surge:
        kwargs["surge_config"] = dict(surge)

    weights = data.get("source_weights") or {}
    if weights:
        unknown = sorted(s for s in weights if not is_known_source(s))
        if unknown:
            logger.warning(f"Profile {name} weights unlisted sources: {unknown}")
        kwargs["source_weights"] = {str(k): float(v) for k, v in weights.items()}

    return AnalysisOptions(**kwargs)


def _validate_options(data: dict, name: str) -> None:
    """Validate section names and that every value is a non-negative number."""
    if not isinstance(data, dict):
        raise OptionsValidationError(f"Profile {name} must be a mapping.")

    unknown_sections = sorted(set(data) - KNOWN_SECTIONS)
    if unknown_sections:
        raise OptionsValidationError(
            f"Profile {name} has unknown sections: {unknown_sections}"
        )

    limits = data.get("limits") or {}
    surge = data.get("surge") or {}
    weights = data.get("source_weights") or {}

    for section, values, allowed in (
        ("limits", limits, set(LIMIT_FIELDS)),
        ("surge", surge, SURGE_FIELDS),
        ("source_weights", weights, None),
    ):
        if not isinstance(values, dict):
            raise OptionsValidationError(f"Profile {name} '{section}' must be a mapping.")
        if allowed is not None:
            unknown = sorted(set(values) - allowed)
            if unknown:
                raise OptionsValidationError(
                    f"Profile {name} '{section}' has unknown keys: {unknown}"
                )
        for key, value in values.items():
            _check_number(name, f"{section}.{key}", value)

    for key in ("min_mentions", "min_sources"):
        if key in surge and int(surge[key]) != surge[key]:
            raise OptionsValidationError(
                f"Profile {name} 'surge.{key}' must be a whole number."
            )
    for key, value in limits.items():
        if int(value) != value:
            raise OptionsValidationError(
                f"Profile {name} 'limits.{key}' must be a whole number."
            )


def _check_number(name: str, field_name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise OptionsValidationError(
            f"Profile {name} '{field_name}' must be a number, got {value!r}"
        )
    if not math.isfinite(value):
        raise OptionsValidationError(
            f"Profile {name} '{field_name}' must be finite, got {value}"
        )
    if value < 0:
        raise OptionsValidationError(
            f"Profile {name} '{field_name}' must not be negative, got {value}"
        )


def merge_options(base: AnalysisOptions, overrides: Dict) -> AnalysisOptions:
    """
    Copy of base with CLI-style overrides applied (None values ignored).

    Raises:
        OptionsValidationError: If an override is not a non-negative whole number.
    """
    changes = {k: v for k, v in overrides.items() if v is not None}
    for key, value in changes.items():
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise OptionsValidationError(
                f"Option '{key}' must be a non-negative whole number, got {value!r}"
            )
    if not changes:
        return base
    return replace(base, **changes)
