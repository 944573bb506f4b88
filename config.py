"""
Global configuration for the Keyword Trend Engine.

Analysis defaults come from the environment (or a .env file) so a
scheduled run can be tuned without code changes. Per-run overrides live
in YAML options profiles (see options_loader.py) or CLI flags.
"""

import logging
import math
import os
from pathlib import Path
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

# ── Paths ──
PROJECT_ROOT = Path(__file__).parent
# Profiles ship with the checkout, not the wheel. Installed copies point
# PROFILES_DIR at their own directory.
PROFILES_DIR = Path(os.getenv("PROFILES_DIR") or PROJECT_ROOT / "profiles")

# ── Active Options Profile ──
OPTIONS_PROFILE = os.getenv("OPTIONS_PROFILE")


def _int_env(name: str, default: int) -> int:
    """Read a non-negative integer setting, falling back on bad values."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default
    if value < 0:
        logger.warning(f"Ignoring negative {name}={value}, using {default}")
        return default
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
        return default
    if not math.isfinite(value) or value < 0:
        logger.warning(f"Ignoring out-of-range {name}={value}, using {default}")
        return default
    return value


# ── Result Limits ──
TOP_KEYWORDS_LIMIT = _int_env("TOP_KEYWORDS_LIMIT", 50)
HOT_KEYWORDS_LIMIT = _int_env("HOT_KEYWORDS_LIMIT", 20)
VIRAL_LIMIT = _int_env("VIRAL_LIMIT", 10)

# ── Cross-Source Spread ──
# "3+ independent sources = spreading"
MIN_CROSS_SOURCES = _int_env("MIN_CROSS_SOURCES", 3)

# ── Surge Detection ──
SURGE_VELOCITY_THRESHOLD = _float_env("SURGE_VELOCITY_THRESHOLD", 50.0)  # % growth
SURGE_MIN_MENTIONS = _int_env("SURGE_MIN_MENTIONS", 3)  # below this is noise
SURGE_MIN_SOURCES = _int_env("SURGE_MIN_SOURCES", 2)  # single-source spikes are low confidence

# ── Logging ──
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
