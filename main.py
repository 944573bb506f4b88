"""
Keyword Trend Engine -- Command-line entry point

Runs trend analysis over a JSON snapshot of collected items:
  1. Load current (and optional previous-period) items
  2. Optionally drop duplicate URLs
  3. Aggregate, score, detect surges and cross-source spreads
  4. Write the AnalysisResult as JSON

Usage:
  python main.py data/current.json
  python main.py data/current.json --previous data/previous.json --output result.json
  python main.py data/current.json --options hourly --top 20
"""

import argparse
import json
import logging
import sys

import config
from collectors import ItemValidationError, deduplicate_by_url, load_items_file
from keyword_trends.engine import AnalysisEngine
from options_loader import OptionsValidationError, load_options, merge_options

logger = logging.getLogger(__name__)


def setup_logging():
    """Configure console logging with timestamps."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_args(argv=None):
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Keyword Trend Engine -- trend, surge and spread analysis"
    )
    parser.add_argument(
        "current",
        help="JSON file with the current period's collected items",
    )
    parser.add_argument(
        "--previous", "-p",
        default=None,
        help="JSON file with the previous period's items (enables velocity and surges)",
    )
    parser.add_argument(
        "--options", "-o",
        default=None,
        help="Options profile name (profiles/<name>.yaml) or path to a YAML file",
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Write the result JSON here instead of stdout",
    )
    parser.add_argument("--top", type=int, default=None,
                        help="Keywords in the time-series view")
    parser.add_argument("--hot", type=int, default=None,
                        help="Keywords in the hot-keyword list")
    parser.add_argument("--viral", type=int, default=None,
                        help="Entries in the viral-trend list")
    parser.add_argument("--min-sources", type=int, default=None,
                        help="Sources needed for a keyword to count as spreading")
    parser.add_argument(
        "--dedupe",
        action="store_true",
        help="Drop items whose URL was already seen (first one wins)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    setup_logging()
    args = parse_args(argv)

    try:
        options = merge_options(load_options(args.options), {
            "top_keywords_limit": args.top,
            "hot_keywords_limit": args.hot,
            "viral_limit": args.viral,
            "min_cross_sources": args.min_sources,
        })
        current = load_items_file(args.current)
        previous = load_items_file(args.previous) if args.previous else None
    except (ItemValidationError, OptionsValidationError, FileNotFoundError) as e:
        logger.error(str(e))
        return 1

    if args.dedupe:
        before = len(current)
        current = deduplicate_by_url(current)
        if previous is not None:
            previous = deduplicate_by_url(previous)
        logger.info(f"Dropped {before - len(current)} duplicate URLs")

    result = AnalysisEngine(options).run(current, previous)
    payload = json.dumps(result.to_dict(), ensure_ascii=False, indent=2)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(payload)
        logger.info(f"Result written to {args.output}")
    else:
        print(payload)

    for hot in result.hot_keywords[:5]:
        logger.info(f"  #{hot.rank} {hot.keyword} ({hot.mentions} mentions, "
                    f"{len(hot.sources)} sources, {hot.velocity:+.0f}%)")

    return 0


if __name__ == "__main__":
    sys.exit(main())
