"""
Input layer, options profile and CLI tests.

Uses temp files only -- no network.

Run: python -m unittest test_options_and_cli
"""

import json
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

# Ensure the project root is on the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import config
import main
from collectors import (
    ItemValidationError, NormalizedItem, deduplicate_by_url,
    load_items, load_items_file,
)
from keyword_trends.engine import AnalysisOptions
from options_loader import (
    OptionsValidationError, load_options, merge_options, options_from_dict,
)


def _record(n, **overrides):
    data = {
        "source": "hackernews",
        "title": f"Story {n}",
        "url": f"https://example.com/{n}",
        "score": 42,
        "description": "",
        "author": "someone",
        "keywords": ["react"],
        "category": "frontend",
        "collectedAt": "2025-06-01T14:00:00Z",
        "metadata": {"comments": 7},
    }
    data.update(overrides)
    return data


class TestNormalizedItem(unittest.TestCase):

    def test_from_camel_case_record(self):
        item = NormalizedItem.from_dict(_record(1))
        self.assertEqual(item.collected_at, "2025-06-01T14:00:00Z")
        self.assertEqual(item.metadata, {"comments": 7})
        self.assertEqual(item.to_dict()["collectedAt"], "2025-06-01T14:00:00Z")

    def test_optional_fields_default(self):
        item = NormalizedItem.from_dict({
            "source": "github",
            "url": "https://github.com/a/b",
            "collected_at": "2025-06-01T14:00:00Z",
        })
        self.assertEqual(item.score, 0)
        self.assertEqual(item.keywords, [])
        self.assertEqual(item.category, "other")
        self.assertEqual(item.title, "")
        self.assertEqual(item.metadata, {})

    def test_missing_required_fields(self):
        with self.assertRaises(ItemValidationError) as ctx:
            NormalizedItem.from_dict({"title": "no source", "url": "https://x"})
        self.assertIn("source", str(ctx.exception))
        self.assertIn("collectedAt", str(ctx.exception))

    def test_negative_score_rejected(self):
        with self.assertRaises(ItemValidationError):
            NormalizedItem.from_dict(_record(1, score=-5))

    def test_non_object_rejected(self):
        with self.assertRaises(ItemValidationError):
            load_items(["not an item"])

    def test_non_list_keywords_rejected(self):
        with self.assertRaises(ItemValidationError):
            NormalizedItem.from_dict(_record(1, keywords=5))
        with self.assertRaises(ItemValidationError):
            NormalizedItem.from_dict(_record(1, keywords={"react": 1}))

    def test_non_finite_score_rejected(self):
        with self.assertRaises(ItemValidationError):
            NormalizedItem.from_dict(_record(1, score=float("nan")))

    def test_empty_keywords_skipped_and_logged(self):
        with self.assertLogs("collectors", level="DEBUG") as logs:
            item = NormalizedItem.from_dict(_record(1, keywords=["react", 0, "", "vue"]))
        self.assertEqual(item.keywords, ["react", "vue"])
        self.assertIn("empty keywords", logs.output[0])


class TestDeduplicate(unittest.TestCase):

    def test_first_occurrence_wins_case_insensitive(self):
        items = load_items([
            _record(1, url="https://Example.com/A", source="reddit"),
            _record(2, url="https://example.com/a", source="github"),
            _record(3, url="https://example.com/b"),
        ])
        deduped = deduplicate_by_url(items)
        self.assertEqual([i.source for i in deduped], ["reddit", "hackernews"])


class TestLoadItemsFile(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, name, payload):
        path = self.dir / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_bare_list(self):
        items = load_items_file(self._write("a.json", [_record(1), _record(2)]))
        self.assertEqual(len(items), 2)

    def test_items_wrapper(self):
        items = load_items_file(self._write("b.json", {"items": [_record(1)]}))
        self.assertEqual(items[0].url, "https://example.com/1")

    def test_invalid_json(self):
        path = self.dir / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(ItemValidationError):
            load_items_file(path)

    def test_wrong_shape(self):
        with self.assertRaises(ItemValidationError):
            load_items_file(self._write("c.json", {"data": []}))

    def test_non_utf8_file(self):
        path = self.dir / "d.json"
        path.write_bytes(b"\xff\xfe[]")
        with self.assertRaises(ItemValidationError):
            load_items_file(path)


class TestOptionsLoader(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, text):
        path = self.dir / "profile.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_full_profile(self):
        path = self._write(
            "limits:\n"
            "  top_keywords: 30\n"
            "  viral: 5\n"
            "surge:\n"
            "  velocity_threshold: 80\n"
            "source_weights:\n"
            "  hackernews: 4\n"
        )
        opts = load_options(path)

        self.assertEqual(opts.top_keywords_limit, 30)
        self.assertEqual(opts.viral_limit, 5)
        self.assertEqual(opts.hot_keywords_limit, 20)
        self.assertEqual(opts.surge_config, {"velocity_threshold": 80})
        self.assertEqual(opts.source_weights, {"hackernews": 4.0})

    def test_empty_profile_gives_defaults(self):
        self.assertEqual(load_options(self._write("")), AnalysisOptions())

    def test_no_profile_gives_defaults(self):
        with patch.object(config, "OPTIONS_PROFILE", None):
            self.assertEqual(load_options(), AnalysisOptions())

    def test_named_profile_from_profiles_dir(self):
        opts = load_options("hourly")
        self.assertEqual(opts.hot_keywords_limit, 10)
        self.assertEqual(opts.surge_config["min_mentions"], 5)

    def test_missing_profile(self):
        with self.assertRaises(FileNotFoundError):
            load_options(self.dir / "nope.yaml")

    def test_unknown_section_rejected(self):
        with self.assertRaises(OptionsValidationError):
            options_from_dict({"limitz": {"top_keywords": 3}})

    def test_unknown_key_rejected(self):
        with self.assertRaises(OptionsValidationError):
            options_from_dict({"surge": {"min_velocity": 3}})

    def test_negative_and_non_numeric_rejected(self):
        with self.assertRaises(OptionsValidationError):
            options_from_dict({"limits": {"top_keywords": -1}})
        with self.assertRaises(OptionsValidationError):
            options_from_dict({"source_weights": {"github": "high"}})
        with self.assertRaises(OptionsValidationError):
            options_from_dict({"limits": {"viral": 2.5}})

    def test_infinite_limit_rejected(self):
        with self.assertRaises(OptionsValidationError):
            options_from_dict({"limits": {"top_keywords": float("inf")}})
        with self.assertRaises(OptionsValidationError):
            load_options(self._write("limits:\n  viral: .inf\n"))

    def test_nan_threshold_rejected(self):
        with self.assertRaises(OptionsValidationError):
            options_from_dict({"surge": {"velocity_threshold": float("nan")}})
        with self.assertRaises(OptionsValidationError):
            load_options(self._write("surge:\n  velocity_threshold: .nan\n"))

    def test_invalid_yaml(self):
        with self.assertRaises(OptionsValidationError):
            load_options(self._write("limits: [unclosed\n"))

    def test_merge_options_ignores_none(self):
        base = AnalysisOptions(top_keywords_limit=30)
        merged = merge_options(base, {"top_keywords_limit": None, "viral_limit": 2})
        self.assertEqual(merged.top_keywords_limit, 30)
        self.assertEqual(merged.viral_limit, 2)
        self.assertIs(merge_options(base, {"viral_limit": None}), base)

    def test_merge_options_rejects_negative(self):
        with self.assertRaises(OptionsValidationError):
            merge_options(AnalysisOptions(), {"top_keywords_limit": -1})
        with self.assertRaises(OptionsValidationError):
            merge_options(AnalysisOptions(), {"viral_limit": 2.5})

    def test_profiles_dir_can_be_moved(self):
        profiles = self.dir / "installed-profiles"
        profiles.mkdir()
        (profiles / "digest.yaml").write_text("limits:\n  hot_keywords: 7\n", encoding="utf-8")
        with patch.object(config, "PROFILES_DIR", profiles):
            self.assertEqual(load_options("digest").hot_keywords_limit, 7)


class TestCli(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_end_to_end(self):
        current = self.dir / "current.json"
        previous = self.dir / "previous.json"
        output = self.dir / "result.json"
        current.write_text(json.dumps([
            _record(1, source="hackernews"),
            _record(2, source="reddit"),
            _record(3, source="github"),
            _record(4, source="github", url="https://EXAMPLE.com/3"),
        ]), encoding="utf-8")
        previous.write_text(json.dumps([_record(10)]), encoding="utf-8")

        code = main.main([
            str(current), "--previous", str(previous),
            "--output", str(output), "--top", "2", "--dedupe",
        ])

        self.assertEqual(code, 0)
        result = json.loads(output.read_text(encoding="utf-8"))
        self.assertEqual(result["meta"]["totalItems"], 3)
        self.assertEqual(result["crossSourceSpreads"][0]["keyword"], "react")
        self.assertEqual(result["trendScores"][0]["velocity"], 200.0)

    def test_invalid_input_exits_1(self):
        bad = self.dir / "bad.json"
        bad.write_text(json.dumps([{"title": "no source"}]), encoding="utf-8")
        with self.assertLogs("main", level="ERROR"):
            self.assertEqual(main.main([str(bad)]), 1)

    def test_missing_options_profile_exits_1(self):
        current = self.dir / "current.json"
        current.write_text(json.dumps([_record(1)]), encoding="utf-8")
        with self.assertLogs("main", level="ERROR"):
            self.assertEqual(main.main([str(current), "--options", "does-not-exist"]), 1)

    def test_negative_limit_flag_exits_1(self):
        current = self.dir / "current.json"
        output = self.dir / "result.json"
        current.write_text(json.dumps([_record(1)]), encoding="utf-8")
        with self.assertLogs("main", level="ERROR"):
            code = main.main([str(current), "--top", "-1", "--output", str(output)])
        self.assertEqual(code, 1)
        self.assertFalse(output.exists())

    def test_non_utf8_input_exits_1(self):
        bad = self.dir / "bad.json"
        bad.write_bytes(b"\xff\xfe")
        with self.assertLogs("main", level="ERROR"):
            self.assertEqual(main.main([str(bad)]), 1)

    def test_non_list_keywords_exits_1(self):
        bad = self.dir / "bad.json"
        bad.write_text(json.dumps([_record(1, keywords=5)]), encoding="utf-8")
        with self.assertLogs("main", level="ERROR"):
            self.assertEqual(main.main([str(bad)]), 1)


if __name__ == "__main__":
    unittest.main()
