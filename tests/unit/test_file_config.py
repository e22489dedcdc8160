from __future__ import annotations

import argparse
import os
from pathlib import Path
import sys
import tempfile
import unittest
from unittest import mock

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "src"))

from config.file_config import AnalyzerConfig, candidate_paths, load_default_config
from models.errors import ConfigurationError


def _cli(**overrides: object) -> argparse.Namespace:
    values = {
        "data_dir": None,
        "function": "summary",
        "output": None,
        "sort_by": "symbol",
        "etfs": None,
        "force": False,
        "verbose": False,
        "workers": None,
        "symbol_col": None,
        "name_col": None,
        "weight_col": None,
        "shares_col": None,
        "number_col": None,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


FULL_CONFIG = """
data_dir = "./data"
function = "overlap"
sort_by = "count"
etfs = ["IVW", "IWF"]
force = true
workers = 3

[columns]
symbol_col = "Ticker"
weight_col = "Weighting"
"""


class TestFileConfig(unittest.TestCase):
    def test_parses_full_config(self) -> None:
        config = AnalyzerConfig.from_toml(FULL_CONFIG)

        self.assertEqual(config.data_dir, "./data")
        self.assertEqual(config.function, "overlap")
        self.assertEqual(config.etfs, ["IVW", "IWF"])
        self.assertTrue(config.force)
        self.assertIsNone(config.verbose)
        self.assertEqual(config.columns.symbol_col, "Ticker")
        self.assertIsNone(config.columns.name_col)

    def test_empty_config_has_no_values(self) -> None:
        config = AnalyzerConfig.from_toml("")
        self.assertIsNone(config.data_dir)
        self.assertIsNone(config.etfs)
        self.assertIsNone(config.columns.weight_col)

    def test_invalid_toml_and_unknown_keys(self) -> None:
        with self.assertRaises(ConfigurationError):
            AnalyzerConfig.from_toml("data_dir = ")
        with self.assertRaises(ConfigurationError):
            AnalyzerConfig.from_toml("[columns]\nticker_col = 'X'\n")
        with self.assertRaises(ConfigurationError):
            AnalyzerConfig.from_toml("etfs = 'IVW'\n")

    def test_invalid_value_types_are_rejected(self) -> None:
        for text in ('workers = "four"\n', "workers = 0\n", "workers = true\n", 'force = "yes"\n'):
            with self.assertRaises(ConfigurationError, msg=text):
                AnalyzerConfig.from_toml(text)

    def test_config_fills_unset_cli_values(self) -> None:
        args = _cli()
        AnalyzerConfig.from_toml(FULL_CONFIG).merge_with_cli(args)

        self.assertEqual(args.data_dir, "./data")
        self.assertEqual(args.function, "overlap")
        self.assertEqual(args.sort_by, "count")
        self.assertEqual(args.etfs, ["IVW", "IWF"])
        self.assertTrue(args.force)
        self.assertEqual(args.workers, 3)
        self.assertEqual(args.symbol_col, "Ticker")
        self.assertIsNone(args.name_col)

    def test_cli_values_take_priority(self) -> None:
        args = _cli(data_dir="/cli", function="unique", etfs=["VTV"], workers=8, symbol_col="Sym")
        AnalyzerConfig.from_toml(FULL_CONFIG).merge_with_cli(args)

        self.assertEqual(args.data_dir, "/cli")
        self.assertEqual(args.function, "unique")
        self.assertEqual(args.etfs, ["VTV"])
        self.assertEqual(args.workers, 8)
        self.assertEqual(args.symbol_col, "Sym")
        self.assertEqual(args.weight_col, "Weighting")

    def test_from_file_reports_unreadable_path(self) -> None:
        with self.assertRaises(ConfigurationError):
            AnalyzerConfig.from_file("/nonexistent/etf_analyzer.toml")

    def test_default_search_prefers_xdg_location(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            xdg = Path(tmp) / "xdg"
            home = Path(tmp) / "home"
            (xdg / "etf_analyzer").mkdir(parents=True)
            home.mkdir()
            (xdg / "etf_analyzer" / "config.toml").write_text('function = "list"\n', encoding="utf-8")
            (home / ".etf_analyzer.toml").write_text('function = "assets"\n', encoding="utf-8")

            env = {"XDG_CONFIG_HOME": str(xdg), "HOME": str(home)}
            previous = Path.cwd()
            os.chdir(tmp)
            try:
                with mock.patch.dict(os.environ, env):
                    paths = candidate_paths()
                    config = load_default_config()
            finally:
                os.chdir(previous)

            self.assertEqual(paths[0], Path(".etf_analyzer.toml"))
            self.assertEqual(paths[1], xdg / "etf_analyzer" / "config.toml")
            self.assertEqual(paths[2], home / ".etf_analyzer.toml")
            self.assertIsNotNone(config)
            self.assertEqual(config.function, "list")


if __name__ == "__main__":
    unittest.main()
