from __future__ import annotations

from pathlib import Path
import sys
import unittest

import pandas as pd

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "src"))

from models.enums import AnalysisFunction
from models.errors import ConfigurationError, MissingComparisonFundsError
from services.analysis_service import run_analysis
from transform.combine.portfolio import Portfolio, filter_funds, load_portfolio


def _raw(rows: list[tuple[str, str, str]]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"No.": str(i), "Symbol": symbol, "Name": name, "% Weight": weight, "Shares": "100"}
            for i, (symbol, name, weight) in enumerate(rows, start=1)
        ]
    )


def _portfolio() -> Portfolio:
    extracts = {
        "IVW": _raw([("AAPL", "Apple Inc.", "11.28%"), ("NVDA", "NVIDIA Corp", "9.50%"), ("n/a", "Cash", "0.12%")]),
        "IWF": _raw([("AAPL", "Apple Inc", "5.66%"), ("AMZN", "Amazon.com Inc", "4.85%")]),
        "VTV": _raw([("JPM", "JPMorgan Chase & Co.", "3.10%"), ("XOM", "Exxon Mobil Corp", "2.40%")]),
        "IVE": _raw([("MSFT", "Microsoft Corp", "7.23%"), ("JPM", "JPMorgan Chase & Co", "1.90%")]),
    }
    return load_portfolio(extracts, workers=2)


class TestAnalysisFunctions(unittest.TestCase):
    def test_overlap_rows_and_summary(self) -> None:
        portfolio = filter_funds(_portfolio(), ["IVW", "IWF", "VTV"])
        result = run_analysis("overlap", portfolio)

        self.assertEqual(result.summary, "Found 1 overlapping assets (appear in multiple ETFs)")
        self.assertEqual(list(result.table.columns), ["Symbol", "Name", "FundCount", "Weight", "Fund"])
        rows = list(result.table[["Symbol", "Fund", "Weight", "FundCount"]].itertuples(index=False, name=None))
        self.assertEqual(rows, [("AAPL", "IVW", 11.28, 2), ("AAPL", "IWF", 5.66, 2)])

    def test_overlap_by_count_keeps_symbol_rows_adjacent(self) -> None:
        result = run_analysis("overlap", _portfolio(), sort_by="count")
        self.assertEqual(result.table["Symbol"].tolist(), ["AAPL", "AAPL", "JPM", "JPM"])
        self.assertEqual(result.table["Fund"].tolist(), ["IVW", "IWF", "IVE", "VTV"])

    def test_compare_uses_not_held_sentinel(self) -> None:
        result = run_analysis(AnalysisFunction.COMPARE, _portfolio(), compare_funds=["IVE", "IVW", "IWF"])

        self.assertEqual(list(result.table.columns), ["Symbol", "IVE", "IVW", "IWF"])
        msft = result.table[result.table["Symbol"] == "MSFT"].iloc[0].tolist()
        self.assertEqual(msft, ["MSFT", "7.23%", "N/A", "N/A"])
        aapl = result.table[result.table["Symbol"] == "AAPL"].iloc[0].tolist()
        self.assertEqual(aapl, ["AAPL", "N/A", "11.28%", "5.66%"])
        self.assertNotIn("XOM", result.table["Symbol"].tolist())
        self.assertTrue(result.summary.startswith("Compared "))

    def test_compare_without_funds_is_an_error(self) -> None:
        for funds in (None, [], ["  "]):
            with self.assertRaises(MissingComparisonFundsError) as ctx:
                run_analysis("compare", _portfolio(), compare_funds=funds)
            self.assertEqual(ctx.exception.function, "compare")
            self.assertEqual(ctx.exception.parameter, "etfs")

    def test_unique_and_overlap_partition_assets(self) -> None:
        portfolio = _portfolio()
        all_symbols = set(run_analysis("assets", portfolio).table["Symbol"])
        unique_symbols = set(run_analysis("unique", portfolio).table["Symbol"])
        overlap_symbols = set(run_analysis("overlap", portfolio).table["Symbol"])

        self.assertFalse(unique_symbols & overlap_symbols)
        self.assertEqual(unique_symbols | overlap_symbols, all_symbols)
        self.assertIn("IVW-3", unique_symbols)

    def test_assets_table_and_sort(self) -> None:
        result = run_analysis("assets", _portfolio(), sort_by="count")

        self.assertEqual(result.summary, "Found 7 assets across 4 ETFs")
        self.assertEqual(result.table["Symbol"].tolist()[:2], ["AAPL", "JPM"])
        jpm = result.table[result.table["Symbol"] == "JPM"].iloc[0]
        self.assertEqual(jpm["Funds"], "IVE, VTV")
        self.assertEqual(jpm["Name"], "JPMorgan Chase & Co")

    def test_unique_rows(self) -> None:
        result = run_analysis("unique", _portfolio())
        self.assertEqual(result.summary, "Found 5 unique assets (appear in only one ETF)")
        self.assertEqual(result.table["Symbol"].tolist(), ["AMZN", "IVW-3", "MSFT", "NVDA", "XOM"])
        self.assertEqual(result.table.set_index("Symbol").loc["MSFT", "Fund"], "IVE")

    def test_mapping_histogram(self) -> None:
        result = run_analysis("mapping", _portfolio())

        self.assertIsNotNone(result.histogram)
        self.assertEqual(result.histogram.to_dict("records"), [{"FundCount": 1, "AssetCount": 5}, {"FundCount": 2, "AssetCount": 2}])
        self.assertEqual(
            result.summary.splitlines(),
            [
                "Asset to ETF mapping: 7 assets across 4 ETFs",
                "  Held by 1 ETF(s): 5 assets",
                "  Held by 2 ETF(s): 2 assets",
            ],
        )
        aapl = result.table[result.table["Symbol"] == "AAPL"].iloc[0]
        self.assertEqual(aapl["Funds"], ["IVW", "IWF"])

    def test_summary_over_filtered_funds(self) -> None:
        result = run_analysis("summary", filter_funds(_portfolio(), ["IWF", "IVW"]))

        self.assertEqual(result.table["Fund"].tolist(), ["IVW", "IWF"])
        self.assertEqual(result.table["AssetCount"].tolist(), [3, 2])
        self.assertEqual(
            result.summary.splitlines(),
            [
                "Portfolio Summary:",
                "ETFs: 2",
                "Total holdings: 5",
                "Largest ETF: IVW (3 assets)",
                "Smallest ETF: IWF (2 assets)",
            ],
        )

    def test_summary_ties_pick_first_fund(self) -> None:
        result = run_analysis("summary", filter_funds(_portfolio(), ["VTV", "IVE", "IWF"]))
        self.assertIn("Largest ETF: IVE (2 assets)", result.summary)
        self.assertIn("Smallest ETF: IVE (2 assets)", result.summary)

    def test_list_funds(self) -> None:
        result = run_analysis("list", _portfolio())
        self.assertEqual(result.summary, "Found 4 ETFs: IVE, IVW, IWF, VTV")
        self.assertEqual(result.table["Fund"].tolist(), ["IVE", "IVW", "IWF", "VTV"])

    def test_unknown_funds_give_empty_results(self) -> None:
        empty = filter_funds(_portfolio(), ["QQQ"])

        overlap = run_analysis("overlap", empty)
        self.assertTrue(overlap.is_empty)
        self.assertEqual(overlap.summary, "Found 0 overlapping assets (appear in multiple ETFs)")

        listed = run_analysis("list", empty)
        self.assertEqual(listed.summary, "Found 0 ETFs")

        summary = run_analysis("summary", empty)
        self.assertTrue(summary.is_empty)
        self.assertIn("ETFs: 0", summary.summary)

        compare = run_analysis("compare", empty, compare_funds=["QQQ"])
        self.assertTrue(compare.is_empty)
        self.assertEqual(list(compare.table.columns), ["Symbol", "QQQ"])

    def test_export_is_not_an_analysis(self) -> None:
        with self.assertRaises(ConfigurationError):
            run_analysis("export", _portfolio())
        with self.assertRaises(ConfigurationError):
            run_analysis("returns", _portfolio())


if __name__ == "__main__":
    unittest.main()
