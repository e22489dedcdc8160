from __future__ import annotations

from pathlib import Path
import sys
import tempfile
import unittest

import pandas as pd

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "src"))

from extract.holdings_reader import discover_holdings_files, import_table, read_holdings_directory
from load.table_writer import default_format, format_for_path, resolve_output_path, write_table
from models.enums import OutputFormat
from models.errors import ConfigurationError, InvalidFundIdentifier
from services.analysis_service import run_analysis
from transform.combine.portfolio import load_portfolio, portfolio_from_frame

SAMPLES = ROOT / "data" / "samples"
FUNCTIONS = ["summary", "list", "assets", "unique", "overlap", "mapping"]


class TestHoldingsReader(unittest.TestCase):
    def test_discovers_sample_files(self) -> None:
        files = discover_holdings_files(SAMPLES)
        self.assertEqual(list(files), ["IVE", "IVW", "IWF", "VTV"])

    def test_keeps_literal_na_symbols(self) -> None:
        extracts = read_holdings_directory(SAMPLES, workers=2)
        self.assertIn("n/a", extracts["IVW"]["Symbol"].tolist())

        portfolio = load_portfolio(extracts, workers=2)
        self.assertIn("IVW-3", portfolio.frame["Symbol"].tolist())

    def test_missing_directory_is_configuration_error(self) -> None:
        with self.assertRaises(ConfigurationError):
            discover_holdings_files(SAMPLES / "does-not-exist")

    def test_duplicate_fund_files_are_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            for name in ("ivw-etf-holdings.csv", "IVW-etf-holdings.csv"):
                (Path(tmp) / name).write_text("No.,Symbol,Name,% Weight\n", encoding="utf-8")
            if len(list(Path(tmp).iterdir())) < 2:
                self.skipTest("case-insensitive filesystem")
            with self.assertRaises(InvalidFundIdentifier):
                discover_holdings_files(tmp)

    def test_unknown_import_format(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "portfolio.xlsx"
            path.write_bytes(b"")
            with self.assertRaises(ConfigurationError):
                import_table(path)


class TestExportImportRoundTrip(unittest.TestCase):
    def _assert_round_trip(self, suffix: str) -> None:
        original = load_portfolio(read_holdings_directory(SAMPLES), workers=2)
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / f"portfolio{suffix}"
            self.assertTrue(write_table(original.frame, path))
            restored = portfolio_from_frame(import_table(path))

        for function in FUNCTIONS:
            expected = run_analysis(function, original)
            actual = run_analysis(function, restored)
            self.assertEqual(actual.summary, expected.summary, function)
            self.assertEqual(list(actual.table.columns), list(expected.table.columns), function)
            self.assertEqual(actual.table.to_dict("records"), expected.table.to_dict("records"), function)

        compare_expected = run_analysis("compare", original, compare_funds=["IVE", "IVW"])
        compare_actual = run_analysis("compare", restored, compare_funds=["IVE", "IVW"])
        self.assertEqual(compare_actual.table.to_dict("records"), compare_expected.table.to_dict("records"))

    def test_parquet_round_trip(self) -> None:
        self._assert_round_trip(".parquet")

    def test_csv_round_trip(self) -> None:
        self._assert_round_trip(".csv")

    def test_json_round_trip(self) -> None:
        self._assert_round_trip(".json")


class TestTableWriter(unittest.TestCase):
    def test_default_formats(self) -> None:
        self.assertIs(default_format("export"), OutputFormat.PARQUET)
        self.assertIs(default_format("overlap"), OutputFormat.CSV)
        self.assertEqual(resolve_output_path("out/portfolio", "export"), Path("out/portfolio.parquet"))
        self.assertEqual(resolve_output_path("out/overlap", "overlap"), Path("out/overlap.csv"))
        self.assertEqual(resolve_output_path("out/overlap.json", "overlap"), Path("out/overlap.json"))

    def test_unknown_output_extension(self) -> None:
        with self.assertRaises(ConfigurationError):
            format_for_path("report.xlsx")

    def test_existing_file_respects_confirmation_and_force(self) -> None:
        df = pd.DataFrame({"Fund": ["IVW"]})
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "list.csv"
            path.write_text("old\n", encoding="utf-8")

            self.assertFalse(write_table(df, path, confirm=lambda _: False))
            self.assertEqual(path.read_text(encoding="utf-8"), "old\n")

            self.assertTrue(write_table(df, path, confirm=lambda _: True))
            self.assertEqual(pd.read_csv(path)["Fund"].tolist(), ["IVW"])

            path.write_text("old\n", encoding="utf-8")
            self.assertTrue(write_table(df, path, force=True, confirm=lambda _: self.fail("prompted")))
            self.assertEqual(pd.read_csv(path)["Fund"].tolist(), ["IVW"])

    def test_csv_flattens_list_cells(self) -> None:
        result = run_analysis("mapping", load_portfolio(read_holdings_directory(SAMPLES), workers=1))
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "mapping.csv"
            self.assertTrue(write_table(result.table, path))
            written = pd.read_csv(path, keep_default_na=False)

        aapl = written[written["Symbol"] == "AAPL"].iloc[0]
        self.assertEqual(aapl["Funds"], "IVW, IWF")


if __name__ == "__main__":
    unittest.main()
