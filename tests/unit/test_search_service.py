from __future__ import annotations

from pathlib import Path
import sys
import unittest

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "src"))

from extract.holdings_reader import read_holdings_directory
from services.search_service import HoldingsIndex
from transform.combine.portfolio import load_portfolio


class TestHoldingsIndex(unittest.TestCase):
    def setUp(self) -> None:
        portfolio = load_portfolio(read_holdings_directory(ROOT / "data" / "samples"), workers=2)
        self.index = HoldingsIndex.from_portfolio(portfolio)

    def test_fund_to_assets(self) -> None:
        self.assertEqual(self.index.funds(), ["IVE", "IVW", "IWF", "VTV"])
        self.assertEqual(self.index.assets_of("IVW"), {"AAPL", "NVDA", "IVW-3"})
        self.assertEqual(self.index.assets_of("QQQ"), set())

    def test_asset_to_funds(self) -> None:
        self.assertEqual(self.index.funds_holding("JPM"), {"IVE", "VTV"})
        self.assertEqual(self.index.funds_holding("TSLA"), set())

    def test_shared_assets(self) -> None:
        self.assertEqual(self.index.shared_assets("IVW", "IWF"), {"AAPL"})
        self.assertEqual(self.index.shared_assets("IVW", "VTV"), set())

    def test_lookups_do_not_mutate_index(self) -> None:
        self.index.assets_of("QQQ").add("X")
        self.assertNotIn("QQQ", self.index.funds())


if __name__ == "__main__":
    unittest.main()
