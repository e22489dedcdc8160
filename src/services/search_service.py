"""Bidirectional index between funds and the assets they hold."""

from __future__ import annotations

from collections import defaultdict
from typing import DefaultDict

from transform.combine.portfolio import Portfolio


class HoldingsIndex:
    def __init__(self) -> None:
        self._assets_by_fund: DefaultDict[str, set[str]] = defaultdict(set)
        self._funds_by_asset: DefaultDict[str, set[str]] = defaultdict(set)

    @classmethod
    def from_portfolio(cls, portfolio: Portfolio) -> "HoldingsIndex":
        index = cls()
        for holding in portfolio.holdings():
            index.add_holding(holding.fund, holding.symbol)
        return index

    def add_holding(self, fund: str, symbol: str) -> None:
        self._assets_by_fund[fund].add(symbol)
        self._funds_by_asset[symbol].add(fund)

    def funds(self) -> list[str]:
        return sorted(self._assets_by_fund)

    def assets_of(self, fund: str) -> set[str]:
        return set(self._assets_by_fund.get(fund, set()))

    def funds_holding(self, symbol: str) -> set[str]:
        return set(self._funds_by_asset.get(symbol, set()))

    def shared_assets(self, left: str, right: str) -> set[str]:
        return self.assets_of(left) & self.assets_of(right)
