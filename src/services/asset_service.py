"""Asset-level analysis: assets, unique, overlap, and mapping."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

import pandas as pd

from models.enums import SortBy
from models.schemas import AnalysisResult, AssetAggregate
from transform.calc.sort_policy import sort_assets

ASSETS_COLUMNS = ["Symbol", "Name", "FundCount", "Funds"]
UNIQUE_COLUMNS = ["Symbol", "Name", "Weight", "Fund"]
OVERLAP_COLUMNS = ["Symbol", "Name", "FundCount", "Weight", "Fund"]
MAPPING_COLUMNS = ["Symbol", "Name", "FundCount", "Funds"]
HISTOGRAM_COLUMNS = ["FundCount", "AssetCount"]

FUND_SEPARATOR = ", "


def _frame(rows: list[dict[str, object]], columns: list[str]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns)


def _fund_total(aggregates: Sequence[AssetAggregate]) -> int:
    return len({fund for asset in aggregates for fund in asset.per_fund_weight})


def assets(aggregates: Sequence[AssetAggregate], sort_by: SortBy | str = SortBy.SYMBOL) -> AnalysisResult:
    rows = [
        {
            "Symbol": asset.symbol,
            "Name": asset.name,
            "FundCount": asset.fund_count,
            "Funds": FUND_SEPARATOR.join(asset.funds),
        }
        for asset in sort_assets(aggregates, sort_by)
    ]
    summary = f"Found {len(rows)} assets across {_fund_total(aggregates)} ETFs"
    return AnalysisResult(function="assets", table=_frame(rows, ASSETS_COLUMNS), summary=summary)


def unique(aggregates: Sequence[AssetAggregate]) -> AnalysisResult:
    rows: list[dict[str, object]] = []
    for asset in sort_assets(aggregates, SortBy.SYMBOL):
        if asset.fund_count != 1:
            continue
        (fund,) = asset.funds
        rows.append({"Symbol": asset.symbol, "Name": asset.name, "Weight": asset.weight_for(fund), "Fund": fund})
    summary = f"Found {len(rows)} unique assets (appear in only one ETF)"
    return AnalysisResult(function="unique", table=_frame(rows, UNIQUE_COLUMNS), summary=summary)


def overlap(aggregates: Sequence[AssetAggregate], sort_by: SortBy | str = SortBy.SYMBOL) -> AnalysisResult:
    """One row per (symbol, fund) for symbols held by more than one fund.

    Rows of one symbol stay adjacent in every sort order.
    """
    rows: list[dict[str, object]] = []
    symbols = 0
    for asset in sort_assets(aggregates, sort_by):
        if asset.fund_count <= 1:
            continue
        symbols += 1
        for fund in asset.funds:
            rows.append(
                {
                    "Symbol": asset.symbol,
                    "Name": asset.name,
                    "FundCount": asset.fund_count,
                    "Weight": asset.weight_for(fund),
                    "Fund": fund,
                }
            )
    summary = f"Found {symbols} overlapping assets (appear in multiple ETFs)"
    return AnalysisResult(function="overlap", table=_frame(rows, OVERLAP_COLUMNS), summary=summary)


def fund_count_histogram(aggregates: Sequence[AssetAggregate]) -> pd.DataFrame:
    counts = Counter(asset.fund_count for asset in aggregates)
    rows = [{"FundCount": fund_count, "AssetCount": counts[fund_count]} for fund_count in sorted(counts)]
    return _frame(rows, HISTOGRAM_COLUMNS)


def mapping(aggregates: Sequence[AssetAggregate], sort_by: SortBy | str = SortBy.SYMBOL) -> AnalysisResult:
    rows = [
        {
            "Symbol": asset.symbol,
            "Name": asset.name,
            "FundCount": asset.fund_count,
            "Funds": list(asset.funds),
        }
        for asset in sort_assets(aggregates, sort_by)
    ]
    histogram = fund_count_histogram(aggregates)

    lines = [f"Asset to ETF mapping: {len(rows)} assets across {_fund_total(aggregates)} ETFs"]
    for bucket in histogram.itertuples(index=False):
        lines.append(f"  Held by {bucket.FundCount} ETF(s): {bucket.AssetCount} assets")
    return AnalysisResult(
        function="mapping",
        table=_frame(rows, MAPPING_COLUMNS),
        summary="\n".join(lines),
        histogram=histogram,
    )
