"""Fund-level analysis: summary, list, and side-by-side weight comparison."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import pandas as pd

from models.errors import MissingComparisonFundsError
from models.schemas import AnalysisResult, AssetAggregate
from services.search_service import HoldingsIndex
from transform.combine.portfolio import Portfolio

SUMMARY_COLUMNS = ["Fund", "AssetCount", "Assets"]
LIST_COLUMNS = ["Fund"]
NOT_HELD = "N/A"


def format_weight(weight: float) -> str:
    return f"{weight:.2f}%"


def summary(portfolio: Portfolio) -> AnalysisResult:
    """Per-fund asset counts; largest and smallest are over the funds present."""
    index = HoldingsIndex.from_portfolio(portfolio)
    rows = [
        {"Fund": fund, "AssetCount": len(index.assets_of(fund)), "Assets": ", ".join(sorted(index.assets_of(fund)))}
        for fund in index.funds()
    ]
    table = pd.DataFrame(rows, columns=SUMMARY_COLUMNS) if rows else pd.DataFrame(columns=SUMMARY_COLUMNS)

    lines = ["Portfolio Summary:", f"ETFs: {len(rows)}", f"Total holdings: {len(portfolio)}"]
    if rows:
        # min() keeps the first fund on ties and rows are already fund-ordered.
        largest = min(rows, key=lambda row: -row["AssetCount"])
        smallest = min(rows, key=lambda row: row["AssetCount"])
        lines.append(f"Largest ETF: {largest['Fund']} ({largest['AssetCount']} assets)")
        lines.append(f"Smallest ETF: {smallest['Fund']} ({smallest['AssetCount']} assets)")
    return AnalysisResult(function="summary", table=table, summary="\n".join(lines))


def list_funds(portfolio: Portfolio) -> AnalysisResult:
    funds = portfolio.funds
    table = pd.DataFrame({"Fund": funds}, columns=LIST_COLUMNS)
    text = f"Found {len(funds)} ETFs: {', '.join(funds)}" if funds else "Found 0 ETFs"
    return AnalysisResult(function="list", table=table, summary=text)


def compare(aggregates: Sequence[AssetAggregate], funds: Iterable[str] | None) -> AnalysisResult:
    """Weights of every symbol held by at least one of ``funds``, one column per fund.

    Cells for funds that do not hold the symbol read ``N/A`` rather than 0.
    """
    requested = list(dict.fromkeys(str(fund).strip() for fund in (funds or []) if str(fund).strip()))
    if not requested:
        raise MissingComparisonFundsError()

    columns = ["Symbol", *requested]
    rows: list[dict[str, object]] = []
    for asset in sorted(aggregates, key=lambda item: item.symbol):
        if not any(fund in asset.per_fund_weight for fund in requested):
            continue
        row: dict[str, object] = {"Symbol": asset.symbol}
        for fund in requested:
            weight = asset.weight_for(fund)
            row[fund] = NOT_HELD if weight is None else format_weight(weight)
        rows.append(row)

    table = pd.DataFrame(rows, columns=columns) if rows else pd.DataFrame(columns=columns)
    text = f"Compared {len(rows)} assets across {len(requested)} ETFs: {', '.join(requested)}"
    return AnalysisResult(function="compare", table=table, summary=text)
