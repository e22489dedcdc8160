"""Shared ordering rules for asset-level outputs."""

from __future__ import annotations

from collections.abc import Iterable

from models.enums import SortBy
from models.schemas import AssetAggregate


def sort_assets(aggregates: Iterable[AssetAggregate], sort_by: SortBy | str | None = SortBy.SYMBOL) -> list[AssetAggregate]:
    """Order by symbol, or by descending fund count with symbol as tie-break."""
    order = SortBy.parse(sort_by)
    if order is SortBy.COUNT:
        return sorted(aggregates, key=lambda asset: (-asset.fund_count, asset.symbol))
    return sorted(aggregates, key=lambda asset: asset.symbol)
