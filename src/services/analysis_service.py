"""Dispatch analysis functions over a loaded portfolio."""

from __future__ import annotations

from collections.abc import Iterable
import logging

from models.enums import AnalysisFunction, SortBy
from models.errors import ConfigurationError, MissingComparisonFundsError
from models.schemas import AnalysisResult
from services import asset_service, fund_service
from transform.calc.asset_aggregator import aggregate_assets
from transform.combine.portfolio import Portfolio

logger = logging.getLogger(__name__)


def run_analysis(
    function: AnalysisFunction | str,
    portfolio: Portfolio,
    sort_by: SortBy | str | None = SortBy.SYMBOL,
    compare_funds: Iterable[str] | None = None,
    workers: int | None = None,
) -> AnalysisResult:
    selected = AnalysisFunction.parse(function)
    order = SortBy.parse(sort_by)

    if selected is AnalysisFunction.EXPORT:
        raise ConfigurationError("export writes the portfolio itself and is not an analysis function")
    if selected is AnalysisFunction.SUMMARY:
        result = fund_service.summary(portfolio)
    elif selected is AnalysisFunction.LIST:
        result = fund_service.list_funds(portfolio)
    else:
        funds = [fund for fund in (compare_funds or []) if str(fund).strip()]
        if selected is AnalysisFunction.COMPARE and not funds:
            raise MissingComparisonFundsError()

        aggregates = aggregate_assets(portfolio, workers=workers)
        if selected is AnalysisFunction.ASSETS:
            result = asset_service.assets(aggregates, order)
        elif selected is AnalysisFunction.UNIQUE:
            result = asset_service.unique(aggregates)
        elif selected is AnalysisFunction.OVERLAP:
            result = asset_service.overlap(aggregates, order)
        elif selected is AnalysisFunction.MAPPING:
            result = asset_service.mapping(aggregates, order)
        else:
            result = fund_service.compare(aggregates, funds)

    if result.is_empty:
        logger.info("Function %s produced an empty result", selected.value)
    return result
