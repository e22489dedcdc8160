"""Combine normalized fund batches into one portfolio relation."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
import logging
import os

import pandas as pd

from models.errors import NormalizationError
from models.schemas import CANONICAL_COLUMNS, Holding, SchemaMapping
from transform.normalize.fund_identifier import validate_fund_identifier
from transform.normalize.holdings_normalizer import empty_holdings_frame, normalize_holdings
from transform.normalize.weight_parser import parse_weight
from utils.validation import require_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Portfolio:
    """Canonical holdings of every loaded fund, merged in fund-name order."""

    frame: pd.DataFrame
    requested_funds: tuple[str, ...] = ()
    unmatched_funds: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.frame)

    @property
    def is_empty(self) -> bool:
        return self.frame.empty

    @property
    def funds(self) -> list[str]:
        return sorted(self.frame["Fund"].unique().tolist())

    def holdings(self) -> Iterator[Holding]:
        for row in self.frame.itertuples(index=False):
            yield Holding.from_row(row)


def default_worker_count() -> int:
    return os.cpu_count() or 1


def _batch_fund(batch: pd.DataFrame) -> str:
    return str(batch["Fund"].iloc[0])


def merge_batches(batches: Iterable[pd.DataFrame]) -> Portfolio:
    """Concatenate normalized batches in ascending fund-name order.

    The order batches arrive in (e.g. worker completion order) does not
    affect the result.
    """
    non_empty = [batch for batch in batches if not batch.empty]
    if not non_empty:
        return Portfolio(frame=empty_holdings_frame())

    ordered = sorted(non_empty, key=_batch_fund)
    frame = pd.concat([batch[CANONICAL_COLUMNS] for batch in ordered], ignore_index=True)
    return Portfolio(frame=frame)


def filter_funds(portfolio: Portfolio, funds: Iterable[str] | None) -> Portfolio:
    """Restrict ``portfolio`` to ``funds``; an empty or absent set is the identity.

    Funds that are not loaded are not an error: they match zero rows and are
    recorded in ``unmatched_funds``. A result with no rows at all is an empty
    portfolio, not an exception.
    """
    requested = [str(fund).strip() for fund in (funds or []) if str(fund).strip()]
    if not requested:
        return portfolio

    requested = list(dict.fromkeys(requested))
    loaded = set(portfolio.frame["Fund"].unique().tolist())
    unmatched = tuple(fund for fund in requested if fund not in loaded)
    if unmatched:
        logger.warning("Requested funds not found in portfolio: %s", ", ".join(unmatched))

    frame = portfolio.frame[portfolio.frame["Fund"].isin(requested)].reset_index(drop=True)
    if frame.empty:
        logger.warning("Fund filter %s matched no holdings", ", ".join(requested))
    return Portfolio(frame=frame, requested_funds=tuple(requested), unmatched_funds=unmatched)


def load_portfolio(
    extracts: Mapping[str, pd.DataFrame],
    mapping: SchemaMapping | None = None,
    workers: int | None = None,
) -> Portfolio:
    """Normalize each fund extract on a worker pool and merge the results.

    Loading is fail-fast: if any fund fails to normalize nothing is returned,
    and when several fail the error for the alphabetically first fund is raised.
    """
    mapping = mapping or SchemaMapping()
    max_workers = max(1, workers or default_worker_count())

    batches: dict[str, pd.DataFrame] = {}
    errors: dict[str, NormalizationError] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_fund = {
            executor.submit(normalize_holdings, raw_df, fund, mapping): fund for fund, raw_df in extracts.items()
        }
        for future in as_completed(future_to_fund):
            fund = future_to_fund[future]
            try:
                batches[fund] = future.result()
            except NormalizationError as exc:
                errors[fund] = exc

    if errors:
        first = min(errors, key=str)
        raise errors[first]

    portfolio = merge_batches(batches.values())
    logger.info("Loaded %d funds with %d holdings (workers=%d)", len(batches), len(portfolio), max_workers)
    return portfolio


def portfolio_from_frame(df: pd.DataFrame) -> Portfolio:
    """Rebuild a portfolio from a previously exported canonical table."""
    require_columns(df, CANONICAL_COLUMNS, fund="<imported>")
    if df.empty:
        return Portfolio(frame=empty_holdings_frame())

    frame = df[CANONICAL_COLUMNS].copy()
    for column in ("Fund", "Symbol", "Name"):
        frame[column] = frame[column].fillna("").astype(str)
    frame["Fund"] = frame["Fund"].map(validate_fund_identifier)
    row_numbers = pd.to_numeric(frame["RowNumber"], errors="coerce").astype("float64")
    if not row_numbers.mod(1).eq(0).all():
        raise NormalizationError("Imported table has missing or non-integer RowNumber values")
    frame["RowNumber"] = row_numbers.astype("int64")
    frame["Weight"] = [
        parse_weight(value, fund, row_number)
        for value, fund, row_number in zip(frame["Weight"], frame["Fund"], frame["RowNumber"])
    ]
    frame["Weight"] = frame["Weight"].astype("float64")
    frame["Shares"] = pd.to_numeric(frame["Shares"], errors="coerce").astype("float64")

    # Re-split and merge so the fund ordering holds for hand-edited imports too.
    batches = [group for _, group in frame.groupby("Fund", sort=False)]
    return merge_batches(batches)
