"""Turn one raw fund extract into canonical holding rows."""

from __future__ import annotations

import logging

import pandas as pd

from models.errors import MissingColumnError, RowNumberError
from models.schemas import CANONICAL_COLUMNS, SchemaMapping
from transform.normalize.fund_identifier import validate_fund_identifier
from transform.normalize.ticker_normalizer import is_missing_symbol, normalize_symbol
from transform.normalize.weight_parser import parse_weight
from utils.validation import require_columns

logger = logging.getLogger(__name__)


def empty_holdings_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Fund": pd.Series(dtype="object"),
            "Symbol": pd.Series(dtype="object"),
            "Name": pd.Series(dtype="object"),
            "Weight": pd.Series(dtype="float64"),
            "Shares": pd.Series(dtype="float64"),
            "RowNumber": pd.Series(dtype="int64"),
        }
    )[CANONICAL_COLUMNS]


def _parse_row_number(value: object) -> float:
    try:
        return float(str(value).strip())
    except ValueError:
        return float("nan")


def _first_flagged(flags: pd.Series, raw: pd.Series, positions: pd.Series) -> tuple[int, object]:
    mask = flags.to_numpy()
    return int(positions[mask].iloc[0]), raw[mask].iloc[0]


def _row_numbers(raw_df: pd.DataFrame, mapping: SchemaMapping, fund: str, needs_synthesis: bool) -> pd.Series:
    """Resolve one row number per row.

    When a symbol has to be synthesized the number column must hold a unique,
    finite integer for every row, else ``RowNumberError``. Otherwise an unusable
    number column is replaced by 1-based positions for the whole fund, never
    mixed row by row.
    """
    positions = pd.Series(range(1, len(raw_df) + 1), index=raw_df.index, dtype="int64")
    if mapping.number_column not in raw_df.columns:
        if needs_synthesis:
            raise MissingColumnError(fund, mapping.number_column)
        return positions

    raw_numbers = raw_df[mapping.number_column]
    numbers = pd.Series([_parse_row_number(value) for value in raw_numbers.tolist()], index=raw_df.index, dtype="float64")
    # NaN and +/-inf give NaN under mod, fractions a non-zero remainder.
    integral = numbers.mod(1).eq(0)

    if needs_synthesis:
        if not integral.all():
            position, raw_value = _first_flagged(~integral, raw_numbers, positions)
            raise RowNumberError(fund, position, raw_value, "row number is missing or not a finite integer")
        duplicated = numbers.duplicated(keep="first")
        if duplicated.any():
            position, raw_value = _first_flagged(duplicated, raw_numbers, positions)
            raise RowNumberError(fund, position, raw_value, "duplicate row number")
        return numbers.astype("int64")

    if not integral.all():
        logger.debug("Ignoring unusable %r column for fund=%s; using row positions", mapping.number_column, fund)
        return positions
    return numbers.astype("int64")


def _shares(raw_df: pd.DataFrame, mapping: SchemaMapping) -> pd.Series:
    if mapping.shares_column not in raw_df.columns:
        return pd.Series(float("nan"), index=raw_df.index, dtype="float64")
    cleaned = raw_df[mapping.shares_column].map(lambda value: str(value).replace(",", "").strip())
    return pd.to_numeric(cleaned, errors="coerce").astype("float64")


def normalize_holdings(raw_df: pd.DataFrame, fund: str, mapping: SchemaMapping | None = None) -> pd.DataFrame:
    """Normalize a raw extract for ``fund`` into ``Fund, Symbol, Name, Weight, Shares, RowNumber``.

    Raises ``MissingColumnError`` when a mapped column is absent,
    ``WeightParseError`` when a weight is not numeric once ``%`` is stripped
    and ``RowNumberError`` when a synthesized symbol would need a missing,
    fractional or repeated row number.
    The input frame is never modified.
    """
    mapping = mapping or SchemaMapping()
    fund = validate_fund_identifier(fund)
    require_columns(raw_df, mapping.required_columns, fund)

    if raw_df.empty:
        return empty_holdings_frame()

    raw_symbols = raw_df[mapping.symbol_column]
    missing = raw_symbols.map(is_missing_symbol)
    row_numbers = _row_numbers(raw_df, mapping, fund, needs_synthesis=bool(missing.any()))

    symbols = [
        normalize_symbol(value, fund, int(row_number))
        for value, row_number in zip(raw_symbols.tolist(), row_numbers.tolist())
    ]
    weights = [
        parse_weight(value, fund, int(row_number))
        for value, row_number in zip(raw_df[mapping.weight_column].tolist(), row_numbers.tolist())
    ]

    normalized = pd.DataFrame(
        {
            "Fund": fund,
            "Symbol": symbols,
            "Name": raw_df[mapping.name_column].fillna("").astype(str).str.strip().tolist(),
            "Weight": weights,
            "Shares": _shares(raw_df, mapping).tolist(),
            "RowNumber": row_numbers.tolist(),
        }
    )
    normalized["Weight"] = normalized["Weight"].astype("float64")
    normalized["Shares"] = normalized["Shares"].astype("float64")
    normalized["RowNumber"] = normalized["RowNumber"].astype("int64")

    synthesized = int(missing.sum())
    if synthesized:
        logger.debug("Synthesized %d symbols for fund=%s", synthesized, fund)
    logger.debug("Normalized fund=%s rows=%d", fund, len(normalized))
    return normalized[CANONICAL_COLUMNS]
