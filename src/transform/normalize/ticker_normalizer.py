"""Normalize asset symbols, synthesizing placeholders for missing ones."""

from __future__ import annotations

import pandas as pd
from pandas.api.types import is_scalar

_MISSING_TOKENS = {"", "n/a"}


def is_missing_symbol(value: object) -> bool:
    # None, NaN, NaT and pd.NA (nullable string columns) all count as missing.
    if is_scalar(value) and pd.isna(value):
        return True
    return str(value).strip().lower() in _MISSING_TOKENS


def synthesize_symbol(fund: str, row_number: int) -> str:
    return f"{fund}-{row_number}"


def normalize_symbol(value: object, fund: str, row_number: int) -> str:
    if is_missing_symbol(value):
        return synthesize_symbol(fund, row_number)
    return str(value).strip()
