"""Validation helpers for dataframe schemas."""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from models.errors import MissingColumnError


def require_columns(df: pd.DataFrame, required: Iterable[str], fund: str) -> None:
    present = set(df.columns)
    for column in required:
        if column not in present:
            raise MissingColumnError(fund, column)
