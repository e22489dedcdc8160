"""Schema for canonical holding rows."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any

CANONICAL_COLUMNS = ["Fund", "Symbol", "Name", "Weight", "Shares", "RowNumber"]


@dataclass(frozen=True, slots=True)
class Holding:
    fund: str
    symbol: str
    name: str
    weight: float
    shares: float | None
    row_number: int

    @classmethod
    def from_row(cls, row: Any) -> "Holding":
        shares = row.Shares
        if shares is None or (isinstance(shares, float) and math.isnan(shares)):
            shares = None
        return cls(
            fund=str(row.Fund),
            symbol=str(row.Symbol),
            name=str(row.Name),
            weight=float(row.Weight),
            shares=None if shares is None else float(shares),
            row_number=int(row.RowNumber),
        )
