"""Schema for analysis function results."""

from dataclasses import dataclass

import pandas as pd


@dataclass(slots=True)
class AnalysisResult:
    function: str
    table: pd.DataFrame
    summary: str
    histogram: pd.DataFrame | None = None

    @property
    def is_empty(self) -> bool:
        return self.table.empty

    @property
    def row_count(self) -> int:
        return len(self.table)
