"""Schema for per-symbol aggregates derived from a portfolio."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True, slots=True)
class AssetAggregate:
    symbol: str
    name: str
    per_fund_weight: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "per_fund_weight", MappingProxyType(dict(self.per_fund_weight)))

    @property
    def funds(self) -> tuple[str, ...]:
        return tuple(sorted(self.per_fund_weight))

    @property
    def fund_count(self) -> int:
        return len(self.per_fund_weight)

    def weight_for(self, fund: str) -> float | None:
        return self.per_fund_weight.get(fund)
