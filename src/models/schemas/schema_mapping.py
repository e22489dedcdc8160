"""Column mapping from raw holdings extracts to the canonical schema."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class SchemaMapping:
    symbol_column: str = "Symbol"
    name_column: str = "Name"
    weight_column: str = "% Weight"
    shares_column: str = "Shares"
    number_column: str = "No."

    @property
    def required_columns(self) -> tuple[str, str, str]:
        return (self.symbol_column, self.name_column, self.weight_column)

    def with_overrides(self, **columns: str | None) -> "SchemaMapping":
        """Return a copy with every non-empty override applied.

        Keys are the field names without the ``_column`` suffix, e.g.
        ``mapping.with_overrides(symbol="Ticker", weight="Weighting")``.
        """
        changes: dict[str, str] = {}
        for key, value in columns.items():
            if value is None or not str(value).strip():
                continue
            attr = f"{key}_column"
            if attr not in self.__dataclass_fields__:
                raise TypeError(f"Unknown schema column override: {key}")
            changes[attr] = str(value)
        return replace(self, **changes) if changes else self
