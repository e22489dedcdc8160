"""Exception types raised by the holdings engine."""

from __future__ import annotations


class AnalyzerError(Exception):
    """Base class for every error the analyzer reports to its caller."""


class ConfigurationError(AnalyzerError, ValueError):
    pass


class NormalizationError(AnalyzerError, ValueError):
    """A raw fund extract could not be turned into canonical holdings."""


class MissingColumnError(NormalizationError):
    def __init__(self, fund: str, column: str) -> None:
        self.fund = fund
        self.column = column
        super().__init__(f"Missing required column {column!r} in holdings for fund {fund!r}")


class WeightParseError(NormalizationError):
    def __init__(self, fund: str, row_number: int, raw_value: object) -> None:
        self.fund = fund
        self.row_number = row_number
        self.raw_value = raw_value
        super().__init__(f"Cannot parse weight {raw_value!r} for fund {fund!r} at row {row_number}")


class RowNumberError(NormalizationError):
    """A row number needed for symbol synthesis is unusable.

    ``position`` is the 1-based position of the offending row in the extract.
    """

    def __init__(self, fund: str, position: int, raw_value: object, reason: str) -> None:
        self.fund = fund
        self.position = position
        self.raw_value = raw_value
        self.reason = reason
        super().__init__(f"Unusable row number {raw_value!r} for fund {fund!r} at position {position}: {reason}")


class InvalidFundIdentifier(NormalizationError):
    def __init__(self, value: object, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid fund identifier {value!r}: {reason}")


class MissingComparisonFundsError(AnalyzerError, ValueError):
    def __init__(self, function: str = "compare", parameter: str = "etfs") -> None:
        self.function = function
        self.parameter = parameter
        super().__init__(
            f"Function {function!r} requires a non-empty fund list; pass it with --{parameter} (e.g. IVW,IWF)"
        )
