"""Common enums used across normalization, analysis, and output writing."""

from enum import Enum

from models.errors import ConfigurationError


class SortBy(str, Enum):
    SYMBOL = "symbol"
    COUNT = "count"

    @classmethod
    def parse(cls, value: "str | SortBy | None") -> "SortBy":
        if value is None:
            return cls.SYMBOL
        if isinstance(value, cls):
            return value
        cleaned = str(value).strip().lower()
        for member in cls:
            if member.value == cleaned:
                return member
        raise ConfigurationError(f"Unknown sort order {value!r}; expected one of: symbol, count")


class AnalysisFunction(str, Enum):
    SUMMARY = "summary"
    LIST = "list"
    ASSETS = "assets"
    UNIQUE = "unique"
    OVERLAP = "overlap"
    COMPARE = "compare"
    MAPPING = "mapping"
    EXPORT = "export"

    @classmethod
    def parse(cls, value: "str | AnalysisFunction") -> "AnalysisFunction":
        if isinstance(value, cls):
            return value
        cleaned = str(value).strip().lower()
        for member in cls:
            if member.value == cleaned:
                return member
        choices = ", ".join(member.value for member in cls)
        raise ConfigurationError(f"Unknown function {value!r}; expected one of: {choices}")


class OutputFormat(str, Enum):
    CSV = "csv"
    PARQUET = "parquet"
    JSON = "json"
