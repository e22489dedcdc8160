"""Schema objects for core entities."""

from .analysis import AnalysisResult
from .asset import AssetAggregate
from .holding import CANONICAL_COLUMNS, Holding
from .schema_mapping import SchemaMapping

__all__ = ["AnalysisResult", "AssetAggregate", "CANONICAL_COLUMNS", "Holding", "SchemaMapping"]
