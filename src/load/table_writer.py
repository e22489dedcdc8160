"""Write analysis tables to CSV, Parquet, or JSON files."""

from __future__ import annotations

from collections.abc import Callable
import logging
from pathlib import Path

import pandas as pd

from models.enums import AnalysisFunction, OutputFormat
from models.errors import ConfigurationError

logger = logging.getLogger(__name__)

_FORMATS_BY_SUFFIX = {
    ".csv": OutputFormat.CSV,
    ".parquet": OutputFormat.PARQUET,
    ".pq": OutputFormat.PARQUET,
    ".json": OutputFormat.JSON,
}

ConfirmOverwrite = Callable[[Path], bool]


def default_format(function: AnalysisFunction | str) -> OutputFormat:
    """Raw portfolio exports default to Parquet, analytical reports to CSV."""
    if AnalysisFunction.parse(function) is AnalysisFunction.EXPORT:
        return OutputFormat.PARQUET
    return OutputFormat.CSV


def resolve_output_path(path: str | Path, function: AnalysisFunction | str) -> Path:
    destination = Path(path)
    if destination.suffix:
        return destination
    return destination.with_name(f"{destination.name}.{default_format(function).value}")


def format_for_path(path: str | Path) -> OutputFormat:
    suffix = Path(path).suffix.lower()
    try:
        return _FORMATS_BY_SUFFIX[suffix]
    except KeyError:
        raise ConfigurationError(
            f"Unsupported output format {suffix!r} for {path}; use .csv, .parquet or .json"
        ) from None


def prompt_overwrite(path: Path) -> bool:
    answer = input(f"File {path} already exists. Overwrite? [y/N]: ")
    return answer.strip().lower() in {"y", "yes"}


def _flatten_list_columns(df: pd.DataFrame, separator: str = ", ") -> pd.DataFrame:
    out = df.copy()
    for column in out.columns:
        if out[column].map(lambda value: isinstance(value, (list, tuple))).any():
            out[column] = out[column].map(
                lambda value: separator.join(map(str, value)) if isinstance(value, (list, tuple)) else value
            )
    return out


def write_table(
    df: pd.DataFrame,
    path: str | Path,
    force: bool = False,
    confirm: ConfirmOverwrite | None = None,
) -> bool:
    """Write ``df`` in the format implied by the extension of ``path``.

    Returns False when the file exists, ``force`` is off, and the overwrite
    was declined.
    """
    destination = Path(path)
    output_format = format_for_path(destination)

    if destination.exists() and not force:
        ask = confirm or prompt_overwrite
        if not ask(destination):
            logger.info("Skipped writing %s: overwrite declined", destination)
            return False

    if destination.parent and not destination.parent.exists():
        destination.parent.mkdir(parents=True, exist_ok=True)

    if output_format is OutputFormat.PARQUET:
        df.to_parquet(destination, engine="pyarrow", index=False)
    elif output_format is OutputFormat.JSON:
        df.to_json(destination, orient="records", indent=2)
    else:
        _flatten_list_columns(df).to_csv(destination, index=False)

    logger.debug("Wrote %d rows to %s (%s)", len(df), destination, output_format.value)
    return True
