"""Read raw ETF holdings extracts and previously exported tables from disk."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
import logging
from pathlib import Path

import pandas as pd

from models.errors import ConfigurationError, InvalidFundIdentifier
from transform.normalize.fund_identifier import HOLDINGS_FILE_SUFFIX, fund_from_filename

logger = logging.getLogger(__name__)

HOLDINGS_GLOB = f"*{HOLDINGS_FILE_SUFFIX}.csv"


def discover_holdings_files(data_dir: str | Path) -> dict[str, Path]:
    """Map fund identifier to its ``{fund}-etf-holdings.csv`` file."""
    directory = Path(data_dir)
    if not directory.is_dir():
        raise ConfigurationError(f"Data directory not found: {directory}")

    files: dict[str, Path] = {}
    for path in sorted(directory.iterdir()):
        if not path.is_file() or path.suffix.lower() != ".csv":
            continue
        fund = fund_from_filename(path)
        if fund is None:
            logger.debug("Skipping %s: name does not match %s", path.name, HOLDINGS_GLOB)
            continue
        if fund in files:
            raise InvalidFundIdentifier(fund, f"duplicate holdings files {files[fund].name} and {path.name}")
        files[fund] = path
    return files


def read_raw_holdings(path: str | Path) -> pd.DataFrame:
    # Everything as text and no NA coercion: "n/a" symbols and "5.66%" weights
    # must reach the normalizer untouched.
    return pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)


def read_holdings_directory(data_dir: str | Path, workers: int | None = None) -> dict[str, pd.DataFrame]:
    files = discover_holdings_files(data_dir)
    if not files:
        logger.warning("No files matching %s found in %s", HOLDINGS_GLOB, data_dir)
        return {}

    extracts: dict[str, pd.DataFrame] = {}
    with ThreadPoolExecutor(max_workers=max(1, workers or len(files))) as executor:
        future_to_fund = {executor.submit(read_raw_holdings, path): fund for fund, path in files.items()}
        for future in as_completed(future_to_fund):
            extracts[future_to_fund[future]] = future.result()
    logger.info("Read %d holdings files from %s", len(extracts), data_dir)
    return {fund: extracts[fund] for fund in sorted(extracts)}


def import_table(path: str | Path) -> pd.DataFrame:
    """Read a table written by ``load.table_writer.write_table``."""
    source = Path(path)
    if not source.exists():
        raise ConfigurationError(f"Import file not found: {source}")

    suffix = source.suffix.lower()
    if suffix in {".parquet", ".pq"}:
        return pd.read_parquet(source, engine="pyarrow")
    if suffix == ".csv":
        return pd.read_csv(source, dtype=str, keep_default_na=False)
    if suffix == ".json":
        return pd.read_json(source, orient="records", dtype=False)
    raise ConfigurationError(f"Unsupported import format {suffix!r} for {source}; use .csv, .parquet or .json")
