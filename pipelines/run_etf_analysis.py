"""Pipeline entrypoint: load ETF holdings and run one analysis function."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import Sequence

# Allow running directly from repo root without package installation.
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from config.file_config import (  # noqa: E402
    DEFAULT_FUNCTION,
    DEFAULT_SORT_BY,
    AnalyzerConfig,
    load_default_config,
)
from config.settings import settings  # noqa: E402
from extract.holdings_reader import import_table, read_holdings_directory  # noqa: E402
from load.table_writer import ConfirmOverwrite, resolve_output_path, write_table  # noqa: E402
from models.enums import AnalysisFunction, SortBy  # noqa: E402
from models.errors import AnalyzerError, ConfigurationError  # noqa: E402
from models.schemas import SchemaMapping  # noqa: E402
from services.analysis_service import run_analysis  # noqa: E402
from transform.combine.portfolio import Portfolio, filter_funds, load_portfolio, portfolio_from_frame  # noqa: E402
from utils.hashing import frame_fingerprint  # noqa: E402
from utils.log_setup import configure_logging  # noqa: E402

logger = logging.getLogger("pipelines.run_etf_analysis")

FUNCTIONS = [function.value for function in AnalysisFunction]


def _split_etfs(value: str) -> list[str]:
    return [item.strip().upper() for item in value.split(",") if item.strip()]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analyze overlap between ETF holdings files ({fund}-etf-holdings.csv)."
    )
    source = parser.add_argument_group("input")
    source.add_argument("-d", "--data-dir", default=None, help="Directory containing {fund}-etf-holdings.csv files.")
    source.add_argument(
        "-i",
        "--import",
        dest="import_path",
        default=None,
        help="Import a previously exported portfolio table (.csv, .parquet or .json).",
    )
    parser.add_argument(
        "-f",
        "--function",
        default=DEFAULT_FUNCTION,
        help=f"Function to run: {', '.join(FUNCTIONS)} (default: {DEFAULT_FUNCTION}).",
    )
    parser.add_argument("-o", "--output", default=None, help="Output file path; format follows the extension.")
    parser.add_argument("--force", action="store_true", help="Overwrite existing output files without prompting.")
    parser.add_argument(
        "--sort-by",
        default=DEFAULT_SORT_BY,
        help="Sort order for assets, overlap and mapping: 'symbol' or 'count' (default: symbol).",
    )
    parser.add_argument(
        "--etfs",
        type=_split_etfs,
        default=None,
        help="Comma-separated ETF symbols to include (e.g. VTI,VOO,SPY); required for compare.",
    )
    columns = parser.add_argument_group("input columns")
    columns.add_argument("--symbol-col", dest="symbol_col", default=None, help='Asset symbol column (default: "Symbol").')
    columns.add_argument("--name-col", dest="name_col", default=None, help='Asset name column (default: "Name").')
    columns.add_argument("--weight-col", dest="weight_col", default=None, help='Weight column (default: "%% Weight").')
    columns.add_argument("--shares-col", dest="shares_col", default=None, help='Shares column (default: "Shares").')
    columns.add_argument("--number-col", dest="number_col", default=None, help='Row number column (default: "No.").')
    parser.add_argument("--workers", type=int, default=None, help="Worker threads for loading and aggregation.")
    parser.add_argument("--config", default=None, help="TOML config file (default: search standard locations).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging.")
    return parser


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    args = _build_parser().parse_args(argv)
    config = AnalyzerConfig.from_file(args.config) if args.config else load_default_config()
    if config is not None:
        config.merge_with_cli(args)
    if args.etfs:
        args.etfs = _split_etfs(",".join(args.etfs))
    return args


def _schema_mapping(args: argparse.Namespace) -> SchemaMapping:
    return SchemaMapping().with_overrides(
        symbol=args.symbol_col,
        name=args.name_col,
        weight=args.weight_col,
        shares=args.shares_col,
        number=args.number_col,
    )


def _load(args: argparse.Namespace, workers: int) -> Portfolio:
    if args.import_path:
        logger.debug("Importing portfolio from %s", args.import_path)
        return portfolio_from_frame(import_table(args.import_path))

    logger.debug("Loading portfolio from directory %s", args.data_dir)
    extracts = read_holdings_directory(args.data_dir, workers=workers)
    return load_portfolio(extracts, _schema_mapping(args), workers=workers)


def run(args: argparse.Namespace, confirm: ConfirmOverwrite | None = None) -> int:
    if not args.data_dir and not args.import_path:
        raise ConfigurationError("Either --data-dir (-d) or --import (-i) must be specified")

    function = AnalysisFunction.parse(args.function)
    sort_by = SortBy.parse(args.sort_by)
    workers = max(1, args.workers or settings.worker_count)
    logger.debug("Starting run_etf_analysis env=%s function=%s workers=%d", settings.app_env, function.value, workers)

    portfolio = _load(args, workers)
    logger.debug("Portfolio fingerprint=%s", frame_fingerprint(portfolio.frame))

    if args.etfs:
        portfolio = filter_funds(portfolio, args.etfs)
        logger.debug("Filtered portfolio contains %d rows", len(portfolio))

    if function is AnalysisFunction.EXPORT:
        if not args.output:
            raise ConfigurationError("Export function requires --output (-o) to be specified")
        destination = resolve_output_path(args.output, function)
        if write_table(portfolio.frame, destination, force=args.force, confirm=confirm):
            print(f"Successfully exported to: {destination}")
        return 0

    result = run_analysis(function, portfolio, sort_by=sort_by, compare_funds=args.etfs, workers=workers)
    print(result.summary)
    if function in {AnalysisFunction.SUMMARY, AnalysisFunction.LIST, AnalysisFunction.COMPARE} and not result.is_empty:
        print(result.table.to_string(index=False))

    if args.output:
        destination = resolve_output_path(args.output, function)
        if write_table(result.table, destination, force=args.force, confirm=confirm):
            print(f"{function.value.capitalize()} saved to: {destination}")

    logger.debug(
        "run_etf_analysis completed function=%s rows(portfolio)=%d rows(result)=%d",
        function.value,
        len(portfolio),
        result.row_count,
    )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    try:
        args = _parse_args(argv)
    except AnalyzerError as exc:
        configure_logging(settings.log_level)
        logger.error("%s", exc)
        return 1

    configure_logging(settings.log_level, verbose=args.verbose)
    try:
        return run(args)
    except AnalyzerError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
