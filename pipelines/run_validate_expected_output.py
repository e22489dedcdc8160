"""Validate overlap/unique output against a bundled expected sample snapshot."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

import pandas as pd

# Allow running directly from repo root without package installation.
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from extract.holdings_reader import import_table, read_holdings_directory  # noqa: E402
from services.analysis_service import run_analysis  # noqa: E402
from transform.combine.portfolio import load_portfolio, portfolio_from_frame  # noqa: E402
from utils.validation import require_columns  # noqa: E402

DATA_DIR = Path(__file__).resolve().parents[1] / "data" / "samples"
DEFAULT_EXPECTED_CSV = DATA_DIR / "expected_overlap_sample.csv"

KEY_COLS = ["Symbol", "Fund"]


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare analysis output with an expected sample snapshot.")
    parser.add_argument("--data-dir", default=str(DATA_DIR), help="Directory with {fund}-etf-holdings.csv files.")
    parser.add_argument("--import", dest="import_path", default=None, help="Exported portfolio to use instead.")
    parser.add_argument(
        "--function",
        choices=["overlap", "unique"],
        default="overlap",
        help="Function whose (Symbol, Fund, Weight) rows are validated.",
    )
    parser.add_argument(
        "--expected-csv",
        default=str(DEFAULT_EXPECTED_CSV),
        help="Expected output CSV path.",
    )
    parser.add_argument(
        "--weight-tolerance",
        type=float,
        default=1e-9,
        help="Absolute tolerance for Weight comparisons.",
    )
    return parser.parse_args()


def _clean(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df["Symbol"] = df["Symbol"].astype(str).str.strip()
    df["Fund"] = df["Fund"].astype(str).str.strip()
    df["Weight"] = pd.to_numeric(df["Weight"], errors="coerce")
    return df


def _load_expected(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path, dtype={"Symbol": str, "Fund": str}, keep_default_na=False)
    require_columns(df, ["Symbol", "Fund", "Weight"], fund=path.name)
    return _clean(df)


def _load_actual(args: argparse.Namespace) -> pd.DataFrame:
    if args.import_path:
        portfolio = portfolio_from_frame(import_table(args.import_path))
    else:
        portfolio = load_portfolio(read_holdings_directory(args.data_dir))
    result = run_analysis(args.function, portfolio)
    if result.is_empty:
        return pd.DataFrame(columns=["Symbol", "Fund", "Weight"])
    return _clean(result.table)


def _validate(expected_df: pd.DataFrame, actual_df: pd.DataFrame, tolerance: float) -> tuple[bool, list[str]]:
    messages: list[str] = []

    expected_keys = set(map(tuple, expected_df[KEY_COLS].itertuples(index=False, name=None)))
    actual_keys = set(map(tuple, actual_df[KEY_COLS].itertuples(index=False, name=None)))

    missing = sorted(expected_keys - actual_keys)
    extras = sorted(actual_keys - expected_keys)

    if missing:
        messages.append(f"Missing rows in actual: {missing}")
    if extras:
        messages.append(f"Unexpected rows in actual: {extras}")

    # Name is optional in snapshots; compare it only when both sides carry it.
    value_cols = ["Weight"] + (["Name"] if "Name" in expected_df.columns and "Name" in actual_df.columns else [])
    merged = expected_df[KEY_COLS + value_cols].merge(
        actual_df[KEY_COLS + value_cols],
        on=KEY_COLS,
        how="inner",
        suffixes=("_expected", "_actual"),
    )

    for row in merged.itertuples(index=False):
        key = f"({row.Symbol}, {row.Fund})"
        weight_diff = abs(float(row.Weight_expected) - float(row.Weight_actual))
        if weight_diff > tolerance:
            messages.append(
                f"Weight mismatch {key}: expected={row.Weight_expected}, actual={row.Weight_actual}, diff={weight_diff}"
            )
        if "Name" in value_cols and str(row.Name_expected).strip() != str(row.Name_actual).strip():
            messages.append(f"Name mismatch {key}: expected={row.Name_expected!r}, actual={row.Name_actual!r}")

    return not messages, messages


def main() -> int:
    args = _parse_args()

    expected_path = Path(args.expected_csv)
    if not expected_path.exists():
        raise FileNotFoundError(f"Expected CSV not found: {expected_path}")

    expected_df = _load_expected(expected_path)
    actual_df = _load_actual(args)

    passed, messages = _validate(expected_df, actual_df, args.weight_tolerance)

    if passed:
        print(
            "run_validate_expected_output passed",
            f"function={args.function}",
            f"rows(expected)={len(expected_df)}",
            f"rows(actual)={len(actual_df)}",
        )
        return 0

    print("run_validate_expected_output failed", f"function={args.function}")
    for message in messages:
        print(" -", message)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
