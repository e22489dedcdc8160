"""Prefect flow to export the portfolio and write every analysis report."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
import subprocess
import sys
from typing import Sequence

from prefect import flow, get_run_logger, task

REPO_ROOT = Path(__file__).resolve().parents[2]

DEFAULT_REPORTS = ["summary", "list", "assets", "unique", "overlap", "mapping"]


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the ETF analysis report bundle via Prefect.")
    parser.add_argument("--data-dir", required=True, help="Directory containing {fund}-etf-holdings.csv files.")
    parser.add_argument("--output-dir", required=True, help="Directory receiving the export and report files.")
    parser.add_argument("--etfs", default=None, help="Comma-separated ETF filter; also enables the compare report.")
    parser.add_argument("--sort-by", default="symbol", help="Sort order for assets, overlap and mapping.")
    parser.add_argument("--skip-export", action="store_true", help="Skip the Parquet portfolio export step.")
    return parser.parse_args()


def _run_subprocess(command: Sequence[str]) -> tuple[int, str, str]:
    env = os.environ.copy()
    env.setdefault("PYTHONUNBUFFERED", "1")
    result = subprocess.run(
        command,
        cwd=REPO_ROOT,
        env=env,
        capture_output=True,
        text=True,
        check=False,
    )
    return result.returncode, result.stdout, result.stderr


@task(name="run-analysis-step", retries=1, retry_delay_seconds=5)
def run_analysis_step(name: str, command: list[str]) -> None:
    logger = get_run_logger()
    logger.info("Running step=%s command=%s", name, " ".join(command))
    return_code, stdout, stderr = _run_subprocess(command)
    if stdout.strip():
        logger.info(stdout.strip())
    if return_code != 0:
        if stderr.strip():
            logger.error(stderr.strip())
        raise RuntimeError(f"Step {name} failed with exit code {return_code}")


@flow(name="etf-analysis-reports", log_prints=True)
def analysis_reports_flow(
    data_dir: str,
    output_dir: str,
    etfs: str | None = None,
    sort_by: str = "symbol",
    run_export: bool = True,
) -> None:
    python_bin = sys.executable
    base = [python_bin, "pipelines/run_etf_analysis.py", "--data-dir", data_dir, "--force"]
    if etfs:
        base += ["--etfs", etfs]

    if run_export:
        run_analysis_step(
            "export",
            base + ["--function", "export", "--output", str(Path(output_dir) / "portfolio.parquet")],
        )

    reports = DEFAULT_REPORTS + (["compare"] if etfs else [])
    for report in reports:
        run_analysis_step(
            report,
            base + ["--function", report, "--sort-by", sort_by, "--output", str(Path(output_dir) / f"{report}.csv")],
        )


if __name__ == "__main__":
    args = _parse_args()
    analysis_reports_flow(
        data_dir=args.data_dir,
        output_dir=args.output_dir,
        etfs=args.etfs,
        sort_by=args.sort_by,
        run_export=not args.skip_export,
    )
