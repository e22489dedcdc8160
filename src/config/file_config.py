"""Optional TOML configuration that supplies defaults for CLI arguments.

Lookup order when no explicit path is given:

1. ``./.etf_analyzer.toml``
2. ``$XDG_CONFIG_HOME/etf_analyzer/config.toml`` (``~/.config`` when unset)
3. ``~/.etf_analyzer.toml``

Values from the command line always win; config values only fill in
arguments the user left unset or at their defaults.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
import os
from pathlib import Path
import tomllib
from typing import Any

from models.errors import ConfigurationError

CONFIG_FILE_NAME = ".etf_analyzer.toml"

DEFAULT_FUNCTION = "summary"
DEFAULT_SORT_BY = "symbol"


@dataclass(frozen=True)
class ColumnConfig:
    symbol_col: str | None = None
    name_col: str | None = None
    weight_col: str | None = None
    shares_col: str | None = None
    number_col: str | None = None


@dataclass(frozen=True)
class AnalyzerConfig:
    data_dir: str | None = None
    function: str | None = None
    output: str | None = None
    sort_by: str | None = None
    etfs: list[str] | None = None
    force: bool | None = None
    verbose: bool | None = None
    workers: int | None = None
    columns: ColumnConfig = field(default_factory=ColumnConfig)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "AnalyzerConfig":
        columns_raw = raw.get("columns") or {}
        if not isinstance(columns_raw, dict):
            raise ConfigurationError("[columns] must be a table")
        known_columns = set(ColumnConfig.__dataclass_fields__)
        unknown = sorted(set(columns_raw) - known_columns)
        if unknown:
            raise ConfigurationError(f"Unknown keys in [columns]: {unknown}")

        etfs = raw.get("etfs")
        if etfs is not None and not (isinstance(etfs, list) and all(isinstance(item, str) for item in etfs)):
            raise ConfigurationError("etfs must be a list of strings")

        workers = raw.get("workers")
        if workers is not None and (isinstance(workers, bool) or not isinstance(workers, int) or workers < 1):
            raise ConfigurationError(f"workers must be a positive integer, got {workers!r}")
        for key in ("force", "verbose"):
            if raw.get(key) is not None and not isinstance(raw[key], bool):
                raise ConfigurationError(f"{key} must be true or false, got {raw[key]!r}")

        return cls(
            data_dir=raw.get("data_dir"),
            function=raw.get("function"),
            output=raw.get("output"),
            sort_by=raw.get("sort_by"),
            etfs=list(etfs) if etfs is not None else None,
            force=raw.get("force"),
            verbose=raw.get("verbose"),
            workers=workers,
            columns=ColumnConfig(**columns_raw),
        )

    @classmethod
    def from_toml(cls, text: str) -> "AnalyzerConfig":
        try:
            return cls.from_dict(tomllib.loads(text))
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"Failed to parse config file: {exc}") from exc

    @classmethod
    def from_file(cls, path: str | Path) -> "AnalyzerConfig":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
        return cls.from_toml(text)

    def merge_with_cli(self, args: argparse.Namespace) -> None:
        """Fill CLI arguments the user did not set from this config, in place."""
        if args.data_dir is None:
            args.data_dir = self.data_dir
        if args.function == DEFAULT_FUNCTION and self.function:
            args.function = self.function
        if args.output is None:
            args.output = self.output
        if args.sort_by == DEFAULT_SORT_BY and self.sort_by:
            args.sort_by = self.sort_by
        if args.etfs is None and self.etfs is not None:
            args.etfs = list(self.etfs)
        if not args.force and self.force is True:
            args.force = True
        if not args.verbose and self.verbose is True:
            args.verbose = True
        if args.workers is None and self.workers is not None:
            args.workers = self.workers

        for key in ColumnConfig.__dataclass_fields__:
            if getattr(args, key, None) is None:
                setattr(args, key, getattr(self.columns, key))


def _config_dir() -> Path | None:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    home = _home_dir()
    return home / ".config" if home is not None else None


def _home_dir() -> Path | None:
    home = os.getenv("HOME") or os.getenv("USERPROFILE")
    return Path(home) if home else None


def candidate_paths() -> list[Path]:
    paths = [Path(CONFIG_FILE_NAME)]
    config_dir = _config_dir()
    if config_dir is not None:
        paths.append(config_dir / "etf_analyzer" / "config.toml")
    home = _home_dir()
    if home is not None:
        paths.append(home / CONFIG_FILE_NAME)
    return paths


def load_default_config() -> AnalyzerConfig | None:
    for path in candidate_paths():
        if path.exists():
            return AnalyzerConfig.from_file(path)
    return None
