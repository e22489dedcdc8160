"""Validate fund identifiers and derive them from holdings file names."""

from __future__ import annotations

from pathlib import Path
import re

from models.errors import InvalidFundIdentifier

HOLDINGS_FILE_SUFFIX = "-etf-holdings"

_FUND_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._]*$")


def validate_fund_identifier(value: object) -> str:
    if value is None:
        raise InvalidFundIdentifier(value, "fund identifier is empty")
    cleaned = str(value).strip()
    if not cleaned:
        raise InvalidFundIdentifier(value, "fund identifier is empty")
    if not _FUND_ID_PATTERN.match(cleaned):
        raise InvalidFundIdentifier(value, "only letters, digits, '.' and '_' are allowed")
    return cleaned


def fund_from_filename(path: str | Path) -> str | None:
    """Return the upper-cased fund for ``{fund}-etf-holdings.*`` names, else None."""
    stem = Path(path).stem
    if not stem.lower().endswith(HOLDINGS_FILE_SUFFIX):
        return None
    return validate_fund_identifier(stem[: -len(HOLDINGS_FILE_SUFFIX)]).upper()
