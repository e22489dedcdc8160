"""Parse holding weights such as ``"11.28%"`` into numeric percentages."""

from __future__ import annotations

import math

from models.errors import WeightParseError


def parse_weight(raw_value: object, fund: str, row_number: int) -> float:
    if isinstance(raw_value, (int, float)) and not isinstance(raw_value, bool):
        value = float(raw_value)
    else:
        text = "" if raw_value is None else str(raw_value).strip()
        if text.endswith("%"):
            text = text[:-1].strip()
        try:
            value = float(text)
        except ValueError:
            raise WeightParseError(fund, row_number, raw_value) from None

    if not math.isfinite(value):
        raise WeightParseError(fund, row_number, raw_value)
    return value
