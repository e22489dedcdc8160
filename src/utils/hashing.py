"""Hash helpers for stable partitioning and output fingerprints."""

from __future__ import annotations

import hashlib

import pandas as pd


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def stable_bucket(value: str, buckets: int) -> int:
    # Independent of PYTHONHASHSEED so partitions are reproducible across runs.
    if buckets <= 1:
        return 0
    digest = hashlib.sha1(value.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") % buckets


def frame_fingerprint(df: pd.DataFrame) -> str:
    return sha256_hex(df.to_csv(index=False))
