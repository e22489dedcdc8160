"""Group portfolio holdings by asset symbol."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging

import pandas as pd

from models.schemas import AssetAggregate
from transform.combine.portfolio import Portfolio, default_worker_count
from utils.hashing import stable_bucket

logger = logging.getLogger(__name__)

# Below this many rows the pool costs more than it saves.
MIN_ROWS_PER_PARTITION = 5_000


def _aggregate_partition(frame: pd.DataFrame) -> list[AssetAggregate]:
    names = frame.groupby("Symbol", sort=False)["Name"].first()
    # Later rows for the same (symbol, fund) overwrite earlier ones.
    weights = frame.drop_duplicates(subset=["Symbol", "Fund"], keep="last")
    per_fund = {
        symbol: dict(zip(group["Fund"].tolist(), group["Weight"].astype("float64").tolist()))
        for symbol, group in weights.groupby("Symbol", sort=False)
    }
    return [
        AssetAggregate(symbol=symbol, name=name, per_fund_weight=per_fund[symbol])
        for symbol, name in names.items()
    ]


def _partition_count(rows: int, workers: int) -> int:
    return max(1, min(workers, rows // MIN_ROWS_PER_PARTITION))


def aggregate_assets(
    portfolio: Portfolio,
    workers: int | None = None,
    partitions: int | None = None,
) -> list[AssetAggregate]:
    """Return one ``AssetAggregate`` per symbol, ordered by symbol.

    Rows are partitioned by a stable hash of the symbol so every row of a
    symbol lands in the same partition in portfolio order; the name of the
    first row and the weight of the last row per fund are therefore the same
    as a sequential pass would pick.
    """
    frame = portfolio.frame
    if frame.empty:
        return []

    max_workers = max(1, workers or default_worker_count())
    count = partitions if partitions is not None else _partition_count(len(frame), max_workers)
    count = max(1, count)

    if count == 1:
        results = [_aggregate_partition(frame)]
    else:
        buckets = frame["Symbol"].map(lambda symbol: stable_bucket(symbol, count))
        parts = [frame[buckets == bucket] for bucket in range(count)]
        with ThreadPoolExecutor(max_workers=min(max_workers, count)) as executor:
            results = list(executor.map(_aggregate_partition, [part for part in parts if not part.empty]))

    merged = {aggregate.symbol: aggregate for part in results for aggregate in part}
    logger.debug("Aggregated %d rows into %d assets across %d partitions", len(frame), len(merged), count)
    return [merged[symbol] for symbol in sorted(merged)]
