"""Nested date/region rollup and metric extents."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Callable

from covid_rollups.common.errors import ContractError
from covid_rollups.common.models import (
    METRIC_FIELDS,
    AggregatedDataset,
    Extent,
    Measured,
    NormalizedRecord,
    RollupConfig,
)
from covid_rollups.pipeline.row_filter import filter_raw, normalize_only


def signal(value: object) -> Measured | None:
    """Zero, missing and NaN values carry no signal for extents."""
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if value == 0:
        return None
    return Measured(value)


def compute_extent(records: Iterable[NormalizedRecord], metric: str) -> Extent:
    values = []
    for record in records:
        measured = signal(record.metric(metric))
        if measured is not None:
            values.append(measured.value)
    if not values:
        return (None, None)
    return (min(values), max(values))


def rollup(records: Iterable[NormalizedRecord]) -> AggregatedDataset:
    records = list(records)

    # dicts keep first-seen order for both levels; setdefault keeps the first record.
    grouped: dict = {}
    for record in records:
        by_region = grouped.setdefault(record.date, {})
        by_region.setdefault(record.region_code, record)

    return AggregatedDataset(
        data=[(day, list(by_region.items())) for day, by_region in grouped.items()],
        extents={metric: compute_extent(records, metric) for metric in METRIC_FIELDS},
    )


def _assert_rows(rows: object) -> Iterable:
    if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Iterable):
        raise ContractError(f"Source rows must be an iterable of mappings, got {type(rows).__name__}")
    return rows


def _collect_records(
    rows: Iterable[Mapping],
    config: RollupConfig,
    normalise_row: Callable[[Mapping, RollupConfig], list[NormalizedRecord]],
) -> list[NormalizedRecord]:
    return [record for row in _assert_rows(rows) for record in normalise_row(row, config)]


def filter_rows(rows: Iterable[Mapping], config: RollupConfig) -> list[NormalizedRecord]:
    return _collect_records(rows, config, filter_raw)


def process_rows(rows: Iterable[Mapping], config: RollupConfig) -> AggregatedDataset:
    """Filter raw source rows to the weekly subset and roll them up."""
    return rollup(filter_rows(rows, config))


def process_prefiltered_rows(rows: Iterable[Mapping], config: RollupConfig) -> AggregatedDataset:
    """Roll up rows that were already scoped to the weekly subset upstream."""
    return rollup(_collect_records(rows, config, normalize_only))
