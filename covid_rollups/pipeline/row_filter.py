"""Row scoping and typed normalisation for rolling-average source rows."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date

from covid_rollups.common.errors import ContractError
from covid_rollups.common.models import METRIC_FIELDS, NormalizedRecord, Number, RollupConfig
from covid_rollups.common.time_utils import is_week_boundary, parse_calendar_date
from covid_rollups.pipeline.geo_key import geoid_to_region_code

_INT_RE = re.compile(r"[-+]?\d+")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")


def auto_type(value: object) -> object:
    """Coerce a CSV cell: numeric text becomes a number, blank text becomes None."""
    if not isinstance(value, str):
        return value
    cleaned = value.strip()
    if not cleaned:
        return None
    if _INT_RE.fullmatch(cleaned):
        return int(cleaned)
    if _NUMBER_RE.fullmatch(cleaned):
        return float(cleaned)
    return cleaned


def coerce_metric(value: object) -> Number | None:
    typed = auto_type(value)
    if isinstance(typed, bool) or not isinstance(typed, (int, float)):
        return None
    if isinstance(typed, float) and math.isnan(typed):
        return None
    return typed


def _assert_row(row: object) -> Mapping:
    if not isinstance(row, Mapping):
        raise ContractError(f"Source rows must be mappings, got {type(row).__name__}")
    return row


def is_in_scope(state: object, parsed_date: date | None, config: RollupConfig) -> bool:
    if parsed_date is None:
        return False
    if isinstance(state, str) and state in config.excluded_territories:
        return False
    return is_week_boundary(parsed_date, config.week_start)


def _to_record(row: Mapping, parsed_date: date | None, config: RollupConfig) -> NormalizedRecord:
    metrics = {
        METRIC_FIELDS[name]: coerce_metric(row.get(column))
        for name, column in config.metric_aliases.items()
        if name in METRIC_FIELDS
    }
    return NormalizedRecord(
        date=parsed_date,
        region_code=geoid_to_region_code(row.get("geoid")),
        county=auto_type(row.get("county")),
        state=auto_type(row.get("state")),
        cases_avg_per_100k=metrics.get("cases_avg_per_100k"),
        deaths_avg_per_100k=metrics.get("deaths_avg_per_100k"),
    )


def filter_raw(row: Mapping, config: RollupConfig) -> list[NormalizedRecord]:
    """Return ``[record]`` for an in-scope row and ``[]`` otherwise.

    A row is in scope when its state is not an excluded territory and its date
    is exactly a week start under ``config.week_start``.
    """
    _assert_row(row)
    parsed_date = parse_calendar_date(row.get("date"))
    if not is_in_scope(row.get("state"), parsed_date, config):
        return []
    return [_to_record(row, parsed_date, config)]


def normalize_only(row: Mapping, config: RollupConfig) -> list[NormalizedRecord]:
    """Normalise a row that was already scoped upstream, skipping the scope checks."""
    _assert_row(row)
    return [_to_record(row, parse_calendar_date(row.get("date")), config)]
