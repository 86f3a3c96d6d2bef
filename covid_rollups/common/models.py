"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Union

from covid_rollups.common.constants import DEFAULT_WEEK_START, EXCLUDED_TERRITORIES, METRIC_ALIASES

Number = Union[int, float]
Extent = tuple[Union[Number, None], Union[Number, None]]


class WeekStart(Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def weekday(self) -> int:
        """Weekday index as returned by ``date.weekday()`` (Monday is 0)."""
        return list(WeekStart).index(self)


# Record attribute holding each metric; aliases name the raw column instead.
METRIC_FIELDS = {
    "cases": "cases_avg_per_100k",
    "deaths": "deaths_avg_per_100k",
}


@dataclass(frozen=True)
class RollupConfig:
    excluded_territories: frozenset[str] = frozenset(EXCLUDED_TERRITORIES)
    metric_aliases: dict[str, str] = field(default_factory=lambda: dict(METRIC_ALIASES))
    week_start: WeekStart = WeekStart(DEFAULT_WEEK_START)


@dataclass(frozen=True)
class Measured:
    """A metric value that carries signal for extent purposes."""

    value: Number


@dataclass(frozen=True)
class NormalizedRecord:
    date: date | None
    region_code: str | None
    county: object
    state: object
    cases_avg_per_100k: Number | None
    deaths_avg_per_100k: Number | None

    def metric(self, name: str) -> Number | None:
        return getattr(self, METRIC_FIELDS[name])


@dataclass(frozen=True)
class AggregatedDataset:
    data: list[tuple[date | None, list[tuple[str | None, NormalizedRecord]]]]
    extents: dict[str, Extent]
