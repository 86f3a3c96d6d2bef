"""Serialisation of rolled-up datasets to compressed JSON."""

from __future__ import annotations

from pathlib import Path

from covid_rollups.common.fs import read_json_gz, write_json_gz
from covid_rollups.common.models import METRIC_FIELDS, AggregatedDataset, NormalizedRecord
from covid_rollups.common.time_utils import format_utc_midnight, parse_calendar_date


def record_to_dict(record: NormalizedRecord) -> dict:
    return {
        "fips": record.region_code,
        "county": record.county,
        "state": record.state,
        "cases_avg_per_100k": record.cases_avg_per_100k,
        "deaths_avg_per_100k": record.deaths_avg_per_100k,
        "date": format_utc_midnight(record.date),
    }


def record_from_dict(payload: dict) -> NormalizedRecord:
    return NormalizedRecord(
        date=parse_calendar_date((payload.get("date") or "")[:10] or None),
        region_code=payload.get("fips"),
        county=payload.get("county"),
        state=payload.get("state"),
        cases_avg_per_100k=payload.get("cases_avg_per_100k"),
        deaths_avg_per_100k=payload.get("deaths_avg_per_100k"),
    )


def to_payload(dataset: AggregatedDataset) -> dict:
    return {
        "data": [
            [
                format_utc_midnight(day),
                [[region_code, record_to_dict(record)] for region_code, record in grouping],
            ]
            for day, grouping in dataset.data
        ],
        "extents": {metric: list(dataset.extents[metric]) for metric in METRIC_FIELDS},
    }


def dataset_from_payload(payload: dict) -> AggregatedDataset:
    data = []
    for day, grouping in payload["data"]:
        parsed = parse_calendar_date(day[:10]) if day else None
        data.append((parsed, [(region_code, record_from_dict(record)) for region_code, record in grouping]))
    extents = {metric: tuple(payload["extents"][metric]) for metric in METRIC_FIELDS}
    return AggregatedDataset(data=data, extents=extents)


def write_dataset_gz(path: Path, dataset: AggregatedDataset) -> Path:
    write_json_gz(path, to_payload(dataset))
    return path


def read_dataset_gz(path: Path) -> AggregatedDataset:
    return dataset_from_payload(read_json_gz(path))
