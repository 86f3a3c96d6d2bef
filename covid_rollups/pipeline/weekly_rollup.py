"""Process stage: raw yearly CSV to compressed weekly rollup."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from covid_rollups.common.config_loader import ConfigBundle
from covid_rollups.common.constants import RAW_FILENAME_TEMPLATE
from covid_rollups.common.errors import StageError
from covid_rollups.common.fs import read_csv_rows
from covid_rollups.pipeline.aggregate import filter_rows, rollup
from covid_rollups.pipeline.export import write_dataset_gz
from covid_rollups.pipeline.reports import build_year_report, write_year_report


def raw_csv_path(data_dir: Path, year: int) -> Path:
    return data_dir / "raw" / RAW_FILENAME_TEMPLATE.format(year=year)


def run_weekly_rollup(year: int, bundle: ConfigBundle, data_dir: Path, run_date: str) -> dict:
    source_path = raw_csv_path(data_dir, year)
    if not source_path.exists():
        raise StageError(f"Missing raw CSV for {year}: {source_path}")

    rows = read_csv_rows(source_path)
    records = filter_rows(rows, bundle.rollup)
    dataset = rollup(records)

    out_path = write_dataset_gz(data_dir / "out" / bundle.output_filename(year), dataset)
    report = build_year_report(
        dataset,
        year=year,
        raw_rows=len(rows),
        normalized_rows=len(records),
        week_start=bundle.rollup.week_start,
        start_date=bundle.start_date,
        run_date=date.fromisoformat(run_date),
    )
    write_year_report(data_dir, report)

    return {
        "year": year,
        "output_path": str(out_path),
        "rows_in": len(rows),
        "rows_out": report["counts"]["bucketed_rows"],
        "extents": report["extents"],
    }
