"""Per-year quality reports and run summary aggregation."""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path

from covid_rollups.common.fs import read_json, write_json
from covid_rollups.common.models import AggregatedDataset, WeekStart
from covid_rollups.common.time_utils import week_starts


def report_path(data_dir: Path, year: int) -> Path:
    return data_dir / "out" / "reports" / f"{year}_report.json"


def missing_weeks(
    dataset: AggregatedDataset,
    *,
    year: int,
    week_start: WeekStart,
    start_date: date,
    run_date: date,
) -> list[str]:
    window_start = max(date(year, 1, 1), start_date)
    window_stop = min(date(year + 1, 1, 1), run_date + timedelta(days=1))
    observed = {day for day, _grouping in dataset.data}
    return [
        day.isoformat()
        for day in week_starts(window_start, window_stop, week_start)
        if day not in observed
    ]


def build_year_report(
    dataset: AggregatedDataset,
    *,
    year: int,
    raw_rows: int,
    normalized_rows: int,
    week_start: WeekStart,
    start_date: date,
    run_date: date,
) -> dict:
    bucketed = sum(len(grouping) for _day, grouping in dataset.data)
    regions = {region_code for _day, grouping in dataset.data for region_code, _record in grouping}
    missing = missing_weeks(
        dataset,
        year=year,
        week_start=week_start,
        start_date=start_date,
        run_date=run_date,
    )

    warnings: list[str] = []
    errors: list[str] = []
    if normalized_rows == 0:
        errors.append("NO_ROWS_IN_SCOPE")
    if missing:
        warnings.append("MISSING_WEEKS")
    if bucketed < normalized_rows:
        warnings.append("DUPLICATE_ROWS_DROPPED")
    if None in regions:
        warnings.append("REGION_CODE_MISSING")

    return {
        "year": year,
        "week_start": week_start.value,
        "counts": {
            "raw_rows": raw_rows,
            "normalized_rows": normalized_rows,
            "bucketed_rows": bucketed,
            "weeks": len(dataset.data),
            "regions": len(regions),
        },
        "extents": {metric: list(bounds) for metric, bounds in dataset.extents.items()},
        "missing_weeks": missing,
        "warnings": warnings,
        "errors": errors,
    }


def write_year_report(data_dir: Path, report: dict) -> Path:
    path = report_path(data_dir, report["year"])
    write_json(path, report)
    return path


def write_run_summary(data_dir: Path, run_id: str, run_date: str, years: list[int]) -> Path:
    year_reports = {}
    totals = {
        "raw_rows": 0,
        "normalized_rows": 0,
        "bucketed_rows": 0,
        "weeks": 0,
    }
    warning_count = 0
    error_count = 0

    for year in years:
        path = report_path(data_dir, year)
        if not path.exists():
            year_reports[str(year)] = {"status": "missing_report"}
            error_count += 1
            continue

        report = read_json(path)
        year_reports[str(year)] = {
            "counts": report.get("counts", {}),
            "warnings": report.get("warnings", []),
            "errors": report.get("errors", []),
        }

        counts = report.get("counts", {})
        for key in totals:
            totals[key] += int(counts.get(key, 0))

        warning_count += len(report.get("warnings", []))
        error_count += len(report.get("errors", []))

    status = "success"
    if error_count > 0:
        status = "error"
    elif warning_count > 0:
        status = "partial"

    summary_path = data_dir / "out" / "reports" / "run_summary.json"
    payload = {
        "run_id": run_id,
        "run_date": run_date,
        "status": status,
        "years": years,
        "totals": totals,
        "warning_count": warning_count,
        "error_count": error_count,
        "year_reports": year_reports,
    }
    write_json(summary_path, payload)
    return summary_path
