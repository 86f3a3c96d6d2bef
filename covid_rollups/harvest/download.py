"""Download stage: fetch one year of NYT county rolling averages."""

from __future__ import annotations

from pathlib import Path

from covid_rollups.common.config_loader import ConfigBundle
from covid_rollups.common.errors import StageError
from covid_rollups.common.fs import parse_csv_text, write_text
from covid_rollups.common.http import HttpClient
from covid_rollups.pipeline.weekly_rollup import raw_csv_path

REQUIRED_COLUMNS = ("date", "geoid", "county", "state")


def _assert_columns(text: str, year: int, bundle: ConfigBundle) -> list[dict[str, str]]:
    rows = parse_csv_text(text)
    header = set(rows[0]) if rows else set()
    expected = {*REQUIRED_COLUMNS, *bundle.rollup.metric_aliases.values()}
    missing = expected - header
    if missing:
        raise StageError(f"Source CSV for {year} is missing columns: {', '.join(sorted(missing))}")
    return rows


def run_download(year: int, bundle: ConfigBundle, data_dir: Path, client: HttpClient) -> dict:
    url = bundle.source_url(year)
    text = client.get_text(url)
    rows = _assert_columns(text, year, bundle)

    out_path = raw_csv_path(data_dir, year)
    write_text(out_path, text)
    return {
        "year": year,
        "url": url,
        "output_path": str(out_path),
        "rows_out": len(rows),
    }
