from __future__ import annotations

from pathlib import Path

import pytest

from covid_rollups.common.config_loader import load_config
from covid_rollups.common.errors import StageError
from covid_rollups.common.http import HttpClient, RetryConfig
from covid_rollups.harvest.download import run_download
from covid_rollups.pipeline.export import read_dataset_gz
from covid_rollups.pipeline.weekly_rollup import raw_csv_path, run_weekly_rollup

CSV_2021 = """date,geoid,county,state,cases,cases_avg,cases_avg_per_100k,deaths,deaths_avg,deaths_avg_per_100k
2021-01-03,USA-04013,Maricopa,Arizona,5000,4500.5,98.51,50,40.1,0.9
2021-01-03,USA-72127,San Juan,Puerto Rico,100,90,28.3,1,1,0.3
2021-01-03,USA-06037,Los Angeles,California,0,0,0,0,0,0
2021-01-04,USA-04013,Maricopa,Arizona,5100,4600,100.7,51,41,1.0
2021-01-10,USA-04013,Maricopa,Arizona,5200,4700,102.9,52,42,1.1
2021-01-10,USA-06037,Los Angeles,California,9000,8000,79.6,200,150,1.5
"""


class FakeResponse:
    def __init__(self, status_code: int, text: str = ""):
        self.status_code = status_code
        self.text = text
        self.encoding = "utf-8"


@pytest.mark.integration
def test_download_then_process_writes_weekly_rollup(monkeypatch, tmp_path: Path):
    bundle = load_config(Path("config"))
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    requested = []

    def fake_request(**kwargs):
        requested.append(kwargs["url"])
        return FakeResponse(200, CSV_2021)

    monkeypatch.setattr(client.session, "request", fake_request)

    downloaded = run_download(2021, bundle, tmp_path, client)

    assert requested == [bundle.source_url(2021)]
    assert downloaded["rows_out"] == 6
    assert raw_csv_path(tmp_path, 2021).read_text(encoding="utf-8") == CSV_2021

    result = run_weekly_rollup(2021, bundle, tmp_path, run_date="2021-01-16")

    out_path = tmp_path / "out" / "nyt-rolling-averages-filtered-by-week.2021.json.gz"
    assert result["output_path"] == str(out_path)
    dataset = read_dataset_gz(out_path)

    assert [day.isoformat() for day, _ in dataset.data] == ["2021-01-03", "2021-01-10"]
    assert [region for region, _ in dataset.data[0][1]] == ["04013", "06037"]
    assert [region for region, _ in dataset.data[1][1]] == ["04013", "06037"]
    assert dataset.extents == {"cases": (79.6, 102.9), "deaths": (0.9, 1.5)}
    assert (tmp_path / "out" / "reports" / "2021_report.json").exists()


@pytest.mark.integration
def test_download_rejects_csv_without_metric_columns(monkeypatch, tmp_path: Path):
    bundle = load_config(Path("config"))
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(
        client.session,
        "request",
        lambda **_kwargs: FakeResponse(200, "date,geoid,county,state\n2021-01-03,USA-04013,Maricopa,Arizona\n"),
    )

    with pytest.raises(StageError):
        run_download(2021, bundle, tmp_path, client)
    assert not raw_csv_path(tmp_path, 2021).exists()


@pytest.mark.integration
def test_process_without_download_raises_stage_error(tmp_path: Path):
    bundle = load_config(Path("config"))
    with pytest.raises(StageError):
        run_weekly_rollup(2021, bundle, tmp_path, run_date="2021-01-16")
