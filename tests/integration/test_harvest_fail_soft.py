from __future__ import annotations

import logging

import pytest

from covid_rollups.common.errors import ContractError, StageError
from covid_rollups.harvest.runner import run_years

LOGGER = logging.getLogger("covid_rollups.tests")


@pytest.mark.integration
def test_run_years_fail_soft_when_one_year_unavailable():
    def run_year(year: int) -> dict:
        if year == 2020:
            raise StageError("2020 down")
        return {"year": year, "rows_in": 3, "rows_out": 2}

    result = run_years("download", [2020, 2021], run_year, logger=LOGGER, run_id="run-5")

    assert result["failed_years"] == [2020]
    assert result["results"][2021]["rows_out"] == 2


@pytest.mark.integration
def test_run_years_fails_when_every_year_fails():
    def run_year(year: int) -> dict:
        raise StageError(f"{year} down")

    with pytest.raises(StageError):
        run_years("download", [2020, 2021], run_year, logger=LOGGER, run_id="run-6")


@pytest.mark.integration
def test_run_years_stops_on_first_failure_in_strict_mode():
    calls = []

    def run_year(year: int) -> dict:
        calls.append(year)
        raise StageError(f"{year} down")

    with pytest.raises(StageError):
        run_years("process", [2020, 2021], run_year, logger=LOGGER, run_id="run-7", strict=True)
    assert calls == [2020]


@pytest.mark.integration
def test_run_years_stops_on_contract_errors():
    def run_year(year: int) -> dict:
        raise ContractError("rows are not mappings")

    with pytest.raises(ContractError):
        run_years("process", [2020, 2021], run_year, logger=LOGGER, run_id="run-8")


@pytest.mark.integration
def test_run_years_fail_soft_on_unexpected_errors():
    def run_year(year: int) -> dict:
        if year == 2020:
            raise OSError("disk unreadable")
        return {"year": year, "rows_in": 1, "rows_out": 1}

    result = run_years("process", [2020, 2021, 2022], run_year, logger=LOGGER, run_id="run-9")

    assert result["failed_years"] == [2020]
    assert sorted(result["results"]) == [2021, 2022]


@pytest.mark.integration
def test_run_years_reraises_unexpected_errors_in_strict_mode():
    def run_year(year: int) -> dict:
        raise ValueError("bad row")

    with pytest.raises(ValueError):
        run_years("process", [2020, 2021], run_year, logger=LOGGER, run_id="run-10", strict=True)
