from datetime import date

from covid_rollups.common.ids import generate_run_id
from covid_rollups.common.models import WeekStart
from covid_rollups.common.time_utils import (
    floor_to_week,
    format_utc_midnight,
    is_week_boundary,
    parse_calendar_date,
    parse_run_date,
    source_years,
    week_starts,
)


def test_generate_run_id_prefix():
    assert generate_run_id().startswith("run-")


def test_parse_run_date_defaults_and_iso():
    assert parse_run_date("2026-02-17") == "2026-02-17"
    assert len(parse_run_date(None)) == len("2026-02-17")


def test_parse_calendar_date_tolerates_bad_values():
    assert parse_calendar_date("2021-01-03") == date(2021, 1, 3)
    assert parse_calendar_date("2021-02-30") is None
    assert parse_calendar_date("") is None
    assert parse_calendar_date(None) is None


def test_format_utc_midnight():
    assert format_utc_midnight(date(2021, 1, 3)) == "2021-01-03T00:00:00.000Z"
    assert format_utc_midnight(None) is None


def test_week_start_weekday_matches_date_weekday():
    assert WeekStart.MONDAY.weekday == 0
    assert WeekStart.SUNDAY.weekday == 6


def test_floor_to_week_and_boundary():
    assert floor_to_week(date(2021, 1, 6), WeekStart.SUNDAY) == date(2021, 1, 3)
    assert floor_to_week(date(2021, 1, 6), WeekStart.MONDAY) == date(2021, 1, 4)
    assert is_week_boundary(date(2021, 1, 3), WeekStart.SUNDAY)
    assert not is_week_boundary(date(2021, 1, 3), WeekStart.MONDAY)


def test_week_starts_enumerates_half_open_range():
    starts = list(week_starts(date(2021, 1, 1), date(2021, 1, 17), WeekStart.SUNDAY))
    assert starts == [date(2021, 1, 3), date(2021, 1, 10)]


def test_source_years_starts_on_first_whole_year():
    assert source_years(date(2020, 1, 1), date(2023, 3, 1)) == [2020, 2021, 2022, 2023]
    assert source_years(date(2020, 3, 1), date(2023, 3, 1)) == [2021, 2022, 2023]
    assert source_years(date(2020, 1, 1), date(2026, 3, 1), end_year=2023) == [2020, 2021, 2022, 2023]
