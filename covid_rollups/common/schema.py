"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from covid_rollups.common.errors import ConfigError
from covid_rollups.common.models import METRIC_FIELDS, WeekStart


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def validate_pipeline_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"source", "rollup", "output", "http"}
    _assert_required_keys(cfg, top_required, "pipeline config")
    _assert_no_unknown_keys(cfg, top_required, "pipeline config", allow_unknown)

    _assert_required_keys(cfg["source"], {"url_template", "start_date"}, "source")
    _assert_no_unknown_keys(cfg["source"], {"url_template", "start_date", "end_year"}, "source", allow_unknown)
    if "{year}" not in cfg["source"]["url_template"]:
        raise ConfigError("source.url_template must contain a {year} placeholder")
    end_year = cfg["source"].get("end_year")
    if end_year is not None and (isinstance(end_year, bool) or not isinstance(end_year, int)):
        raise ConfigError("source.end_year must be an integer year or null")

    rollup_keys = {"excluded_territories", "metric_aliases", "week_start"}
    _assert_required_keys(cfg["rollup"], rollup_keys, "rollup")
    _assert_no_unknown_keys(cfg["rollup"], rollup_keys, "rollup", allow_unknown)
    if not isinstance(cfg["rollup"]["excluded_territories"], list):
        raise ConfigError("rollup.excluded_territories must be a list")
    _assert_required_keys(cfg["rollup"]["metric_aliases"], set(METRIC_FIELDS), "rollup.metric_aliases")
    _assert_no_unknown_keys(
        cfg["rollup"]["metric_aliases"], set(METRIC_FIELDS), "rollup.metric_aliases", allow_unknown=False
    )
    week_names = {member.value for member in WeekStart}
    if cfg["rollup"]["week_start"] not in week_names:
        raise ConfigError(f"rollup.week_start must be one of: {', '.join(sorted(week_names))}")

    _assert_required_keys(cfg["output"], {"filename_template"}, "output")
    if "{year}" not in cfg["output"]["filename_template"]:
        raise ConfigError("output.filename_template must contain a {year} placeholder")

    _assert_required_keys(cfg["http"], {"connect_timeout", "read_timeout", "max_attempts"}, "http")
    if int(cfg["http"]["max_attempts"]) < 1:
        raise ConfigError("http.max_attempts must be at least 1")

    return cfg
