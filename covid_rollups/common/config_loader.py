"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from covid_rollups.common.errors import ConfigError
from covid_rollups.common.fs import read_yaml
from covid_rollups.common.models import RollupConfig, WeekStart
from covid_rollups.common.schema import validate_pipeline_config
from covid_rollups.common.time_utils import parse_calendar_date, source_years

CONFIG_FILENAME = "pipeline.yml"


@dataclass(frozen=True)
class ConfigBundle:
    rollup: RollupConfig
    source: dict
    output: dict
    http: dict

    @property
    def start_date(self) -> date:
        return parse_calendar_date(self.source["start_date"])

    def source_url(self, year: int) -> str:
        return self.source["url_template"].format(year=year)

    def output_filename(self, year: int) -> str:
        return self.output["filename_template"].format(year=year)

    def years(self, today: date) -> list[int]:
        return source_years(self.start_date, today, end_year=self.source.get("end_year"))


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    return _deep_merge(base, overlay)


def build_rollup_config(cfg: dict) -> RollupConfig:
    return RollupConfig(
        excluded_territories=frozenset(cfg["excluded_territories"]),
        metric_aliases=dict(cfg["metric_aliases"]),
        week_start=WeekStart(cfg["week_start"]),
    )


def load_config(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / CONFIG_FILENAME
    cfg = validate_pipeline_config(
        _load_yaml_with_overlay(config_dir / CONFIG_FILENAME, overlay_path),
        allow_unknown=allow_unknown,
    )
    if parse_calendar_date(cfg["source"]["start_date"]) is None:
        raise ConfigError(f"source.start_date is not a valid date: {cfg['source']['start_date']}")
    return ConfigBundle(
        rollup=build_rollup_config(cfg["rollup"]),
        source=cfg["source"],
        output=cfg["output"],
        http=cfg["http"],
    )


def resolve_years(target: str, available: list[int]) -> list[int]:
    if target == "all":
        return list(available)
    try:
        year = int(target)
    except ValueError as exc:
        raise ConfigError(f"Invalid year: {target}") from exc
    if year not in available:
        raise ConfigError(f"Year {year} is outside the configured source range")
    return [year]
