"""CLI entrypoint for the weekly county rolling-average pipeline."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from covid_rollups.common.config_loader import ConfigBundle, load_config, resolve_years
from covid_rollups.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS, STAGES
from covid_rollups.common.errors import PipelineError
from covid_rollups.common.http import HttpClient, client_from_config
from covid_rollups.common.ids import generate_run_id
from covid_rollups.common.logging import build_logger, log_event
from covid_rollups.common.time_utils import parse_run_date
from covid_rollups.harvest.download import run_download
from covid_rollups.harvest.runner import run_years
from covid_rollups.pipeline.reports import write_run_summary
from covid_rollups.pipeline.weekly_rollup import run_weekly_rollup


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=[*STAGES, "all"])
    parser.add_argument("--year", default="all")
    parser.add_argument("--run-date", default=None)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def execute_stage(
    stage: str,
    years: list[int],
    bundle: ConfigBundle,
    data_dir: Path,
    run_date: str,
    *,
    client: HttpClient,
    logger: logging.Logger,
    run_id: str,
    strict: bool,
) -> dict:
    if stage == "download":
        return run_years(
            stage,
            years,
            lambda year: run_download(year, bundle, data_dir, client),
            logger=logger,
            run_id=run_id,
            strict=strict,
        )
    if stage == "process":
        return run_years(
            stage,
            years,
            lambda year: run_weekly_rollup(year, bundle, data_dir, run_date),
            logger=logger,
            run_id=run_id,
            strict=strict,
        )
    raise ValueError(f"Unknown stage: {stage}")


def run_command(args: argparse.Namespace, client: HttpClient | None = None) -> int:
    run_id = args.run_id or generate_run_id()
    run_date = parse_run_date(args.run_date)
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        bundle = load_config(config_dir, overlay_config_dir=overlay_config_dir)
        years = resolve_years(args.year, bundle.years(date.fromisoformat(run_date)))
    except PipelineError as exc:
        log_event(logger, str(exc), run_id=run_id, event="CONFIG_FAIL", status="error", error_code=exc.error_code)
        return EXIT_HARD_FAIL
    stages = STAGES if args.command == "all" else (args.command,)

    had_partial_failure = False
    owns_client = client is None
    client = client or client_from_config(bundle.http)

    try:
        for stage in stages:
            log_event(logger, "stage start", run_id=run_id, stage=stage, event="STAGE_START", status="ok")
            try:
                outcome = execute_stage(
                    stage,
                    years,
                    bundle,
                    data_dir,
                    run_date,
                    client=client,
                    logger=logger,
                    run_id=run_id,
                    strict=args.strict,
                )
            except PipelineError as exc:
                log_event(
                    logger,
                    f"stage {stage} failed",
                    run_id=run_id,
                    stage=stage,
                    event="STAGE_FAIL",
                    status="error",
                    error_code=exc.error_code,
                )
                return EXIT_HARD_FAIL
            if outcome["failed_years"]:
                had_partial_failure = True
            log_event(logger, "stage end", run_id=run_id, stage=stage, event="STAGE_END", status="ok")
    finally:
        if owns_client:
            client.close()

    if "process" in stages:
        write_run_summary(data_dir, run_id=run_id, run_date=run_date, years=years)
    if had_partial_failure:
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL
    except Exception:
        logging.getLogger("covid_rollups").exception("unexpected failure")
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
