"""Per-year orchestration with fail-soft semantics."""

from __future__ import annotations

import logging
import time
from typing import Callable

from covid_rollups.common.errors import PipelineError, StageError
from covid_rollups.common.logging import log_event


def run_years(
    stage: str,
    years: list[int],
    run_year: Callable[[int], dict],
    *,
    logger: logging.Logger,
    run_id: str,
    strict: bool = False,
) -> dict:
    """Run ``run_year`` for every year, collecting failures instead of stopping.

    Raises StageError when every year failed; strict mode re-raises the first failure.
    """
    failures: list[int] = []
    results: dict[int, dict] = {}

    for year in years:
        started = time.monotonic()
        try:
            results[year] = run_year(year)
        except PipelineError as exc:
            failures.append(year)
            log_event(
                logger,
                f"{stage} failed for {year}: {exc}",
                run_id=run_id,
                stage=stage,
                year=year,
                event="YEAR_FAIL",
                status="error",
                error_code=exc.error_code,
            )
            if strict or exc.error_code == "CONTRACT_ERROR":
                raise
            continue
        except Exception as exc:
            failures.append(year)
            log_event(
                logger,
                f"unexpected {stage} failure for {year}: {exc!r}",
                run_id=run_id,
                stage=stage,
                year=year,
                event="YEAR_FAIL",
                status="error",
                error_code="UNEXPECTED_ERROR",
            )
            if strict:
                raise
            continue
        log_event(
            logger,
            f"{stage} finished for {year}",
            run_id=run_id,
            stage=stage,
            year=year,
            event="YEAR_END",
            status="ok",
            duration_ms=int((time.monotonic() - started) * 1000),
            rows_in=results[year].get("rows_in"),
            rows_out=results[year].get("rows_out"),
        )

    if years and len(failures) >= len(years):
        raise StageError(f"All years failed for stage {stage}")

    return {
        "stage": stage,
        "run_id": run_id,
        "results": results,
        "failed_years": failures,
    }
