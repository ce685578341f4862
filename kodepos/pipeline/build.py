"""Build stage: staged pages in, six projection artifacts out."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from kodepos.common.config_loader import HarvestConfig
from kodepos.common.logging import log_event
from kodepos.pipeline.aggregate import aggregate_villages
from kodepos.pipeline.export import write_projections
from kodepos.pipeline.loader import load_province_names, load_regency_rows, load_village_rows
from kodepos.pipeline.resolver import RegencyResolver
from kodepos.pipeline.validate import check_contracts


def run_build(config: HarvestConfig, data_dir: Path, logger: logging.Logger, run_id: str) -> dict:
    started = time.monotonic()

    province_names = load_province_names(config, data_dir)
    regency_rows = load_regency_rows(config, data_dir, province_names)
    resolver = RegencyResolver.from_records(regency_rows)
    log_event(
        logger,
        "regency resolver built",
        run_id=run_id,
        stage="build",
        entity="regency",
        event="RESOLVER_BUILT",
        status="ok",
        rows_in=len(regency_rows),
        rows_out=len(resolver),
    )

    village_rows = load_village_rows(config, data_dir)
    result = aggregate_villages(
        village_rows,
        resolver,
        corrections=config.district_corrections(),
        logger=logger,
        run_id=run_id,
    )
    counts = result.counts()
    log_event(
        logger,
        "village rows aggregated",
        run_id=run_id,
        stage="build",
        entity="village",
        event="AGGREGATED",
        status="ok",
        rows_in=len(village_rows),
        rows_out=counts["villages"],
    )

    check_contracts(result)
    artifacts = write_projections(result, data_dir / "out", config.output)
    log_event(
        logger,
        "projections written",
        run_id=run_id,
        stage="build",
        event="ARTIFACTS_WRITTEN",
        status="ok",
        duration_ms=int((time.monotonic() - started) * 1000),
        rows_out=len(artifacts),
    )

    return {
        "counts": counts,
        "zip_conflicts": result.zip_conflicts,
        "artifacts": artifacts,
    }
