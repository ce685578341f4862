"""CLI entrypoint for the kodepos harvest pipeline."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from kodepos.common.config_loader import load_config
from kodepos.common.constants import EXIT_HARD_FAIL, EXIT_SUCCESS, STAGES
from kodepos.common.errors import PipelineError
from kodepos.common.logging import build_logger, log_event
from kodepos.common.time_utils import generate_run_id
from kodepos.harvest.runner import run_harvest
from kodepos.pipeline.build import run_build
from kodepos.pipeline.reports import write_run_summary


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", nargs="?", default="all", choices=[*STAGES, "all"])
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    return parser.parse_args(argv)


def _log_stage_failure(logger, run_id: str, stage: str, message: str, error_code: str) -> int:
    log_event(
        logger,
        message,
        run_id=run_id,
        stage=stage,
        event="STAGE_FAIL",
        status="error",
        error_code=error_code,
    )
    return EXIT_HARD_FAIL


def run_command(args: argparse.Namespace, *, http_client=None) -> int:
    run_id = args.run_id or generate_run_id()
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        config = load_config(config_dir, overlay_config_dir=overlay_config_dir)
    except PipelineError as exc:
        log_event(logger, str(exc), run_id=run_id, event="CONFIG_FAIL", status="error", error_code=exc.error_code)
        return EXIT_HARD_FAIL

    stages = list(STAGES) if args.command == "all" else [args.command]
    harvest: dict | None = None
    build: dict = {}

    for stage in stages:
        log_event(logger, "stage start", run_id=run_id, stage=stage, event="STAGE_START", status="ok")
        try:
            if stage == "fetch":
                harvest = run_harvest(config, data_dir, logger, run_id, http_client=http_client)
            elif stage == "build":
                build = run_build(config, data_dir, logger, run_id)
            else:
                raise ValueError(f"Unknown stage: {stage}")
        except PipelineError as exc:
            return _log_stage_failure(
                logger, run_id, stage, f"stage {stage} failed at {exc.key or '-'}: {exc}", exc.error_code
            )
        except Exception as exc:
            return _log_stage_failure(
                logger, run_id, stage, f"unexpected failure in stage {stage}: {exc}", "UNEXPECTED_ERROR"
            )
        log_event(logger, "stage end", run_id=run_id, stage=stage, event="STAGE_END", status="ok")

    try:
        write_run_summary(
            data_dir,
            run_id,
            stages=stages,
            harvest=harvest,
            counts=build.get("counts"),
            zip_conflicts=build.get("zip_conflicts", 0),
            artifacts=build.get("artifacts"),
        )
    except PipelineError as exc:
        return _log_stage_failure(
            logger, run_id, "report", f"run summary failed at {exc.key or '-'}: {exc}", exc.error_code
        )
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
