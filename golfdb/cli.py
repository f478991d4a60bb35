"""CLI entrypoint for the UK golf directory pipeline."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from golfdb.common.config_loader import ConfigBundle, load_all_configs
from golfdb.common.constants import EXIT_HARD_FAIL, EXIT_SUCCESS, STAGES
from golfdb.common.errors import PipelineError
from golfdb.common.ids import generate_run_id
from golfdb.common.logging import build_logger, close_logger, log_event
from golfdb.common.time_utils import parse_run_date
from golfdb.harvest.overpass_harvest import run_overpass_harvest
from golfdb.pipeline.build import run_build
from golfdb.pipeline.purity import run_purity
from golfdb.pipeline.reports import write_run_summary


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=[*STAGES, "all"])
    parser.add_argument("--run-date", default=None)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--offline", action="store_true", help="skip reverse geocoding")
    return parser.parse_args(argv)


def execute_stage(stage: str, bundle: ConfigBundle, data_dir: Path, run_id: str, run_date: str) -> dict:
    if stage == "harvest":
        payload = run_overpass_harvest(bundle.pipeline, data_dir, run_id)
        return {"rows_in": payload["element_count"], "rows_out": payload["row_count"], "source": payload["endpoint"]}
    if stage == "build":
        payload = run_build(
            bundle.pipeline,
            bundle.vocabularies,
            bundle.scoring_profile,
            data_dir,
            run_date,
        )
        counts = payload["counts"]
        return {
            "rows_in": payload["candidate_count"],
            "rows_out": counts["courses_total"] + counts["driving_ranges_total"],
        }
    if stage == "purify":
        payload = run_purity(bundle.pipeline, bundle.vocabularies, data_dir, run_date)
        return {"rows_in": payload["input_count"], "rows_out": payload["kept_count"]}
    raise ValueError(f"Unknown stage: {stage}")


def _with_offline(bundle: ConfigBundle) -> ConfigBundle:
    pipeline = {**bundle.pipeline, "nominatim": {**bundle.pipeline["nominatim"], "enabled": False}}
    return ConfigBundle(pipeline=pipeline, vocabularies=bundle.vocabularies, scoring_rules=bundle.scoring_rules)


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    run_date = parse_run_date(args.run_date)
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        bundle = load_all_configs(config_dir, overlay_config_dir=overlay_config_dir)
        if args.offline:
            bundle = _with_offline(bundle)
        stages = list(STAGES) if args.command == "all" else [args.command]

        for stage in stages:
            log_event(logger, "stage start", run_id=run_id, stage=stage, event="STAGE_START", status="ok")
            started = time.monotonic()
            try:
                counts = execute_stage(stage, bundle, data_dir, run_id, run_date)
            except PipelineError as exc:
                log_event(
                    logger,
                    f"stage failed: {exc}",
                    run_id=run_id,
                    stage=stage,
                    event="STAGE_FAIL",
                    status="error",
                    error_code=exc.error_code,
                )
                return EXIT_HARD_FAIL
            except Exception as exc:
                log_event(
                    logger,
                    f"unexpected failure: {exc!r}",
                    run_id=run_id,
                    stage=stage,
                    event="STAGE_FAIL",
                    status="error",
                    error_code="UNEXPECTED_ERROR",
                )
                return EXIT_HARD_FAIL
            log_event(
                logger,
                "stage end",
                run_id=run_id,
                stage=stage,
                event="STAGE_END",
                status="ok",
                duration_ms=int((time.monotonic() - started) * 1000),
                **counts,
            )

        write_run_summary(data_dir, run_id=run_id, run_date=run_date, pipeline_config=bundle.pipeline, stages=stages)
        return EXIT_SUCCESS
    finally:
        close_logger(logger)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL
    except Exception:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
