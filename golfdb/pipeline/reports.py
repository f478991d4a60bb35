"""Purity report aggregation and run summary."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Iterable

from golfdb.common.fs import read_json, write_json
from golfdb.common.models import ClassificationResult
from golfdb.common.postcode import looks_like_uk_postcode

SAMPLE_SIZE = 25
PURITY_REPORT_FILES = {
    "report": "purity_report.json",
    "excluded": "purity_excluded.json",
    "manual": "purity_manual_review.json",
}


def _is_unknown(value) -> bool:
    return not value or value == "unknown"


def _address_quality(kept: list[dict]) -> dict[str, int]:
    bad_postcode = 0
    missing_city = 0
    for entity in kept:
        address = entity.get("address") if isinstance(entity.get("address"), dict) else {}
        postcode = address.get("postcode") or ""
        if not _is_unknown(postcode) and not looks_like_uk_postcode(str(postcode)):
            bad_postcode += 1
        if _is_unknown(address.get("city")):
            missing_city += 1
    return {
        "kept_bad_postcode_count": bad_postcode,
        "kept_missing_city_count": missing_city,
    }


def build_purity_report(outcomes: Iterable[tuple[dict, ClassificationResult]]) -> dict:
    """Aggregate purity outcomes; classification already happened upstream."""
    kept: list[dict] = []
    excluded: list[dict] = []
    manual: list[dict] = []
    closed_count = 0
    breakdown: Counter[str] = Counter()
    total = 0

    for entity, result in outcomes:
        total += 1
        ref = {"id": entity.get("id"), "name": entity.get("name")}
        if result.entity_type == "course":
            kept.append(entity)
            if result.needs_manual_review:
                manual.append({**ref, "reason": result.reason})
                breakdown["course_manual_review"] += 1
            else:
                breakdown["course_kept"] += 1
            continue

        excluded.append({**ref, "entity_type": result.entity_type, "reason": result.reason})
        if result.entity_type == "closed_course":
            closed_count += 1
            breakdown["closed_course"] += 1
        else:
            breakdown[f"excluded:{result.reason}"] += 1

    report = {
        "summary": {
            "total_records": total,
            "courses_kept": len(kept),
            "excluded_total": len(excluded),
            "closed_courses": closed_count,
            "manual_review": len(manual),
        },
        "quality_flags": _address_quality(kept),
        "breakdown": dict(sorted(breakdown.items())),
        "sample": {
            "excluded_first_25": excluded[:SAMPLE_SIZE],
            "manual_first_25": manual[:SAMPLE_SIZE],
        },
    }
    return {"report": report, "excluded": excluded, "manual": manual}


def write_run_summary(
    data_dir: Path,
    run_id: str,
    run_date: str,
    pipeline_config: dict,
    stages: list[str],
) -> Path:
    out_dir = data_dir / "out"
    index_path = out_dir / pipeline_config["output"]["index_filename"]
    purity_path = out_dir / "reports" / PURITY_REPORT_FILES["report"]

    warnings: list[str] = []
    errors: list[str] = []
    build_counts: dict = {}
    purity_summary: dict = {}
    quality_flags: dict = {}

    if "build" in stages:
        if index_path.exists():
            build_counts = read_json(index_path).get("counts", {})
        else:
            errors.append("BUILD_INDEX_MISSING")

    if "purify" in stages:
        if purity_path.exists():
            purity = read_json(purity_path)
            purity_summary = purity.get("summary", {})
            quality_flags = purity.get("quality_flags", {})
        else:
            errors.append("PURITY_REPORT_MISSING")

    if int(purity_summary.get("manual_review", 0)) > 0:
        warnings.append("MANUAL_REVIEW_PENDING")
    if int(quality_flags.get("kept_bad_postcode_count", 0)) > 0:
        warnings.append("KEPT_BAD_POSTCODES")
    if int(quality_flags.get("kept_missing_city_count", 0)) > 0:
        warnings.append("KEPT_MISSING_CITIES")

    status = "success"
    if errors:
        status = "error"
    elif warnings:
        status = "partial"

    summary_path = out_dir / "reports" / "run_summary.json"
    payload = {
        "run_id": run_id,
        "run_date": run_date,
        "status": status,
        "stages": stages,
        "build": build_counts,
        "purity": purity_summary,
        "quality_flags": quality_flags,
        "warnings": warnings,
        "errors": errors,
    }
    write_json(summary_path, payload)
    return summary_path
