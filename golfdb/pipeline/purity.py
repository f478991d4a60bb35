"""Purity pass: audit built entities so only real golf courses stay published.

The pass is a deterministic first-match cascade over the entity name, point
and structured facts. It annotates audit fields and drops deprecated extras
placeholders; it never touches identity, address or geo fields.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from golfdb.common.errors import ContractError, MissingInputError
from golfdb.common.fs import read_json, write_json
from golfdb.common.geo import is_valid_point
from golfdb.common.models import ClassificationResult
from golfdb.common.text import has_digits, lowered
from golfdb.pipeline.reports import PURITY_REPORT_FILES, build_purity_report
from golfdb.pipeline.rules import Rule, first_match, first_token_in

PURITY_NOTE = "Purity pass applied: driving ranges and non courses removed from site output."
NO_GOLF_SIGNAL = ClassificationResult(entity_type="not_course", needs_manual_review=False, reason="no_golf_signal")


@dataclass(frozen=True)
class PurityInput:
    name: str
    name_l: str
    lat: Any
    lng: Any
    holes: list
    par: str

    @classmethod
    def from_entity(cls, entity: dict) -> "PurityInput":
        name = str(entity.get("name") or "").strip()
        geo = entity.get("geo") if isinstance(entity.get("geo"), dict) else {}
        holes = entity.get("holes")
        return cls(
            name=name,
            name_l=name.lower(),
            lat=geo.get("lat"),
            lng=geo.get("lng"),
            holes=holes if isinstance(holes, list) else [],
            par=str(entity.get("par") or "unknown"),
        )


class PurityClassifier:
    def __init__(self, vocabulary: dict) -> None:
        self.vocabulary = vocabulary
        self.deprecated_extras = frozenset(vocabulary["deprecated_extras"])
        self.rules: list[Rule[PurityInput]] = self._build_rules(vocabulary)

    @staticmethod
    def _build_rules(vocab: dict) -> list[Rule[PurityInput]]:
        closed_patterns = [re.compile(pattern, re.IGNORECASE) for pattern in vocab["closed_patterns"]]
        hard_exclude = [lowered(token) for token in vocab["hard_exclude_tokens"]]
        non_venue = [lowered(token) for token in vocab["non_venue_tokens"]]
        strong_markers = [lowered(token) for token in vocab["strong_markers"]]
        generic_names = [lowered(token) for token in vocab["generic_course_names"]]

        def bad_geo(subject: PurityInput) -> bool:
            return not is_valid_point(subject.lat, subject.lng)

        def closed_name(subject: PurityInput) -> bool:
            return any(pattern.search(subject.name) for pattern in closed_patterns)

        def hard_exclude_token(subject: PurityInput) -> str | None:
            return first_token_in(subject.name_l, hard_exclude)

        def strong_marker(subject: PurityInput) -> str | None:
            return first_token_in(subject.name_l, strong_markers)

        def non_venue_token(subject: PurityInput) -> str | None:
            if strong_marker(subject):
                return None
            return first_token_in(subject.name_l, non_venue)

        def course_facts(subject: PurityInput) -> bool:
            return bool(subject.holes) or (subject.par != "unknown" and has_digits(subject.par))

        def generic_course_name(subject: PurityInput) -> bool:
            return any(subject.name_l == generic or generic in subject.name_l for generic in generic_names)

        def golf_word(subject: PurityInput) -> bool:
            return "golf" in subject.name_l

        return [
            Rule("missing_or_bad_geo", bad_geo, "not_course", "missing_or_bad_geo"),
            Rule("name_indicates_closed", closed_name, "closed_course", "name_indicates_closed"),
            Rule("hard_exclude_token", hard_exclude_token, "not_course", "hard_exclude_token:{token}"),
            Rule("non_venue_token", non_venue_token, "not_course", "non_venue_token:{token}"),
            Rule("strong_name_marker", strong_marker, "course", "strong_name_marker"),
            Rule("has_course_facts", course_facts, "course", "has_course_facts"),
            Rule("generic_course_name", generic_course_name, "course", "generic_course_name", True),
            Rule(
                "golf_word_without_strong_marker",
                golf_word,
                "course",
                "golf_word_without_strong_marker",
                True,
            ),
        ]

    def classify(self, entity: dict) -> ClassificationResult:
        return first_match(self.rules, PurityInput.from_entity(entity), NO_GOLF_SIGNAL)

    def clean_extras(self, extras: Any) -> list:
        values = extras if isinstance(extras, list) else []
        return [value for value in values if value and str(value) not in self.deprecated_extras]

    def purify(self, entity: dict) -> tuple[dict, ClassificationResult]:
        """Classified copy of ``entity``; the input dict is left untouched."""
        result = self.classify(entity)
        out = dict(entity)
        out["extras"] = self.clean_extras(entity.get("extras"))
        out["entity_type"] = result.entity_type
        out["needs_manual_review"] = bool(result.needs_manual_review)
        out["purity_reason"] = result.reason
        return out, result


def run_purity(
    pipeline_config: dict,
    vocabularies: dict,
    data_dir: Path,
    run_date: str,
) -> dict:
    output_cfg = pipeline_config["output"]
    in_path = data_dir / "out" / output_cfg["courses_filename"]
    if not in_path.exists():
        raise MissingInputError(f"Missing purity input: {in_path}")

    raw = read_json(in_path)
    if not isinstance(raw, dict):
        raise ContractError(f"Courses file is not a JSON object: {in_path}")
    courses = raw.get("courses")
    if not isinstance(courses, list):
        courses = []
    courses = [entity for entity in courses if isinstance(entity, dict)]

    classifier = PurityClassifier(vocabularies["purity"])
    outcomes = [classifier.purify(entity) for entity in courses]
    report = build_purity_report(outcomes)
    kept = [entity for entity, result in outcomes if result.entity_type == "course"]

    counts = dict(raw.get("counts") or {})
    counts.update(
        {
            "courses_total_original": len(courses),
            "courses_total_pure": len(kept),
            "excluded_total": report["report"]["summary"]["excluded_total"],
            "closed_total": report["report"]["summary"]["closed_courses"],
            "manual_review_total": report["report"]["summary"]["manual_review"],
        }
    )
    notes = str(raw.get("notes") or "")
    if PURITY_NOTE not in notes:
        notes = f"{notes} | {PURITY_NOTE}" if notes else PURITY_NOTE
    out_payload = {
        **raw,
        "schema_version": raw.get("schema_version") or pipeline_config["schema_version"],
        "purity_version": pipeline_config["purity_version"],
        "purified_on": run_date,
        "counts": counts,
        "notes": notes,
        "courses": kept,
    }

    write_json(data_dir / "out" / output_cfg["pure_filename"], out_payload)
    reports_dir = data_dir / "out" / "reports"
    write_json(reports_dir / PURITY_REPORT_FILES["report"], report["report"])
    write_json(reports_dir / PURITY_REPORT_FILES["excluded"], report["excluded"])
    write_json(reports_dir / PURITY_REPORT_FILES["manual"], report["manual"])

    return {
        "input_count": len(courses),
        "kept_count": len(kept),
        "report": report["report"],
    }
