"""Build stage: harvested candidates to draft canonical course entities."""

from __future__ import annotations

import logging
from pathlib import Path

from golfdb.common.constants import NATIONS
from golfdb.common.errors import MissingInputError
from golfdb.common.fs import read_json, write_json
from golfdb.common.geo import is_valid_point
from golfdb.common.ids import slug_id
from golfdb.common.models import CandidateRecord, ClassificationResult
from golfdb.common.scoring import ScoringProfile
from golfdb.harvest.nominatim import CACHE_PATH, ReverseGeocoder
from golfdb.harvest.overpass_harvest import CANDIDATES_PATH
from golfdb.pipeline.address import (
    build_address,
    has_address_tags,
    nation_from_address,
    needs_geocode,
    public_address,
)
from golfdb.pipeline.attributes import course_attributes
from golfdb.pipeline.dedup import DedupConfig, Representative, cluster_candidates
from golfdb.pipeline.entity_kind import PERSISTED_KINDS, EntityKindClassifier
from golfdb.pipeline.overrides import apply_overrides, load_overrides

logger = logging.getLogger(__name__)

PLACEHOLDER_EXTRAS = ["drinking_unknown", "smoking_unknown"]
BUILD_NOTES = "Facts from OSM plus opinion tags via heuristics. Use overrides.json for manual fixes."


def load_candidates(data_dir: Path) -> tuple[list[CandidateRecord], int]:
    path = data_dir / CANDIDATES_PATH
    if not path.exists():
        raise MissingInputError(f"Missing harvest output: {path}")
    rows = read_json(path).get("rows", [])

    candidates: list[CandidateRecord] = []
    rejected = 0
    for row in rows:
        candidate = CandidateRecord.from_dict(row)
        if not candidate.name or not is_valid_point(candidate.lat, candidate.lng):
            rejected += 1
            continue
        candidates.append(candidate)
    return candidates, rejected


def build_entity(
    rep: Representative,
    kind: ClassificationResult,
    geocoded: dict | None,
) -> dict:
    candidate = rep.candidate
    tags = candidate.tags
    address = build_address(tags, geocoded)
    is_course = kind.entity_type == "course"

    entity = {
        "id": slug_id(candidate.name, address["city"], address["county"]),
        "name": candidate.name,
        "kind": kind.entity_type,
        "kind_reason": kind.reason,
        "nation": nation_from_address(address),
        "address": public_address(address),
        "links": {
            "official": candidate.website or "unknown",
            "affiliate": {"provider": "unknown", "url": "unknown"},
        },
        "geo": {"lat": candidate.lat, "lng": candidate.lng},
        "holes": [{"count": candidate.holes, "label": "Main"}] if candidate.holes else [],
        "par": candidate.par or "unknown",
        "course_type": [],
        "access": ["unknown"],
        "vibe": [],
        "dress_code": [],
        "difficulty": [],
        "facilities": [],
        "extras": list(PLACEHOLDER_EXTRAS) if is_course else [],
        "price_band": [],
        "source": {
            "osm": {"id": candidate.osm_id, "type": candidate.osm_type},
            "has_addr_tags": has_address_tags(tags),
            "duplicates": list(rep.absorbed),
        },
    }
    if is_course:
        entity.update(course_attributes(tags, candidate.name, candidate.holes))
    return entity


def driving_range_record(entity: dict) -> dict:
    keys = ("id", "name", "nation", "address", "links", "geo")
    return {**{key: entity[key] for key in keys}, "kind": "driving_range"}


def _geocoder_for(pipeline_config: dict, data_dir: Path) -> ReverseGeocoder | None:
    nominatim_cfg = pipeline_config["nominatim"]
    if not nominatim_cfg.get("enabled"):
        return None
    return ReverseGeocoder(nominatim_cfg, data_dir / CACHE_PATH)


def run_build(
    pipeline_config: dict,
    vocabularies: dict,
    scoring_profile: dict,
    data_dir: Path,
    run_date: str,
    geocoder: ReverseGeocoder | None = None,
) -> dict:
    candidates, rejected = load_candidates(data_dir)
    dedup = cluster_candidates(
        candidates,
        scorer=ScoringProfile.from_config(scoring_profile).score,
        config=DedupConfig.from_config(pipeline_config["dedup"]),
    )

    output_cfg = pipeline_config["output"]
    overrides = load_overrides(data_dir / output_cfg["overrides_filename"])
    classifier = EntityKindClassifier(vocabularies["entity_kind"])

    owns_geocoder = geocoder is None
    geocoder = geocoder or _geocoder_for(pipeline_config, data_dir)

    courses: list[dict] = []
    ranges: list[dict] = []
    dropped_by_reason: dict[str, int] = {}
    seen_ids: set[str] = set()
    duplicate_ids = 0
    try:
        for rep in dedup.kept:
            kind = classifier.classify(rep.candidate)
            if kind.entity_type not in PERSISTED_KINDS:
                dropped_by_reason[kind.reason] = dropped_by_reason.get(kind.reason, 0) + 1
                continue

            geocoded = None
            if geocoder is not None and needs_geocode(rep.candidate.tags):
                geocoded = geocoder.reverse(rep.candidate.lat, rep.candidate.lng)

            entity = apply_overrides(build_entity(rep, kind, geocoded), overrides)
            if entity["id"] in seen_ids:
                duplicate_ids += 1
                logger.warning("duplicate entity id %s (%s)", entity["id"], rep.candidate.osm_ref)
            seen_ids.add(entity["id"])

            if entity.get("kind") == "driving_range":
                ranges.append(driving_range_record(entity))
            else:
                courses.append(entity)
    finally:
        if owns_geocoder and geocoder is not None:
            geocoder.close()

    by_nation: dict[str, list[dict]] = {nation: [] for nation in NATIONS}
    for course in courses:
        nation = course.get("nation") if course.get("nation") in by_nation else "england"
        by_nation[nation].append(course)

    meta = {
        "schema_version": pipeline_config["schema_version"],
        "generated_on": run_date,
        "counts": {
            "courses_total": len(courses),
            "driving_ranges_total": len(ranges),
            "by_nation": {nation: len(items) for nation, items in by_nation.items()},
        },
        "notes": BUILD_NOTES,
    }

    out_dir = data_dir / "out"
    write_json(out_dir / output_cfg["courses_filename"], {**meta, "courses": courses})
    write_json(out_dir / output_cfg["driving_ranges_filename"], {**meta, "driving_ranges": ranges})
    for nation, items in by_nation.items():
        filename = output_cfg["nation_filename_template"].format(nation=nation)
        write_json(out_dir / filename, {**meta, "nation": nation, "courses": items})
    write_json(out_dir / output_cfg["index_filename"], meta)

    return {
        "candidate_count": len(candidates),
        "rejected_candidates": rejected,
        "dedup": {
            "groups": dedup.group_count,
            "kept": len(dedup.kept),
            "discarded": dedup.discarded,
            "replaced": dedup.replaced,
        },
        "dropped_by_reason": dict(sorted(dropped_by_reason.items())),
        "duplicate_ids": duplicate_ids,
        "geocoder": geocoder.stats() if geocoder is not None else None,
        "counts": meta["counts"],
    }
