"""Overpass harvest stage implementation."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from golfdb.common.errors import StageError
from golfdb.common.fs import write_json
from golfdb.common.http import HttpClient, HttpRequestError, TimeoutConfig
from golfdb.common.models import GEOMETRY_BY_OSM_TYPE, CandidateRecord

logger = logging.getLogger(__name__)

CANDIDATES_PATH = Path("raw") / "overpass" / "uk_golf_candidates.json"

# Subtypes filtered server-side from the course clauses; driving ranges are
# fetched separately so the build stage can publish them on their own.
_EXCLUDED_GOLF_VALUES = (
    "pitch_and_putt",
    "miniature_golf",
    "practice",
    "driving_range",
    "adventure_golf",
    "disc_golf",
    "footgolf",
)

HOLE_TAGS = ("golf:holes", "holes", "golf_holes")
_HOLE_COUNT_RE = re.compile(r"[0-9]+")
PAR_TAGS = ("golf:par", "par")
WEBSITE_TAGS = ("website", "contact:website", "url")
PHONE_TAGS = ("phone", "contact:phone")


def pick_tag(tags: dict, keys) -> str:
    for key in keys:
        value = tags.get(key)
        if value:
            return str(value)
    return ""


def build_overpass_query(overpass_config: dict) -> str:
    timeout = int(overpass_config.get("timeout_seconds", 180))
    iso_code = overpass_config["area_iso_code"]
    golf_filters = "".join(f'["golf"!="{value}"]' for value in _EXCLUDED_GOLF_VALUES)
    return (
        f"[out:json][timeout:{timeout}];\n"
        f'area["ISO3166-1"="{iso_code}"][admin_level=2]->.searchArea;\n'
        "(\n"
        f'  nwr["leisure"="golf_course"]["leisure"!="miniature_golf"]{golf_filters}(area.searchArea);\n'
        f'  nwr["golf"="course"]{golf_filters}(area.searchArea);\n'
        '  nwr["golf"="driving_range"](area.searchArea);\n'
        '  nwr["leisure"="driving_range"](area.searchArea);\n'
        ");\n"
        "out center tags;"
    )


def candidate_from_element(element: dict) -> CandidateRecord | None:
    """Turn one Overpass element into a candidate, or None when unusable."""
    tags = {str(k): str(v) for k, v in (element.get("tags") or {}).items()}
    name = tags.get("name") or tags.get("name:en") or ""
    if not name or name == "unknown":
        return None

    center = element.get("center") or {}
    lat = element.get("lat", center.get("lat"))
    lng = element.get("lon", center.get("lon"))
    if lat is None or lng is None:
        return None

    holes_raw = pick_tag(tags, HOLE_TAGS)
    osm_type = element.get("type")
    return CandidateRecord(
        name=name,
        lat=float(lat),
        lng=float(lng),
        tags=tags,
        geometry=GEOMETRY_BY_OSM_TYPE.get(osm_type, "point"),
        osm_type=osm_type,
        osm_id=element.get("id"),
        holes=int(holes_raw) if _HOLE_COUNT_RE.fullmatch(holes_raw) else None,
        par=pick_tag(tags, PAR_TAGS),
        website=pick_tag(tags, WEBSITE_TAGS),
        phone=pick_tag(tags, PHONE_TAGS),
    )


def fetch_overpass(client: HttpClient, overpass_config: dict, query: str) -> tuple[str, dict]:
    """POST the query to each mirror in turn, returning the first success."""
    failures: list[str] = []
    for endpoint in overpass_config["endpoints"]:
        try:
            payload = client.post_form_json(
                endpoint,
                service="overpass",
                data={"data": query},
                timeout=TimeoutConfig(connect=20, read=float(overpass_config.get("timeout_seconds", 180))),
                cooldown=(2.0, 5.0),
            )
        except HttpRequestError as exc:
            logger.warning("overpass endpoint failed: %s (%s)", endpoint, exc)
            failures.append(endpoint)
            continue
        return endpoint, payload
    raise StageError(f"All Overpass endpoints failed: {', '.join(failures)}")


def run_overpass_harvest(
    pipeline_config: dict,
    data_dir: Path,
    run_id: str,
    http_client: HttpClient | None = None,
) -> dict:
    overpass_cfg = pipeline_config["overpass"]
    query = build_overpass_query(overpass_cfg)

    owns_client = http_client is None
    client = http_client or HttpClient()
    try:
        endpoint, payload = fetch_overpass(client, overpass_cfg, query)
    finally:
        if owns_client:
            client.close()

    elements = payload.get("elements", [])
    rows: list[CandidateRecord] = []
    seen_refs: set[str] = set()
    for element in elements:
        candidate = candidate_from_element(element)
        if candidate is None:
            continue
        if candidate.osm_ref in seen_refs:
            continue
        seen_refs.add(candidate.osm_ref)
        rows.append(candidate)

    out_payload = {
        "run_id": run_id,
        "source": "overpass",
        "endpoint": endpoint,
        "element_count": len(elements),
        "row_count": len(rows),
        "rows": [row.to_dict() for row in rows],
    }
    write_json(data_dir / CANDIDATES_PATH, out_payload)
    return out_payload
