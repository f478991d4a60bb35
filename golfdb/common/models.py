"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

GEOMETRY_BY_OSM_TYPE = {
    "relation": "area",
    "way": "line",
    "node": "point",
}


@dataclass(frozen=True)
class CandidateRecord:
    name: str
    lat: float
    lng: float
    tags: dict[str, str] = field(default_factory=dict)
    geometry: str = "point"
    osm_type: str | None = None
    osm_id: int | None = None
    holes: int | None = None
    par: str = ""
    website: str = ""
    phone: str = ""

    @property
    def osm_ref(self) -> str:
        return f"{self.osm_type}/{self.osm_id}"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "CandidateRecord":
        return cls(
            name=str(row.get("name") or ""),
            lat=row.get("lat"),
            lng=row.get("lng"),
            tags={str(k): str(v) for k, v in (row.get("tags") or {}).items()},
            geometry=row.get("geometry") or GEOMETRY_BY_OSM_TYPE.get(row.get("osm_type") or "", "point"),
            osm_type=row.get("osm_type"),
            osm_id=row.get("osm_id"),
            holes=row.get("holes"),
            par=str(row.get("par") or ""),
            website=str(row.get("website") or ""),
            phone=str(row.get("phone") or ""),
        )


@dataclass(frozen=True)
class ClassificationResult:
    entity_type: str
    needs_manual_review: bool
    reason: str
