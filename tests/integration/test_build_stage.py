from __future__ import annotations

import json
from pathlib import Path

import pytest

from golfdb.common.config_loader import load_all_configs
from golfdb.common.errors import MissingInputError
from golfdb.common.fs import write_json
from golfdb.pipeline.build import run_build

BUNDLE = load_all_configs(Path("config"))
OFFLINE_PIPELINE = {**BUNDLE.pipeline, "nominatim": {**BUNDLE.pipeline["nominatim"], "enabled": False}}
OUTPUT = BUNDLE.pipeline["output"]


class FakeGeocoder:
    def __init__(self):
        self.calls: list[tuple[float, float]] = []

    def reverse(self, lat, lng):
        self.calls.append((lat, lng))
        return {
            "address": {
                "town": "Stoke-on-Trent",
                "county": "Staffordshire",
                "state": "England",
                "postcode": "ST4 1AA",
            }
        }

    def stats(self):
        return {"lookups": len(self.calls), "cache_hits": 0, "failures": 0}


def _build(data_dir: Path, pipeline: dict = OFFLINE_PIPELINE, geocoder=None) -> dict:
    return run_build(pipeline, BUNDLE.vocabularies, BUNDLE.scoring_profile, data_dir, "2026-02-17", geocoder=geocoder)


def _read(data_dir: Path, filename: str) -> dict:
    return json.loads((data_dir / "out" / filename).read_text(encoding="utf-8"))


@pytest.mark.integration
def test_build_dedupes_classifies_and_splits_outputs(harvested_data_dir: Path):
    summary = _build(harvested_data_dir)

    assert summary["candidate_count"] == 8
    assert summary["rejected_candidates"] == 1
    assert summary["dedup"] == {"groups": 7, "kept": 7, "discarded": 1, "replaced": 0}
    assert summary["dropped_by_reason"] == {"no_course_signal": 1, "nonstandard_golf_subtype:adventure_golf": 1}
    assert summary["counts"] == {
        "courses_total": 4,
        "driving_ranges_total": 1,
        "by_nation": {"england": 3, "scotland": 1, "wales": 0, "northern_ireland": 0},
    }
    assert summary["geocoder"] is None

    courses = _read(harvested_data_dir, OUTPUT["courses_filename"])
    assert courses["generated_on"] == "2026-02-17"
    assert [course["name"] for course in courses["courses"]] == [
        "Royal Oak Golf Club",
        "Seaside Links",
        "Old Mill Golf Club (closed)",
        "Hilltop Golf",
    ]

    ranges = _read(harvested_data_dir, OUTPUT["driving_ranges_filename"])
    assert [item["name"] for item in ranges["driving_ranges"]] == ["Topgolf Watford"]
    assert ranges["driving_ranges"][0]["kind"] == "driving_range"
    assert "extras" not in ranges["driving_ranges"][0]

    scotland = _read(harvested_data_dir, OUTPUT["nation_filename_template"].format(nation="scotland"))
    assert [course["name"] for course in scotland["courses"]] == ["Seaside Links"]

    index = _read(harvested_data_dir, OUTPUT["index_filename"])
    assert "courses" not in index
    assert index["counts"] == summary["counts"]


@pytest.mark.integration
def test_build_entity_shape_for_kept_representative(harvested_data_dir: Path):
    _build(harvested_data_dir)
    royal_oak = _read(harvested_data_dir, OUTPUT["courses_filename"])["courses"][0]

    assert royal_oak["id"] == "uk_royal_oak_golf_club_london_greater_london"
    assert royal_oak["kind"] == "course"
    assert royal_oak["kind_reason"] == "course_tag"
    assert royal_oak["nation"] == "england"
    assert royal_oak["address"] == {
        "street": "unknown",
        "city": "London",
        "county": "Greater London",
        "postcode": "SW1A 1AA",
        "country": "UK",
    }
    assert royal_oak["geo"] == {"lat": 51.5, "lng": -0.1}
    assert royal_oak["holes"] == [{"count": 18, "label": "Main"}]
    assert royal_oak["par"] == "72"
    assert royal_oak["links"]["official"] == "https://royaloak.example"
    assert royal_oak["extras"] == ["drinking_unknown", "smoking_unknown"]
    assert royal_oak["source"] == {
        "osm": {"id": 1001, "type": "relation"},
        "has_addr_tags": True,
        "duplicates": ["node/1002"],
    }
    assert royal_oak["course_type"] == ["standard"]
    assert royal_oak["difficulty"] == ["medium"]


@pytest.mark.integration
def test_build_geocodes_only_incomplete_addresses(harvested_data_dir: Path):
    geocoder = FakeGeocoder()

    summary = _build(harvested_data_dir, pipeline=BUNDLE.pipeline, geocoder=geocoder)

    # Topgolf Watford and Hilltop Golf lack a full tagged address.
    assert geocoder.calls == [(51.66, -0.39), (53.0, -2.0)]
    assert summary["geocoder"]["lookups"] == 2
    hilltop = _read(harvested_data_dir, OUTPUT["courses_filename"])["courses"][3]
    assert hilltop["id"] == "uk_hilltop_golf_stoke_on_trent_staffordshire"
    assert hilltop["address"]["postcode"] == "ST4 1AA"
    assert hilltop["source"]["has_addr_tags"] is False


@pytest.mark.integration
def test_build_applies_overrides_without_changing_ids(harvested_data_dir: Path):
    write_json(
        harvested_data_dir / OUTPUT["overrides_filename"],
        {
            "uk_hilltop_golf_unknown_unknown": {
                "id": "uk_hilltop",
                "address": {"city": "Stoke-on-Trent"},
                "access": ["visitors_welcome"],
            }
        },
    )

    _build(harvested_data_dir)

    hilltop = _read(harvested_data_dir, OUTPUT["courses_filename"])["courses"][3]
    assert hilltop["id"] == "uk_hilltop_golf_unknown_unknown"
    assert hilltop["address"]["city"] == "Stoke-on-Trent"
    assert hilltop["address"]["county"] == "unknown"
    assert hilltop["access"] == ["visitors_welcome"]


@pytest.mark.integration
def test_build_requires_harvest_output(tmp_path: Path):
    with pytest.raises(MissingInputError):
        _build(tmp_path)
