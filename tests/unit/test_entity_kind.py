from pathlib import Path

import pytest

from golfdb.common.config_loader import load_all_configs
from golfdb.common.models import CandidateRecord
from golfdb.pipeline.entity_kind import EntityKindClassifier

VOCABULARY = load_all_configs(Path("config")).vocabularies["entity_kind"]


def _classify(name: str, **tags):
    classifier = EntityKindClassifier(VOCABULARY)
    return classifier.classify(CandidateRecord(name=name, lat=51.0, lng=-1.0, tags=tags))


@pytest.mark.parametrize(
    ("name", "tags", "entity_type", "reason"),
    [
        ("Pirate Cove", {"golf": "adventure_golf"}, "exclude", "nonstandard_golf_subtype:adventure_golf"),
        ("Meadow Golf Club", {"golf": "footgolf", "leisure": "golf_course"}, "exclude", "nonstandard_golf_subtype:footgolf"),
        ("Swing Zone", {"golf": "driving_range"}, "driving_range", "driving_range_tag"),
        ("Swing Zone", {"leisure": "driving_range"}, "driving_range", "driving_range_tag"),
        ("Oakwood", {"leisure": "golf_course"}, "course", "course_tag"),
        ("Oakwood", {"golf": "course"}, "course", "course_tag"),
        ("Hilltop", {"sport": "golf", "leisure": "pitch"}, "course", "course_tag"),
        ("Hilltop", {"sport": "golf", "landuse": "recreation_ground"}, "course", "course_tag"),
        ("Oakwood Golf Club", {}, "course", "name_fallback"),
        ("Oakwood Golf Course", {}, "course", "name_fallback"),
        ("Oakwood Golf", {}, "unknown", "no_course_signal"),
        ("Village Green", {"sport": "golf"}, "unknown", "no_course_signal"),
    ],
)
def test_entity_kind_cascade(name, tags, entity_type, reason):
    result = _classify(name, **tags)
    assert result.entity_type == entity_type
    assert result.reason == reason
    assert result.needs_manual_review is False


def test_tag_values_match_case_insensitively():
    assert _classify("Swing Zone", golf="Driving_Range").entity_type == "driving_range"


def test_subtype_exclusion_beats_course_tags_and_name():
    result = _classify("Crazy Golf Club", golf="miniature_golf", leisure="golf_course")
    assert result.entity_type == "exclude"
