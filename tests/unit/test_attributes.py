import pytest

from golfdb.pipeline.attributes import (
    classify_access,
    classify_course_type,
    classify_difficulty,
    classify_dress_code,
    classify_price_band,
    compute_facilities,
    course_attributes,
    derive_vibe,
    price_band_for_amount,
)


def test_course_type_from_description_and_name():
    assert classify_course_type({"description": "Heathland and parkland holes"}, "Oak") == ["heathland", "parkland"]
    assert classify_course_type({}, "Seaside Links") == ["links"]
    assert classify_course_type({}, "Oak Hotel Golf") == ["resort"]
    assert classify_course_type({"tourism": "hotel"}, "Oak") == ["resort"]
    assert classify_course_type({}, "Oakwood") == ["standard"]


def test_access_members_only_wins_over_visitors():
    assert classify_access({"access": "private", "description": "visitors welcome"}, "Oak") == ["members_only"]
    assert classify_access({"description": "Pay and play"}, "Oak") == ["visitors_welcome"]
    assert classify_access({}, "Oak") == ["unknown"]


def test_dress_code_levels():
    assert classify_dress_code({"dress_code": "Jacket required"}, "Oak") == ["strict_golf_attire"]
    assert classify_dress_code({"note": "collared shirts"}, "Oak") == ["smart_golf_attire"]
    assert classify_dress_code({"description": "relaxed"}, "Oak") == ["casual"]
    assert classify_dress_code({}, "Oak") == ["smart_casual"]


@pytest.mark.parametrize(
    ("amount", "band"),
    [(0, "value"), (25, "value"), (26, "mid"), (50, "mid"), (51, "premium"), (90, "premium"), (91, "luxury")],
)
def test_price_band_thresholds(amount, band):
    assert price_band_for_amount(amount) == band


def test_price_band_prefers_explicit_amount():
    assert classify_price_band({"greenfee": "£ 45 weekdays"}, "Oak") == ["mid"]
    assert classify_price_band({"description": "municipal course"}, "Oak") == ["value", "mid"]
    assert classify_price_band({}, "Oak Championship Course") == ["premium", "luxury"]
    assert classify_price_band({}, "Oak") == ["unknown"]


def test_difficulty_from_handicap_limits():
    assert classify_difficulty({"handicap": "max handicap 18"}, "Oak", 18) == ["hard", "low_handicap_friendly"]
    assert classify_difficulty({"handicap": "hcp: 28"}, "Oak", 18) == ["medium", "intermediate_friendly"]
    assert classify_difficulty({"handicap": "handicap 36"}, "Oak", 18) == ["easy", "beginner_friendly"]
    assert classify_difficulty({"note": "handicap certificate required"}, "Oak", 18) == ["medium", "hard"]


def test_difficulty_without_handicap():
    assert classify_difficulty({}, "Oak Championship Course", 18) == ["hard", "championship"]
    assert classify_difficulty({}, "Oak", 36) == ["medium", "hard"]
    assert classify_difficulty({}, "Oak", None) == ["medium"]


def test_facilities_in_fixed_order():
    tags = {
        "golf": "driving_range",
        "shop": "golf",
        "amenity": "bar",
        "golf:buggy": "yes",
        "golf:trolley": "yes",
        "club_rental": "yes",
        "leisure": "pitch",
    }
    assert compute_facilities(tags) == [
        "driving_range",
        "pro_shop",
        "bar",
        "buggy_hire",
        "trolley_hire",
        "club_hire",
        "practice_area",
    ]
    assert compute_facilities({}) == []


def test_vibe_is_unique_and_ordered():
    assert derive_vibe("Oak Municipal", ["resort"], ["members_only"]) == [
        "friendly",
        "beginner_friendly",
        "relaxed",
        "premium",
        "traditional",
    ]
    assert derive_vibe("Oak", ["standard"], ["unknown"]) == ["friendly"]


def test_course_attributes_keys():
    attrs = course_attributes({}, "Oakwood", None)
    assert set(attrs) == {"course_type", "access", "vibe", "dress_code", "difficulty", "facilities", "price_band"}
    assert attrs["course_type"] == ["standard"]
    assert attrs["access"] == ["unknown"]
