"""Heuristic attribute taggers applied to course candidates.

Each tagger lowercases a concatenation of the relevant OSM tags and free
text and matches literal substrings, returning tags from a fixed
vocabulary with an explicit default when nothing matches.
"""

from __future__ import annotations

import re

from golfdb.common.deterministic import unique_in_order
from golfdb.common.text import joined_lower, lowered

_PRICE_RE = re.compile(r"£\s*([0-9]{1,3})")
_HANDICAP_RE = re.compile(r"(?:max(?:imum)?\s*)?(?:handicap|hcp)\s*[:=]?\s*([0-9]{1,2})")

PRICE_BANDS = ((25, "value"), (50, "mid"), (90, "premium"))


def _tag(tags: dict, key: str) -> str:
    return str(tags.get(key) or "")


def classify_course_type(tags: dict, name: str) -> list[str]:
    name_l = lowered(name)
    text = joined_lower(_tag(tags, "surface"), _tag(tags, "golf:type"), _tag(tags, "description"))

    out: list[str] = []
    if "links" in text or "links" in name_l:
        out.append("links")
    if "heath" in text:
        out.append("heathland")
    if "park" in text:
        out.append("parkland")
    if "moor" in text:
        out.append("moorland")
    if "down" in text:
        out.append("downland")
    if (
        "resort" in name_l
        or "hotel" in name_l
        or "country club" in name_l
        or _tag(tags, "tourism") == "hotel"
    ):
        out.append("resort")

    return out or ["standard"]


def classify_access(tags: dict, name: str) -> list[str]:
    text = joined_lower(
        _tag(tags, "access"),
        _tag(tags, "membership"),
        _tag(tags, "description"),
        _tag(tags, "note"),
        name,
    )
    if "members only" in text or "private" in text:
        return ["members_only"]
    if any(token in text for token in ("visitors welcome", "visitor", "pay and play", "public")):
        return ["visitors_welcome"]
    return ["unknown"]


def classify_dress_code(tags: dict, name: str) -> list[str]:
    text = joined_lower(
        _tag(tags, "dress_code"),
        _tag(tags, "golf:dress_code"),
        _tag(tags, "description"),
        _tag(tags, "note"),
        name,
    )
    if any(token in text for token in ("strict", "jacket", "tie")):
        return ["strict_golf_attire"]
    if any(token in text for token in ("smart", "collar", "tailored")):
        return ["smart_golf_attire"]
    if "casual" in text or "relaxed" in text:
        return ["casual"]
    return ["smart_casual"]


def price_band_for_amount(amount: int) -> str:
    for ceiling, band in PRICE_BANDS:
        if amount <= ceiling:
            return band
    return "luxury"


def classify_price_band(tags: dict, name: str) -> list[str]:
    text = joined_lower(_tag(tags, "greenfee"), _tag(tags, "fee"), _tag(tags, "description"), name)

    match = _PRICE_RE.search(text)
    if match:
        return [price_band_for_amount(int(match.group(1)))]

    if any(token in text for token in ("affordable", "municipal", "public")):
        return ["value", "mid"]
    if "resort" in text or "championship" in text:
        return ["premium", "luxury"]
    return ["unknown"]


def classify_difficulty(tags: dict, name: str, holes: int | None) -> list[str]:
    text = joined_lower(
        _tag(tags, "handicap"),
        _tag(tags, "golf:handicap"),
        _tag(tags, "description"),
        _tag(tags, "note"),
        name,
    )

    if "handicap" in text or "hcp" in text:
        match = _HANDICAP_RE.search(text)
        if not match:
            return ["medium", "hard"]
        limit = int(match.group(1))
        if limit <= 18:
            return ["hard", "low_handicap_friendly"]
        if limit <= 28:
            return ["medium", "intermediate_friendly"]
        return ["easy", "beginner_friendly"]

    if "championship" in lowered(name):
        return ["hard", "championship"]
    if (holes or 18) >= 27:
        return ["medium", "hard"]
    return ["medium"]


def compute_facilities(tags: dict) -> list[str]:
    amenity = _tag(tags, "amenity")
    out: list[str] = []

    if "driving_range" in _tag(tags, "golf").lower():
        out.append("driving_range")
    if _tag(tags, "shop") in ("golf", "sports"):
        out.append("pro_shop")
    if amenity == "restaurant":
        out.append("restaurant")
    if amenity in ("bar", "pub"):
        out.append("bar")
    if amenity == "cafe":
        out.append("cafe")
    if tags.get("buggy_rental") or tags.get("golf:buggy"):
        out.append("buggy_hire")
    if tags.get("golf:trolley") or tags.get("trolley_rental"):
        out.append("trolley_hire")
    if tags.get("golf:club_rental") or tags.get("club_rental"):
        out.append("club_hire")
    if tags.get("golf:practice") or _tag(tags, "leisure") == "pitch":
        out.append("practice_area")

    return out


def derive_vibe(name: str, course_type: list[str], access: list[str]) -> list[str]:
    name_l = lowered(name)
    vibe = ["friendly"]
    if "municipal" in name_l or "public" in name_l:
        vibe.extend(["beginner_friendly", "relaxed"])
    if "resort" in course_type:
        vibe.append("premium")
    if "members_only" in access:
        vibe.append("traditional")
    return unique_in_order(vibe)


def course_attributes(tags: dict, name: str, holes: int | None) -> dict[str, list[str]]:
    """All attribute tags for a course, keyed by entity field."""
    course_type = classify_course_type(tags, name)
    access = classify_access(tags, name)
    return {
        "course_type": course_type,
        "access": access,
        "vibe": derive_vibe(name, course_type, access),
        "dress_code": classify_dress_code(tags, name),
        "difficulty": classify_difficulty(tags, name, holes),
        "facilities": compute_facilities(tags),
        "price_band": classify_price_band(tags, name),
    }
