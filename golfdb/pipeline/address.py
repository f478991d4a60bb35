"""Address assembly from OSM tags with reverse-geocode fallback."""

from __future__ import annotations

from golfdb.common.text import joined_lower

ADDRESS_FIELDS = ("street", "city", "county", "postcode", "country")
CITY_TAGS = ("addr:city", "addr:town", "addr:village")

_NATION_MARKERS = (
    ("scotland", "scotland"),
    ("wales", "wales"),
    ("northern ireland", "northern_ireland"),
    ("england", "england"),
)
DEFAULT_NATION = "england"


def _pick(mapping: dict, keys) -> str:
    for key in keys:
        value = mapping.get(key)
        if value:
            return str(value)
    return ""


def _street_from_tags(tags: dict) -> str:
    if not (tags.get("addr:housenumber") or tags.get("addr:street")):
        return ""
    return f"{_pick(tags, ['addr:housenumber'])} {_pick(tags, ['addr:street'])}".strip()


def has_address_tags(tags: dict) -> bool:
    return bool(_pick(tags, CITY_TAGS))


def needs_geocode(tags: dict) -> bool:
    return not (_pick(tags, CITY_TAGS) and tags.get("addr:postcode") and tags.get("addr:county"))


def build_address(tags: dict, geocoded: dict | None) -> dict[str, str]:
    """Address dict with a ``state`` helper field; missing parts are "unknown"."""
    address = {
        "state": _pick(tags, ["addr:state"]),
        "street": _street_from_tags(tags),
        "city": _pick(tags, CITY_TAGS),
        "county": _pick(tags, ["addr:county"]),
        "postcode": _pick(tags, ["addr:postcode"]),
        "country": _pick(tags, ["addr:country"]) or "UK",
    }

    details = (geocoded or {}).get("address") if isinstance(geocoded, dict) else None
    if isinstance(details, dict) and not (address["city"] and address["postcode"] and address["county"]):
        address["state"] = address["state"] or _pick(details, ["state", "state_district"])
        address["city"] = address["city"] or _pick(details, ["city", "town", "village", "hamlet"])
        address["county"] = address["county"] or _pick(details, ["county", "state_district", "state"])
        address["postcode"] = address["postcode"] or _pick(details, ["postcode"])
        if not address["street"] and details.get("road"):
            address["street"] = f"{details.get('house_number') or ''} {details['road']}".strip()

    for key in ADDRESS_FIELDS:
        if not address[key]:
            address[key] = "unknown"
    return address


def nation_from_address(address: dict) -> str:
    text = joined_lower(address.get("state"), address.get("county"), address.get("country"))
    for marker, nation in _NATION_MARKERS:
        if marker in text:
            return nation
    return DEFAULT_NATION


def public_address(address: dict) -> dict[str, str]:
    return {key: address.get(key, "unknown") for key in ADDRESS_FIELDS}
