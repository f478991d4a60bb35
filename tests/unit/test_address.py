from golfdb.pipeline.address import (
    build_address,
    has_address_tags,
    nation_from_address,
    needs_geocode,
    public_address,
)

FULL_TAGS = {
    "addr:housenumber": "1",
    "addr:street": "Fairway Lane",
    "addr:city": "Leeds",
    "addr:county": "West Yorkshire",
    "addr:postcode": "LS1 1AA",
}


def test_full_tags_need_no_geocode():
    assert needs_geocode(FULL_TAGS) is False
    assert needs_geocode({"addr:city": "Leeds"}) is True
    assert has_address_tags({"addr:village": "Ashby"}) is True
    assert has_address_tags({}) is False


def test_address_from_tags():
    address = build_address(FULL_TAGS, None)
    assert public_address(address) == {
        "street": "1 Fairway Lane",
        "city": "Leeds",
        "county": "West Yorkshire",
        "postcode": "LS1 1AA",
        "country": "UK",
    }


def test_geocode_fills_gaps_without_overwriting_tags():
    geocoded = {
        "address": {
            "road": "Links Road",
            "town": "Gullane",
            "county": "East Lothian",
            "state": "Scotland",
            "postcode": "EH31 2AA",
            "city": "Ignored City",
        }
    }
    address = build_address({"addr:city": "North Berwick"}, geocoded)

    assert address["city"] == "North Berwick"
    assert address["county"] == "East Lothian"
    assert address["postcode"] == "EH31 2AA"
    assert address["street"] == "Links Road"
    assert nation_from_address(address) == "scotland"


def test_missing_parts_default_to_unknown():
    address = build_address({}, None)
    assert address["city"] == "unknown"
    assert address["country"] == "UK"
    assert "state" not in public_address(address)


def test_nation_markers():
    assert nation_from_address({"county": "Gwynedd", "state": "Wales"}) == "wales"
    assert nation_from_address({"state": "Northern Ireland", "county": "County Down"}) == "northern_ireland"
    assert nation_from_address({"county": "Kent", "country": "UK"}) == "england"
