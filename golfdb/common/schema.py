"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from golfdb.common.errors import ConfigError


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_string_list(value, ctx: str) -> None:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{ctx} must be a list of strings")


def validate_pipeline_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {
        "schema_version",
        "purity_version",
        "overpass",
        "nominatim",
        "dedup",
        "scoring_profile",
        "output",
    }
    _assert_required_keys(cfg, top_required, "pipeline config")
    _assert_no_unknown_keys(cfg, top_required, "pipeline config", allow_unknown)

    _assert_required_keys(cfg["overpass"], {"endpoints", "area_iso_code", "timeout_seconds"}, "overpass")
    _assert_string_list(cfg["overpass"]["endpoints"], "overpass.endpoints")
    if not cfg["overpass"]["endpoints"]:
        raise ConfigError("overpass.endpoints must not be empty")
    _assert_required_keys(
        cfg["nominatim"],
        {"enabled", "endpoint", "zoom", "rate_per_sec", "cache_flush_every"},
        "nominatim",
    )
    _assert_required_keys(cfg["dedup"], {"radius_km", "replace_margin"}, "dedup")
    if float(cfg["dedup"]["radius_km"]) <= 0:
        raise ConfigError("dedup.radius_km must be positive")
    _assert_required_keys(
        cfg["output"],
        {
            "courses_filename",
            "driving_ranges_filename",
            "nation_filename_template",
            "index_filename",
            "pure_filename",
            "overrides_filename",
        },
        "output",
    )
    return cfg


def validate_vocabulary_config(cfg: dict) -> dict:
    _assert_required_keys(cfg, {"entity_kind", "purity"}, "vocabularies")

    kind = cfg["entity_kind"]
    _assert_required_keys(
        kind,
        {
            "nonstandard_golf_values",
            "driving_range_golf_values",
            "driving_range_leisure_values",
            "course_leisure_values",
            "course_golf_values",
            "pitch_leisure_values",
            "pitch_landuse_values",
        },
        "entity_kind",
    )
    for key, value in kind.items():
        _assert_string_list(value, f"entity_kind.{key}")

    purity = cfg["purity"]
    _assert_required_keys(
        purity,
        {
            "closed_patterns",
            "hard_exclude_tokens",
            "non_venue_tokens",
            "strong_markers",
            "generic_course_names",
            "deprecated_extras",
        },
        "purity",
    )
    for key, value in purity.items():
        _assert_string_list(value, f"purity.{key}")
    return cfg


def validate_scoring_config(cfg: dict) -> dict:
    _assert_required_keys(cfg, {"profiles"}, "scoring_rules")
    if not isinstance(cfg["profiles"], dict) or not cfg["profiles"]:
        raise ConfigError("scoring_rules.profiles must be a non-empty mapping")
    for name, profile in cfg["profiles"].items():
        _assert_required_keys(profile, {"rules"}, f"profiles.{name}")
        for idx, rule in enumerate(profile["rules"]):
            _assert_required_keys(rule, {"id", "when", "add"}, f"profiles.{name}.rules[{idx}]")
    return cfg
