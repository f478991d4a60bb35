"""Load pipeline.yml, vocabularies.yml and scoring_rules.yml as one bundle.

An optional overlay directory holds same-named partial files that are
deep-merged over the base ones; mappings merge key by key, any other value
(lists included) is replaced wholesale.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from golfdb.common.errors import ConfigError
from golfdb.common.fs import read_yaml
from golfdb.common.schema import (
    validate_pipeline_config,
    validate_scoring_config,
    validate_vocabulary_config,
)
from golfdb.common.scoring import ScoringProfile

PIPELINE_FILE = "pipeline.yml"
VOCABULARIES_FILE = "vocabularies.yml"
SCORING_FILE = "scoring_rules.yml"


@dataclass(frozen=True)
class ConfigBundle:
    pipeline: dict
    vocabularies: dict
    scoring_rules: dict

    @property
    def scoring_profile(self) -> dict:
        name = self.pipeline.get("scoring_profile", "default")
        profiles = self.scoring_rules["profiles"]
        if name not in profiles:
            raise ConfigError(f"Unknown scoring profile {name!r}; have {sorted(profiles)}")
        return profiles[name]


def merge_overlay(base: Any, overlay: Any) -> Any:
    if not (isinstance(base, dict) and isinstance(overlay, dict)):
        return overlay
    merged = dict(base)
    for key, value in overlay.items():
        merged[key] = merge_overlay(merged[key], value) if key in merged else value
    return merged


def _read_mapping(path: Path) -> dict:
    payload = read_yaml(path)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError(f"Config file must hold a mapping: {path}")
    return payload


def _load(config_dir: Path, overlay_dir: Path | None, filename: str) -> dict:
    path = config_dir / filename
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    cfg = _read_mapping(path)
    if overlay_dir is not None and (overlay_dir / filename).exists():
        cfg = merge_overlay(cfg, _read_mapping(overlay_dir / filename))
    return cfg


def load_all_configs(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    bundle = ConfigBundle(
        pipeline=validate_pipeline_config(
            _load(config_dir, overlay_config_dir, PIPELINE_FILE),
            allow_unknown=allow_unknown,
        ),
        vocabularies=validate_vocabulary_config(_load(config_dir, overlay_config_dir, VOCABULARIES_FILE)),
        scoring_rules=validate_scoring_config(_load(config_dir, overlay_config_dir, SCORING_FILE)),
    )
    # Resolve and compile the profile now so a typo fails before any stage runs.
    ScoringProfile.from_config(bundle.scoring_profile)
    return bundle
