"""Manual override patches keyed by entity id."""

from __future__ import annotations

import logging
from pathlib import Path

from golfdb.common.errors import ConfigError
from golfdb.common.fs import read_json

logger = logging.getLogger(__name__)

NESTED_FIELDS = ("address", "links")


def load_overrides(path: Path) -> dict[str, dict]:
    if not path.exists():
        return {}
    payload = read_json(path)
    if not isinstance(payload, dict):
        raise ConfigError(f"Overrides file must map ids to patches: {path}")
    return {str(key): value for key, value in payload.items() if isinstance(value, dict)}


def apply_overrides(entity: dict, overrides: dict[str, dict]) -> dict:
    """Field-level overwrite, nested merge for address and links. Last writer wins."""
    patch = overrides.get(entity["id"])
    if not patch:
        return entity

    out = dict(entity)
    for key, value in patch.items():
        if key == "id":
            if value != entity["id"]:
                logger.warning("ignoring id override for %s", entity["id"])
            continue
        if key in NESTED_FIELDS and isinstance(value, dict) and isinstance(entity.get(key), dict):
            out[key] = {**entity[key], **value}
        else:
            out[key] = value
    return out
