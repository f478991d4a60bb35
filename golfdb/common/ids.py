"""Run and entity identifier helpers."""

from __future__ import annotations

import re
from datetime import datetime, timezone

_SLUG_RUN_RE = re.compile(r"[^a-z0-9]+")
SLUG_MAX_LENGTH = 120


def generate_run_id() -> str:
    now = datetime.now(tz=timezone.utc)
    return now.strftime("run-%Y%m%dT%H%M%S%fZ")


def slug_id(name: str | None, city: str | None, county: str | None) -> str:
    """Deterministic entity id from name plus resolved city and county.

    Assigned once at build time; nothing downstream regenerates it.
    """
    text = f"{name or ''} {city or ''} {county or ''}".lower().replace("&", " and ")
    slug = _SLUG_RUN_RE.sub("_", text).strip("_")
    return "uk_" + slug[:SLUG_MAX_LENGTH]
