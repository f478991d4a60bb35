"""UK postcode shape validation."""

from __future__ import annotations

import re

UK_POSTCODE_RE = re.compile(r"^[A-Z]{1,2}\d[A-Z\d]?\s?\d[A-Z]{2}$")


def looks_like_uk_postcode(value: str | None) -> bool:
    cleaned = (value or "").strip().upper()
    return bool(UK_POSTCODE_RE.match(cleaned))
