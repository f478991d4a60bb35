"""Name normalisation used for clustering keys and token matching."""

from __future__ import annotations

import re

_NON_ALNUM_RE = re.compile(r"[^a-z0-9 ]+")
_WHITESPACE_RE = re.compile(r"\s+")
_DIGIT_RE = re.compile(r"\d")

GENERIC_VENUE_WORDS = ("the", "golf", "club", "course", "links", "park")
_GENERIC_VENUE_RE = re.compile(r"\b(?:" + "|".join(GENERIC_VENUE_WORDS) + r")\b")


def normalise_text(value: object) -> str:
    text = "" if value is None else str(value)
    text = text.lower().replace("&", " and ")
    text = _NON_ALNUM_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def cluster_key(value: object) -> str:
    """Key under which differently decorated names of one venue collide.

    "The Belfry Golf Club" and "Belfry" share the key ``belfry``.
    """
    text = _GENERIC_VENUE_RE.sub(" ", normalise_text(value))
    return _WHITESPACE_RE.sub(" ", text).strip()


def lowered(value: object) -> str:
    return ("" if value is None else str(value)).strip().lower()


def has_digits(value: object) -> bool:
    return bool(_DIGIT_RE.search("" if value is None else str(value)))


def joined_lower(*parts: object) -> str:
    return " ".join("" if part is None else str(part) for part in parts).lower()
