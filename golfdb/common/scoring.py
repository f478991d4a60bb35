"""Config-driven preference scoring for duplicate candidates.

A profile is a list of ``{id, when, add}`` rules plus a clamp range. The
``when`` expressions understood are ``geometry(<kind>)``, ``has_holes()``,
``has_par()`` and ``has_tag(<key>|<key>...)``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from golfdb.common.errors import ConfigError
from golfdb.common.models import CandidateRecord

Predicate = Callable[[CandidateRecord], bool]

_CONDITION_RE = re.compile(r"^\s*([a-z_]+)\((.*)\)\s*$")


def clamp(value: int, *, minimum: int, maximum: int) -> int:
    return max(minimum, min(maximum, value))


def compile_condition(condition: str) -> Predicate:
    match = _CONDITION_RE.match(condition or "")
    if not match:
        raise ConfigError(f"Unparseable scoring condition: {condition!r}")
    name, argument = match.group(1), match.group(2).strip()

    if name == "geometry":
        return lambda candidate: candidate.geometry == argument
    if name == "has_holes":
        return lambda candidate: bool(candidate.holes)
    if name == "has_par":
        return lambda candidate: bool(candidate.par)
    if name == "has_tag":
        keys = tuple(key.strip() for key in argument.split("|") if key.strip())
        return lambda candidate: any(candidate.tags.get(key) for key in keys)
    raise ConfigError(f"Unknown scoring condition: {condition!r}")


@dataclass(frozen=True)
class ScoringRule:
    id: str
    predicate: Predicate
    add: int


@dataclass(frozen=True)
class ScoringProfile:
    rules: tuple[ScoringRule, ...]
    minimum: int = 0
    maximum: int = 100

    @classmethod
    def from_config(cls, profile: dict) -> "ScoringProfile":
        clamp_cfg = profile.get("clamp") or {"min": 0, "max": 100}
        rules = tuple(
            ScoringRule(
                id=str(rule.get("id", "unnamed_rule")),
                predicate=compile_condition(rule.get("when", "")),
                add=int(rule.get("add", 0)),
            )
            for rule in profile.get("rules", [])
        )
        return cls(rules=rules, minimum=int(clamp_cfg["min"]), maximum=int(clamp_cfg["max"]))

    def explain(self, candidate: CandidateRecord) -> dict:
        applied = [rule for rule in self.rules if rule.predicate(candidate)]
        raw_score = sum(rule.add for rule in applied)
        return {
            "applied_rules": [rule.id for rule in applied],
            "raw_score": raw_score,
            "clamped_score": clamp(raw_score, minimum=self.minimum, maximum=self.maximum),
        }

    def score(self, candidate: CandidateRecord) -> int:
        return self.explain(candidate)["clamped_score"]
