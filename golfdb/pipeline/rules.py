"""Ordered first-match decision tables used by both classification stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, TypeVar

from golfdb.common.models import ClassificationResult

S = TypeVar("S")

# A matcher returns a falsy value when the rule does not apply, True when it
# applies, or the matched token when the reason should name it.
Matcher = Callable[[S], "bool | str | None"]


@dataclass(frozen=True)
class Rule(Generic[S]):
    id: str
    matcher: Matcher
    entity_type: str
    reason: str
    needs_manual_review: bool = False

    def apply(self, subject: S) -> ClassificationResult | None:
        matched = self.matcher(subject)
        if not matched:
            return None
        token = matched if isinstance(matched, str) else ""
        return ClassificationResult(
            entity_type=self.entity_type,
            needs_manual_review=self.needs_manual_review,
            reason=self.reason.format(token=token),
        )


def first_match(rules: Iterable[Rule[S]], subject: S, fallback: ClassificationResult) -> ClassificationResult:
    for rule in rules:
        result = rule.apply(subject)
        if result is not None:
            return result
    return fallback


def first_token_in(text: str, tokens: Iterable[str]) -> str | None:
    for token in tokens:
        if token in text:
            return token
    return None
