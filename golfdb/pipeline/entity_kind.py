"""Build-stage classification of candidates into coarse entity kinds."""

from __future__ import annotations

from dataclasses import dataclass

from golfdb.common.models import CandidateRecord, ClassificationResult
from golfdb.pipeline.rules import Rule, first_match

UNKNOWN_KIND = ClassificationResult(entity_type="unknown", needs_manual_review=False, reason="no_course_signal")
PERSISTED_KINDS = ("course", "driving_range")


@dataclass(frozen=True)
class KindInput:
    name: str
    tags: dict[str, str]

    @classmethod
    def from_candidate(cls, candidate: CandidateRecord) -> "KindInput":
        return cls(
            name=(candidate.name or "").lower(),
            tags={key: str(value).lower() for key, value in candidate.tags.items()},
        )

    def tag(self, key: str) -> str:
        return self.tags.get(key, "")


class EntityKindClassifier:
    """First-match cascade over OSM tags with a name-based fallback."""

    def __init__(self, vocabulary: dict) -> None:
        self.vocabulary = vocabulary
        self.rules: list[Rule[KindInput]] = self._build_rules(vocabulary)

    @staticmethod
    def _build_rules(vocab: dict) -> list[Rule[KindInput]]:
        nonstandard = set(vocab["nonstandard_golf_values"])
        range_golf = set(vocab["driving_range_golf_values"])
        range_leisure = set(vocab["driving_range_leisure_values"])
        course_leisure = set(vocab["course_leisure_values"])
        course_golf = set(vocab["course_golf_values"])
        pitch_leisure = set(vocab["pitch_leisure_values"])
        pitch_landuse = set(vocab["pitch_landuse_values"])

        def nonstandard_subtype(subject: KindInput) -> str | None:
            golf = subject.tag("golf")
            return golf if golf in nonstandard else None

        def driving_range_tag(subject: KindInput) -> bool:
            return subject.tag("golf") in range_golf or subject.tag("leisure") in range_leisure

        def course_tag(subject: KindInput) -> bool:
            if subject.tag("leisure") in course_leisure or subject.tag("golf") in course_golf:
                return True
            return subject.tag("sport") == "golf" and (
                subject.tag("leisure") in pitch_leisure or subject.tag("landuse") in pitch_landuse
            )

        def name_fallback(subject: KindInput) -> bool:
            return "golf" in subject.name and ("club" in subject.name or "course" in subject.name)

        return [
            Rule("nonstandard_golf_subtype", nonstandard_subtype, "exclude", "nonstandard_golf_subtype:{token}"),
            Rule("driving_range_tag", driving_range_tag, "driving_range", "driving_range_tag"),
            Rule("course_tag", course_tag, "course", "course_tag"),
            Rule("name_fallback", name_fallback, "course", "name_fallback"),
        ]

    def classify(self, candidate: CandidateRecord) -> ClassificationResult:
        return first_match(self.rules, KindInput.from_candidate(candidate), UNKNOWN_KIND)
