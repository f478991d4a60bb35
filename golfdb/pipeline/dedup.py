"""Geospatial de-duplication of candidate records.

Candidates are grouped by exact clustering key. Inside a group the best
scoring candidate claims its neighbourhood first; later candidates within
``radius_km`` of a kept representative are folded into the nearest one and
only displace it when they score more than ``replace_margin`` points higher.
The margin keeps near-tied noisy scores from churning representatives.

Groups are independent of each other; within a group the scan is quadratic,
which is fine because duplicate groups stay small.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Iterable

from golfdb.common.deterministic import group_in_first_seen_order, stable_sorted
from golfdb.common.geo import haversine_km
from golfdb.common.models import CandidateRecord
from golfdb.common.text import cluster_key

Scorer = Callable[[CandidateRecord], int]


@dataclass(frozen=True)
class DedupConfig:
    # Neither value has been validated against ground truth.
    radius_km: float = 0.75
    replace_margin: int = 2

    @classmethod
    def from_config(cls, dedup_config: dict) -> "DedupConfig":
        return cls(
            radius_km=float(dedup_config["radius_km"]),
            replace_margin=int(dedup_config["replace_margin"]),
        )


@dataclass(frozen=True)
class Representative:
    candidate: CandidateRecord
    score: int
    absorbed: tuple[str, ...] = ()


@dataclass(frozen=True)
class GroupState:
    kept: tuple[Representative, ...] = ()
    discarded: int = 0
    replaced: int = 0


@dataclass(frozen=True)
class DedupResult:
    kept: list[Representative]
    group_count: int
    input_count: int
    discarded: int
    replaced: int

    @property
    def candidates(self) -> list[CandidateRecord]:
        return [rep.candidate for rep in self.kept]


def nearest_representative(
    kept: tuple[Representative, ...], candidate: CandidateRecord
) -> tuple[int, float] | None:
    """Index and distance of the nearest kept representative; first wins ties."""
    best: tuple[int, float] | None = None
    for idx, rep in enumerate(kept):
        distance = haversine_km(rep.candidate.lat, rep.candidate.lng, candidate.lat, candidate.lng)
        if best is None or distance < best[1]:
            best = (idx, distance)
    return best


def reduce_step(state: GroupState, candidate: CandidateRecord, score: int, config: DedupConfig) -> GroupState:
    nearest = nearest_representative(state.kept, candidate)
    if nearest is None or nearest[1] >= config.radius_km:
        return replace(state, kept=state.kept + (Representative(candidate, score),))

    idx, _distance = nearest
    current = state.kept[idx]
    if score > current.score + config.replace_margin:
        winner = Representative(
            candidate,
            score,
            absorbed=current.absorbed + (current.candidate.osm_ref,),
        )
        kept = state.kept[:idx] + (winner,) + state.kept[idx + 1 :]
        return replace(state, kept=kept, replaced=state.replaced + 1, discarded=state.discarded + 1)

    loser_kept = replace(current, absorbed=current.absorbed + (candidate.osm_ref,))
    kept = state.kept[:idx] + (loser_kept,) + state.kept[idx + 1 :]
    return replace(state, kept=kept, discarded=state.discarded + 1)


def reduce_group(candidates: Iterable[CandidateRecord], scorer: Scorer, config: DedupConfig) -> GroupState:
    scored = [(candidate, scorer(candidate)) for candidate in candidates]
    state = GroupState()
    for candidate, score in stable_sorted(scored, key=lambda pair: -pair[1]):
        state = reduce_step(state, candidate, score, config)
    return state


def cluster_candidates(
    candidates: Iterable[CandidateRecord],
    scorer: Scorer,
    config: DedupConfig | None = None,
) -> DedupResult:
    config = config or DedupConfig()
    candidate_list = list(candidates)
    groups = group_in_first_seen_order(candidate_list, key=lambda candidate: cluster_key(candidate.name))

    kept: list[Representative] = []
    discarded = 0
    replaced = 0
    for members in groups.values():
        state = reduce_group(members, scorer, config)
        kept.extend(state.kept)
        discarded += state.discarded
        replaced += state.replaced

    return DedupResult(
        kept=kept,
        group_count=len(groups),
        input_count=len(candidate_list),
        discarded=discarded,
        replaced=replaced,
    )
