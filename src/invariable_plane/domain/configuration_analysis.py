# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Configuration-space analysis.

Tallies four independent filters over every candidate of a search space
and every intersection of them:

- balance: balance at or above the threshold
- mirror: equal quantum numbers across each mirror pair
- solo phase: exactly one named body in the secondary phase group
- bounds: every body's oscillation range fits its bounds

Each candidate lands in one of 16 buckets keyed by the set of filters it
satisfies; an intersection count is the sum over all buckets containing
that set.

No external dependencies — only stdlib dataclasses/enum.
"""
import logging
from dataclasses import dataclass
from enum import Enum

from invariable_plane.domain.balance_model import BalanceModel
from invariable_plane.domain.balance_search import SearchEngine, SearchResult, SearchSpace
from invariable_plane.domain.bodies import Configuration, ModelConstants

logger = logging.getLogger(__name__)


class ConfigurationFilter(Enum):
    BALANCE = "balance"
    MIRROR = "mirror"
    SOLO_PHASE = "solo-phase"
    BOUNDS = "bounds"


@dataclass(frozen=True)
class FilterCounts:
    """Bucketed filter tallies for one slice of the space."""
    total: int
    buckets: tuple[tuple[frozenset[ConfigurationFilter], int], ...]

    def count(self, *filters: ConfigurationFilter) -> int:
        """Candidates satisfying every given filter; no filters gives the total."""
        wanted = frozenset(filters)
        return sum(n for key, n in self.buckets if wanted <= key)


@dataclass(frozen=True)
class ConfigurationSpaceSummary:
    """Overall and per-scenario filter tallies plus collected matches."""
    overall: FilterCounts
    by_scenario: tuple[tuple[str, FilterCounts], ...]
    collected: tuple[SearchResult, ...]

    def count(self, *filters: ConfigurationFilter, scenario: str | None = None) -> int:
        if scenario is None:
            return self.overall.count(*filters)
        for name, counts in self.by_scenario:
            if name == scenario:
                return counts.count(*filters)
        raise KeyError(scenario)


def is_mirror(configuration: Configuration, pairs: tuple[tuple[str, str], ...]) -> bool:
    """Equal quantum numbers across every pair."""
    return all(
        configuration[a].quantum_number == configuration[b].quantum_number
        for a, b in pairs
    )


def is_solo_phase(
    configuration: Configuration,
    solo_body: str,
    constants: ModelConstants,
) -> bool:
    """solo_body alone in the secondary phase group, all others in the primary."""
    for name, assignment in configuration.assignments:
        expected = 1 if name == solo_body else 0
        if constants.phase_index(assignment.phase_deg) != expected:
            return False
    return True


def _freeze(tally: dict[frozenset, int], total: int) -> FilterCounts:
    ordered = sorted(tally.items(), key=lambda kv: sorted(f.value for f in kv[0]))
    return FilterCounts(total=total, buckets=tuple(ordered))


def analyze_configuration_space(
    space: SearchSpace,
    mirror_pairs: tuple[tuple[str, str], ...],
    solo_body: str,
    collect: tuple[ConfigurationFilter, ...] = (),
) -> ConfigurationSpaceSummary:
    """
    Tally filter intersections over the whole search space.

    Args:
        space: Search space to enumerate; its threshold drives the
            balance filter.
        mirror_pairs: Body pairs that must share a quantum number.
        solo_body: Body expected alone in the secondary phase group.
        collect: If non-empty, candidates satisfying all of these filters
            are kept in the summary, sorted by balance descending.

    Returns:
        ConfigurationSpaceSummary.

    Raises:
        ValueError: If the space is invalid or a named body is unknown.
    """
    space.validate()
    known = set(space.body_names)
    unknown = sorted({n for pair in mirror_pairs for n in pair} - known)
    if unknown:
        raise ValueError(f"mirror pairs name unknown bodies: {unknown}")
    if solo_body not in known:
        raise ValueError(f"unknown solo body '{solo_body}'")

    model = BalanceModel(space.bodies, space.reference, space.constants)
    threshold = space.balance_threshold
    wanted = frozenset(collect)

    overall: dict[frozenset, int] = {}
    per_scenario: dict[str, dict[frozenset, int]] = {}
    totals: dict[str, int] = {}
    collected: list[SearchResult] = []

    for index, scenario, config in SearchEngine(space).iter_candidates():
        evaluation = model.evaluate(config)
        flags = set()
        if evaluation.balance >= threshold:
            flags.add(ConfigurationFilter.BALANCE)
        if is_mirror(config, mirror_pairs):
            flags.add(ConfigurationFilter.MIRROR)
        if is_solo_phase(config, solo_body, space.constants):
            flags.add(ConfigurationFilter.SOLO_PHASE)
        if evaluation.all_fit_bounds:
            flags.add(ConfigurationFilter.BOUNDS)
        key = frozenset(flags)

        overall[key] = overall.get(key, 0) + 1
        bucket = per_scenario.setdefault(scenario, {})
        bucket[key] = bucket.get(key, 0) + 1
        totals[scenario] = totals.get(scenario, 0) + 1

        if wanted and wanted <= key:
            collected.append(SearchResult(scenario=scenario, index=index, evaluation=evaluation))

    total = sum(totals.values())
    logger.info("Analyzed %d configurations in %d scenario(s)", total, len(totals))
    collected.sort(key=lambda r: (-r.evaluation.balance, r.index))
    return ConfigurationSpaceSummary(
        overall=_freeze(overall, total),
        by_scenario=tuple(
            (name, _freeze(per_scenario[name], totals[name])) for name in totals
        ),
        collected=tuple(collected),
    )
