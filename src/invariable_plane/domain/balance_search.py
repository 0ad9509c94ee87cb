# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Exhaustive balance search.

Enumerates every assignment of (quantum number, phase) to the varying
bodies for each scenario, evaluates it with the balance model, keeps
configurations at or above the threshold and sorts them by balance.
Scenarios are independent partitions and can be evaluated in separate
processes; the merged outcome is identical to a sequential run.

No external dependencies — only stdlib itertools/concurrent.futures/logging.
"""
import itertools
import logging
import math
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from invariable_plane.domain.balance_model import BalanceModel, EvaluationResult
from invariable_plane.domain.bodies import (
    Assignment,
    Body,
    Configuration,
    ModelConstants,
    ReferencePlane,
    Scenario,
)

logger = logging.getLogger(__name__)


class SearchState(Enum):
    IDLE = "idle"
    ENUMERATING = "enumerating"
    EVALUATING = "evaluating"
    FILTERING = "filtering"
    SORTED = "sorted"
    DONE = "done"


def abbreviation(body_name: str) -> str:
    """Two-letter column tag of a body (mercury → me)."""
    return body_name[:2].lower()


@dataclass(frozen=True)
class SearchSpace:
    """Everything a search run depends on.

    Attributes:
        bodies: Body table; order defines configuration and column order.
        reference: Fixed reference plane of the balance model.
        constants: Model constants including the quantum-number domain.
        varying: Bodies enumerated over quantum numbers × phases.
        scenarios: Named fixed assignments; each is one partition.
        canonical: Assignments of bodies that never vary.
        threshold: Minimum balance kept; None uses the constants' value.
    """
    bodies: tuple[Body, ...]
    reference: ReferencePlane
    constants: ModelConstants
    varying: tuple[str, ...]
    scenarios: tuple[Scenario, ...] = ()
    canonical: tuple[tuple[str, Assignment], ...] = ()
    threshold: float | None = None

    @property
    def balance_threshold(self) -> float:
        if self.threshold is None:
            return self.constants.balance_threshold
        return self.threshold

    @property
    def body_names(self) -> tuple[str, ...]:
        return tuple(b.name for b in self.bodies)

    @property
    def column_bodies(self) -> tuple[str, ...]:
        """Varying and scenario-fixed bodies in body-table order."""
        shown = set(self.varying)
        for scenario in self.scenarios:
            shown.update(scenario.body_names)
        return tuple(name for name in self.body_names if name in shown)

    @property
    def columns(self) -> tuple[str, ...]:
        cols = ["scenario", "balance"]
        for name in self.column_bodies:
            tag = abbreviation(name)
            cols.extend((f"{tag}_d", f"{tag}_phase"))
        return tuple(cols)

    def body_domain(self) -> tuple[Assignment, ...]:
        """Assignments open to one varying body: quantum number outer, phase inner."""
        return tuple(
            Assignment(d, phase)
            for d in self.constants.quantum_numbers
            for phase in self.constants.phase_angles_deg
        )

    @property
    def partition_size(self) -> int:
        return len(self.body_domain()) ** len(self.varying)

    @property
    def size(self) -> int:
        return self.partition_size * max(1, len(self.scenarios))

    def validate(self) -> None:
        """
        Check the space before any evaluation.

        Raises:
            ValueError: On unknown bodies, a body in more than one role,
                a body without an assignment, duplicate scenario names,
                non-positive quantum numbers or a phase count other than 2.
        """
        names = self.body_names
        known = set(names)
        if len(known) != len(names):
            raise ValueError(f"body names must be unique, got {list(names)}")
        if self.reference.name not in known:
            raise ValueError(f"reference body '{self.reference.name}' is not in the body table")
        if len(self.constants.phase_angles_deg) != 2:
            raise ValueError(
                f"exactly two phase angles are required, "
                f"got {len(self.constants.phase_angles_deg)}"
            )
        for d in self.constants.quantum_numbers:
            if d <= 0:
                raise ValueError(f"quantum numbers must be > 0, got {d}")

        varying = set(self.varying)
        if len(varying) != len(self.varying):
            raise ValueError(f"varying bodies must be unique, got {list(self.varying)}")
        canonical = [name for name, _ in self.canonical]
        if len(set(canonical)) != len(canonical):
            raise ValueError(f"canonical bodies must be unique, got {canonical}")

        unknown = sorted((varying | set(canonical)) - known)
        if unknown:
            raise ValueError(f"unknown bodies: {unknown}")
        overlap = sorted(varying & set(canonical))
        if overlap:
            raise ValueError(f"bodies cannot be both varying and canonical: {overlap}")

        scenario_names = [s.name for s in self.scenarios]
        if len(set(scenario_names)) != len(scenario_names):
            raise ValueError(f"scenario names must be unique, got {scenario_names}")

        fixed_sets = [set(s.body_names) for s in self.scenarios] or [set()]
        for scenario, fixed in zip(self.scenarios, fixed_sets):
            unknown = sorted(fixed - known)
            if unknown:
                raise ValueError(f"scenario {scenario.name}: unknown bodies {unknown}")
            overlap = sorted(fixed & (varying | set(canonical)))
            if overlap:
                raise ValueError(
                    f"scenario {scenario.name}: bodies already varying or canonical {overlap}"
                )
        for fixed in fixed_sets:
            missing = [n for n in names if n not in varying | set(canonical) | fixed]
            if missing:
                raise ValueError(f"bodies without an assignment: {missing}")

        for _, assignment in self._all_fixed_assignments():
            if assignment.quantum_number <= 0:
                raise ValueError(
                    f"quantum numbers must be > 0, got {assignment.quantum_number}"
                )

    def _all_fixed_assignments(self) -> Iterator[tuple[str, Assignment]]:
        yield from self.canonical
        for scenario in self.scenarios:
            yield from scenario.fixed


@dataclass(frozen=True)
class SearchResult:
    """One configuration that met the threshold."""
    scenario: str
    index: int
    evaluation: EvaluationResult

    @property
    def balance(self) -> float:
        return self.evaluation.balance

    def row(self, column_bodies: tuple[str, ...], constants: ModelConstants) -> tuple:
        """Fixed-width row: scenario, balance (6 dp), then d and phase index per body."""
        cells: list = [self.scenario, round(self.evaluation.balance, 6)]
        config = self.evaluation.configuration
        for name in column_bodies:
            assignment = config[name]
            cells.append(assignment.quantum_number)
            cells.append(constants.phase_index(assignment.phase_deg))
        return tuple(cells)


@dataclass(frozen=True)
class SearchOutcome:
    """Sorted search results with their schema and counters."""
    results: tuple[SearchResult, ...]
    columns: tuple[str, ...]
    column_bodies: tuple[str, ...]
    constants: ModelConstants
    threshold: float
    evaluated: int
    excluded: int
    scenarios: tuple[tuple[str, str], ...] = ()

    def rows(self) -> tuple[tuple, ...]:
        return tuple(r.row(self.column_bodies, self.constants) for r in self.results)

    def passing(self) -> tuple[SearchResult, ...]:
        """Results whose bodies all fit their bounds and trend directions."""
        return tuple(r for r in self.results if r.evaluation.all_pass)

    def count_by_scenario(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for r in self.results:
            counts[r.scenario] = counts.get(r.scenario, 0) + 1
        return counts


def _partition_slices(space: SearchSpace) -> tuple[Scenario | None, ...]:
    return tuple(space.scenarios) or (None,)


def iter_partition(
    space: SearchSpace,
    position: int,
) -> Iterator[tuple[int, str, Configuration]]:
    """Lazily enumerate the candidates of one scenario partition.

    Yields:
        (global index, scenario name, Configuration).
    """
    scenario = _partition_slices(space)[position]
    fixed = dict(space.canonical)
    if scenario is not None:
        fixed.update(scenario.fixed)
    name = scenario.name if scenario is not None else ""
    wanted = set(space.varying)
    varying = tuple(n for n in space.body_names if n in wanted)
    domain = space.body_domain()
    offset = position * space.partition_size

    for local, choice in enumerate(itertools.product(domain, repeat=len(varying))):
        mapping = dict(fixed)
        mapping.update(zip(varying, choice))
        yield offset + local, name, Configuration.from_mapping(mapping, space.body_names)


@dataclass(frozen=True)
class _PartitionOutput:
    results: tuple[SearchResult, ...]
    evaluated: int
    excluded: int


def _evaluate_partition(space: SearchSpace, position: int) -> _PartitionOutput:
    """Evaluate one partition. Module level so worker processes can pickle it."""
    model = BalanceModel(space.bodies, space.reference, space.constants)
    threshold = space.balance_threshold
    kept: list[SearchResult] = []
    evaluated = 0
    excluded = 0
    scenario = ""
    for index, scenario, config in iter_partition(space, position):
        evaluated += 1
        try:
            evaluation = model.evaluate(config)
        except ValueError as exc:
            excluded += 1
            logger.debug("Excluded candidate %d (%s): %s", index, scenario, exc)
            continue
        if not math.isfinite(evaluation.balance):
            excluded += 1
            logger.debug("Excluded candidate %d (%s): non-finite balance", index, scenario)
            continue
        if evaluation.balance >= threshold:
            kept.append(SearchResult(scenario=scenario, index=index, evaluation=evaluation))
    logger.info(
        "Partition %s: %d evaluated, %d kept, %d excluded",
        scenario or "-", evaluated, len(kept), excluded,
    )
    return _PartitionOutput(tuple(kept), evaluated, excluded)


def _sort_key(result: SearchResult) -> tuple[float, int]:
    return (-result.evaluation.balance, result.index)


class SearchEngine:
    """
    Runs the exhaustive search over a SearchSpace.

    Each run() starts from IDLE and walks through ENUMERATING,
    EVALUATING, FILTERING and SORTED to DONE. Nothing carries over
    between runs.
    """

    def __init__(self, space: SearchSpace) -> None:
        self.space = space
        self._state = SearchState.IDLE

    @property
    def state(self) -> SearchState:
        return self._state

    def iter_candidates(self) -> Iterator[tuple[int, str, Configuration]]:
        """All candidates in discovery order; stopping early is safe."""
        self.space.validate()
        for position in range(len(_partition_slices(self.space))):
            yield from iter_partition(self.space, position)

    def run(self, workers: int = 1) -> SearchOutcome:
        """
        Enumerate, evaluate, filter and sort the whole space.

        Args:
            workers: Worker processes; partitions are whole scenarios.

        Returns:
            SearchOutcome sorted by balance descending, ties by
            discovery index.

        Raises:
            ValueError: If the space is invalid or workers < 1.
        """
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        self._state = SearchState.IDLE
        self.space.validate()

        self._state = SearchState.ENUMERATING
        positions = list(range(len(_partition_slices(self.space))))
        logger.info(
            "Searching %d candidates in %d partition(s), threshold %.6f",
            self.space.size, len(positions), self.space.balance_threshold,
        )

        self._state = SearchState.EVALUATING
        if workers > 1 and len(positions) > 1:
            with ProcessPoolExecutor(max_workers=min(workers, len(positions))) as pool:
                outputs = list(pool.map(
                    _evaluate_partition,
                    [self.space] * len(positions),
                    positions,
                ))
        else:
            outputs = [_evaluate_partition(self.space, p) for p in positions]

        self._state = SearchState.FILTERING
        results: list[SearchResult] = []
        evaluated = 0
        excluded = 0
        for output in outputs:
            results.extend(output.results)
            evaluated += output.evaluated
            excluded += output.excluded
        if excluded:
            logger.warning("%d candidate(s) excluded as invalid", excluded)

        results.sort(key=_sort_key)
        self._state = SearchState.SORTED

        outcome = SearchOutcome(
            results=tuple(results),
            columns=self.space.columns,
            column_bodies=self.space.column_bodies,
            constants=self.space.constants,
            threshold=self.space.balance_threshold,
            evaluated=evaluated,
            excluded=excluded,
            scenarios=tuple((s.name, s.description) for s in self.space.scenarios),
        )
        self._state = SearchState.DONE
        logger.info("Search done: %d of %d at or above threshold", len(results), evaluated)
        return outcome
