# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Inclination balance model.

Each body oscillates about a mean inclination with amplitude
K / (d·sqrt(m)) for quantum number d, in one of two phase groups. A
configuration is balanced when the angular-momentum weighted amplitude
vectors of all bodies cancel:

    imbalance = |Σ L·amp·(cos φ, sin φ)| / Σ L·amp

Per body the model also checks that the oscillation range fits the
secular-theory bounds and that the apparent-inclination trend against
the reference plane has the observed sign.

No external dependencies — only stdlib math/dataclasses.
"""
import math
from dataclasses import dataclass

from invariable_plane.domain.bodies import (
    Assignment,
    Body,
    Configuration,
    ModelConstants,
    ReferencePlane,
)
from invariable_plane.domain.plane_geometry import apparent_inclination_between


@dataclass(frozen=True)
class BodyAssessment:
    """Oscillation range and checks for one body under one assignment."""
    name: str
    amplitude_deg: float
    mean_deg: float
    range_min_deg: float
    range_max_deg: float
    fits_bounds: bool
    trend_matches: bool
    trend_deg_per_century: float | None  # None when the check is skipped

    @property
    def passes(self) -> bool:
        return self.fits_bounds and self.trend_matches


@dataclass(frozen=True)
class EvaluationResult:
    """Balance and per-body assessments of one configuration."""
    configuration: Configuration
    balance: float
    imbalance: float
    assessments: tuple[BodyAssessment, ...]

    @property
    def all_pass(self) -> bool:
        return all(a.passes for a in self.assessments)

    @property
    def all_fit_bounds(self) -> bool:
        return all(a.fits_bounds for a in self.assessments)

    @property
    def all_trends_match(self) -> bool:
        return all(a.trend_matches for a in self.assessments)

    @property
    def fail_count(self) -> int:
        return sum(1 for a in self.assessments if not a.passes)


class BalanceModel:
    """Evaluates configurations against a fixed body table.

    Per-body assessments depend only on (body, quantum number, phase), so
    they are cached on the instance. The cache is the only mutable state.
    """

    def __init__(
        self,
        bodies: tuple[Body, ...],
        reference: ReferencePlane,
        constants: ModelConstants,
    ) -> None:
        if not bodies:
            raise ValueError("bodies must be non-empty")
        names = [b.name for b in bodies]
        if len(set(names)) != len(names):
            raise ValueError(f"body names must be unique, got {names}")
        if reference.name not in names:
            raise ValueError(
                f"reference body '{reference.name}' is not in the body table {names}"
            )
        self.bodies = bodies
        self.reference = reference
        self.constants = constants
        self.body_names: tuple[str, ...] = tuple(names)
        self._by_name = {b.name: b for b in bodies}
        self._weights = {b.name: b.angular_momentum_weight for b in bodies}
        self._cache: dict[tuple[str, float, float], BodyAssessment] = {}

    def body(self, name: str) -> Body:
        try:
            return self._by_name[name]
        except KeyError:
            raise ValueError(f"unknown body '{name}'") from None

    def amplitude_deg(self, body: Body, quantum_number: float) -> float:
        """
        Oscillation amplitude K / (d·sqrt(m)) in degrees.

        Raises:
            ValueError: If quantum_number <= 0.
        """
        if quantum_number <= 0:
            raise ValueError(
                f"{body.name}: quantum number must be > 0, got {quantum_number}"
            )
        return self.constants.amplitude_constant / (
            float(quantum_number) * math.sqrt(body.mass)
        )

    def _node_deg(self, body: Body) -> float:
        if body.name == self.reference.name:
            return self.reference.ascending_node_deg
        return body.ascending_node_deg(self.constants.node_preference)

    def _apparent_at(
        self,
        year: float,
        body: Body,
        node_deg: float,
        mean_deg: float,
        amplitude_deg: float,
        phase_deg: float,
    ) -> float:
        epoch = self.constants.epoch_year
        node = node_deg + (360.0 / body.precession_period_yr) * (year - epoch)
        inclination = mean_deg + amplitude_deg * math.cos(math.radians(node - phase_deg))
        return apparent_inclination_between(
            inclination, node,
            self.reference.inclination_at(year, epoch),
            self.reference.ascending_node_at(year, epoch),
        )

    def assess_body(self, body: Body, assignment: Assignment) -> BodyAssessment:
        """Range fit and trend direction of one body. Cached."""
        key = (body.name, assignment.quantum_number, assignment.phase_deg)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        amplitude = self.amplitude_deg(body, assignment.quantum_number)
        node = self._node_deg(body)
        if body.name == self.reference.name:
            inclination = self.reference.inclination_deg
        else:
            inclination = body.inclination_deg
        mean = inclination - amplitude * math.cos(math.radians(node - assignment.phase_deg))
        range_min = mean - amplitude
        range_max = mean + amplitude

        tol = self.constants.bound_tolerance_deg
        bounds = body.inclination_bounds
        fits = range_min >= bounds.min_deg - tol and range_max <= bounds.max_deg + tol

        trend = None
        matches = True
        if body.name != self.reference.name:
            earlier, later = self.constants.trend_years
            i_earlier = self._apparent_at(earlier, body, node, mean, amplitude, assignment.phase_deg)
            i_later = self._apparent_at(later, body, node, mean, amplitude, assignment.phase_deg)
            trend = (i_later - i_earlier) / ((later - earlier) / 100.0)
            matches = (body.observed_trend_deg_per_century >= 0) == (trend >= 0)

        assessment = BodyAssessment(
            name=body.name,
            amplitude_deg=amplitude,
            mean_deg=mean,
            range_min_deg=range_min,
            range_max_deg=range_max,
            fits_bounds=fits,
            trend_matches=matches,
            trend_deg_per_century=trend,
        )
        self._cache[key] = assessment
        return assessment

    def evaluate(self, configuration: Configuration) -> EvaluationResult:
        """
        Balance of a configuration covering every body of the table.

        Args:
            configuration: One assignment per body.

        Returns:
            EvaluationResult with balance in [0, 100].

        Raises:
            ValueError: If the configuration misses a body, names an
                unknown body, or carries a quantum number <= 0.
        """
        names = configuration.body_names
        if set(names) != set(self.body_names) or len(names) != len(self.body_names):
            missing = sorted(set(self.body_names) - set(names))
            extra = sorted(set(names) - set(self.body_names))
            raise ValueError(
                f"configuration must assign every body exactly once "
                f"(missing {missing}, unknown {extra})"
            )

        sum_cos = 0.0
        sum_sin = 0.0
        total = 0.0
        assessments = []
        for body in self.bodies:
            assignment = configuration[body.name]
            assessment = self.assess_body(body, assignment)
            assessments.append(assessment)
            weighted = self._weights[body.name] * assessment.amplitude_deg
            phase = math.radians(assignment.phase_deg)
            sum_cos += weighted * math.cos(phase)
            sum_sin += weighted * math.sin(phase)
            total += weighted

        residual = math.sqrt(sum_cos ** 2 + sum_sin ** 2)
        imbalance = (residual / total) * 100.0 if total > 0 else 0.0
        return EvaluationResult(
            configuration=configuration,
            balance=100.0 - imbalance,
            imbalance=imbalance,
            assessments=tuple(assessments),
        )
