# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Body table and model constants.

Immutable value types shared by the node solver, the balance model and
the balance search. Bodies are loaded once and only ever read.

No external dependencies beyond the plane geometry helpers.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction

from invariable_plane.domain.plane_geometry import angular_distance_deg


class NodeProvenance(Enum):
    """Where an ascending-node value came from."""
    ORIGINAL_REFERENCE = "original-reference"
    NUMERICALLY_OPTIMIZED = "numerically-optimized"
    ANALYTICALLY_DERIVED = "analytically-derived"
    VERIFIED = "verified"


@dataclass(frozen=True)
class NodeVariant:
    """One ascending-node value tagged with its provenance."""
    provenance: NodeProvenance
    value_deg: float


@dataclass(frozen=True)
class InclinationBounds:
    """Inclination range allowed by secular theory (degrees)."""
    min_deg: float
    max_deg: float

    def __post_init__(self) -> None:
        if self.min_deg > self.max_deg:
            raise ValueError(
                f"min_deg must be <= max_deg, got {self.min_deg} > {self.max_deg}"
            )


@dataclass(frozen=True)
class Body:
    """Orbital reference data for one body of the system.

    Attributes:
        name: Body identifier (lower-case by convention).
        mass: Mass as a fraction of the central body mass.
        semi_major_axis: Semi-major axis (AU).
        eccentricity: Orbital eccentricity, 0 <= e < 1.
        inclination_deg: Inclination to the invariable plane at the epoch.
        ascending_nodes: Ascending-node variants on the invariable plane.
        precession_period_yr: Node precession period; negative is retrograde.
        inclination_bounds: Secular-theory inclination range.
        observed_trend_deg_per_century: Observed apparent-inclination trend.
        apparent_inclination_deg: Observed inclination to the reference
            body's plane at the epoch, if known.
    """
    name: str
    mass: float
    semi_major_axis: float
    eccentricity: float
    inclination_deg: float
    ascending_nodes: tuple[NodeVariant, ...]
    precession_period_yr: float
    inclination_bounds: InclinationBounds
    observed_trend_deg_per_century: float = 0.0
    apparent_inclination_deg: float | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("name must be non-empty")
        if self.mass <= 0:
            raise ValueError(f"mass must be > 0, got {self.mass}")
        if self.semi_major_axis <= 0:
            raise ValueError(f"semi_major_axis must be > 0, got {self.semi_major_axis}")
        if not 0.0 <= self.eccentricity < 1.0:
            raise ValueError(f"eccentricity must be in [0, 1), got {self.eccentricity}")
        if not self.ascending_nodes:
            raise ValueError(f"{self.name}: at least one ascending node is required")
        if self.precession_period_yr == 0:
            raise ValueError(f"{self.name}: precession_period_yr must be non-zero")

    def ascending_node_deg(
        self,
        preference: tuple[NodeProvenance, ...] = (),
    ) -> float:
        """Node value of the first provenance in preference order.

        An empty preference returns the first stored variant.

        Raises:
            KeyError: If none of the preferred provenances is stored.
        """
        if not preference:
            return self.ascending_nodes[0].value_deg
        for provenance in preference:
            for variant in self.ascending_nodes:
                if variant.provenance is provenance:
                    return variant.value_deg
        wanted = ", ".join(p.value for p in preference)
        raise KeyError(f"{self.name}: no ascending node with provenance {wanted}")

    def has_node(self, provenance: NodeProvenance) -> bool:
        return any(v.provenance is provenance for v in self.ascending_nodes)

    @property
    def observed_trend_sign(self) -> int:
        """+1 for a non-negative observed trend, -1 otherwise."""
        return 1 if self.observed_trend_deg_per_century >= 0 else -1

    @property
    def angular_momentum_weight(self) -> float:
        """L = m·sqrt(a·(1 − e²)), the per-body weight of the vector balance."""
        return self.mass * math.sqrt(
            self.semi_major_axis * (1.0 - self.eccentricity ** 2)
        )


@dataclass(frozen=True)
class ReferencePlane:
    """The fixed reference body's plane and its own inclination oscillation.

    The reference plane tilts as mean + amplitude·cos(phase) with the phase
    advancing 2π per precession period, and its node advances
    360°/period per year.
    """
    name: str
    inclination_deg: float
    ascending_node_deg: float
    mean_inclination_deg: float
    amplitude_deg: float
    precession_period_yr: float

    def __post_init__(self) -> None:
        if self.precession_period_yr == 0:
            raise ValueError("precession_period_yr must be non-zero")
        if self.amplitude_deg < 0:
            raise ValueError(f"amplitude_deg must be >= 0, got {self.amplitude_deg}")

    @property
    def initial_phase_rad(self) -> float:
        if self.amplitude_deg == 0:
            return 0.0
        cos_phase = (self.inclination_deg - self.mean_inclination_deg) / self.amplitude_deg
        return math.acos(max(-1.0, min(1.0, cos_phase)))

    def inclination_at(self, year: float, epoch_year: float) -> float:
        phase = self.initial_phase_rad + 2.0 * math.pi * (year - epoch_year) / self.precession_period_yr
        return self.mean_inclination_deg + self.amplitude_deg * math.cos(phase)

    def ascending_node_at(self, year: float, epoch_year: float) -> float:
        return self.ascending_node_deg + (360.0 / self.precession_period_yr) * (year - epoch_year)


@dataclass(frozen=True)
class Assignment:
    """Discrete balance parameters of one body: quantum number and phase angle."""
    quantum_number: float | Fraction
    phase_deg: float


@dataclass(frozen=True)
class Configuration:
    """Assignment for every body, in body-table order. Hashable."""
    assignments: tuple[tuple[str, Assignment], ...]

    def __getitem__(self, body_name: str) -> Assignment:
        for name, assignment in self.assignments:
            if name == body_name:
                return assignment
        raise KeyError(body_name)

    def __contains__(self, body_name: object) -> bool:
        return any(name == body_name for name, _ in self.assignments)

    @property
    def body_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.assignments)

    @classmethod
    def from_mapping(
        cls,
        mapping: dict[str, Assignment],
        order: tuple[str, ...],
    ) -> "Configuration":
        """Build from a name→Assignment mapping ordered by `order`."""
        missing = [name for name in order if name not in mapping]
        if missing:
            raise ValueError(f"configuration is missing bodies: {missing}")
        extra = sorted(set(mapping) - set(order))
        if extra:
            raise ValueError(f"configuration names unknown bodies: {extra}")
        return cls(tuple((name, mapping[name]) for name in order))


@dataclass(frozen=True)
class Scenario:
    """Named fixed assignment for the distinguished bodies."""
    name: str
    fixed: tuple[tuple[str, Assignment], ...]
    description: str = ""

    @property
    def body_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.fixed)


@dataclass(frozen=True)
class ModelConstants:
    """Constants of the balance model and its search domain.

    Attributes:
        amplitude_constant: K in amplitude = K / (d·sqrt(m)).
        phase_angles_deg: The two allowed phase angles; index 0 is primary.
        quantum_numbers: Ordered quantum-number domain shared by all
            varying bodies.
        epoch_year: Epoch of the stored inclinations and nodes.
        trend_years: Earlier and later year of the trend check.
        bound_tolerance_deg: Slack on each side of the inclination bounds.
        balance_threshold: Minimum balance (%) kept by the search.
        node_preference: Provenance order used to pick each body's node.
    """
    amplitude_constant: float
    phase_angles_deg: tuple[float, float]
    quantum_numbers: tuple[float | Fraction, ...]
    epoch_year: float = 2000.0
    trend_years: tuple[float, float] = (1900.0, 2100.0)
    bound_tolerance_deg: float = 0.01
    balance_threshold: float = 99.994
    node_preference: tuple[NodeProvenance, ...] = field(default=(
        NodeProvenance.NUMERICALLY_OPTIMIZED,
        NodeProvenance.ORIGINAL_REFERENCE,
    ))

    def __post_init__(self) -> None:
        if self.amplitude_constant <= 0:
            raise ValueError(f"amplitude_constant must be > 0, got {self.amplitude_constant}")
        if len(self.phase_angles_deg) != 2:
            raise ValueError(
                f"exactly two phase angles are required, got {len(self.phase_angles_deg)}"
            )
        if not self.quantum_numbers:
            raise ValueError("quantum_numbers must be non-empty")
        for d in self.quantum_numbers:
            if d <= 0:
                raise ValueError(f"quantum numbers must be > 0, got {d}")
        earlier, later = self.trend_years
        if later <= earlier:
            raise ValueError(f"trend_years must be increasing, got {self.trend_years}")
        if self.bound_tolerance_deg < 0:
            raise ValueError(
                f"bound_tolerance_deg must be >= 0, got {self.bound_tolerance_deg}"
            )

    def phase_index(self, phase_deg: float) -> int:
        """Index of the allowed phase angle angularly closest to phase_deg."""
        primary, secondary = self.phase_angles_deg
        if angular_distance_deg(phase_deg, primary) <= angular_distance_deg(phase_deg, secondary):
            return 0
        return 1


@dataclass(frozen=True)
class BodyTable:
    """A body table with its reference plane and optional constant overrides."""
    bodies: tuple[Body, ...]
    reference: ReferencePlane
    constants: ModelConstants | None = None

    def body(self, name: str) -> Body:
        for b in self.bodies:
            if b.name == name:
                return b
        raise KeyError(name)
