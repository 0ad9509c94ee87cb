# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Ascending-node solver.

Finds the ascending node Ω_p on the invariable plane for which a plane
with inclination i_p appears at a target inclination i_t when seen from
a reference plane (i_e, Ω_e). Two independent methods:

- numerical: two-phase grid search (±10° at 0.01°, then ±0.1° at 0.0001°)
- analytical: spherical-triangle identity
      cos(i_t) = cos(i_p)·cos(i_e) + sin(i_p)·sin(i_e)·cos(ΔΩ)

The two are cross-checked; disagreement beyond the fine-grid resolution
is a geometry-convention defect.

Grid evaluation is vectorized with numpy.
"""
import math
from dataclasses import dataclass

import numpy as np

from invariable_plane.domain.bodies import Body, NodeProvenance, ReferencePlane
from invariable_plane.domain.plane_geometry import (
    angular_distance_deg,
    apparent_inclination_between,
    apparent_inclination_grid,
    wrap_deg,
)

COARSE_HALF_WIDTH_DEG = 10.0
COARSE_STEP_DEG = 0.01
FINE_HALF_WIDTH_DEG = 0.1
FINE_STEP_DEG = 0.0001

# |cos ΔΩ| beyond this is reported infeasible instead of clamped
COS_RATIO_LIMIT = 1.0001

ARCSEC_PER_DEG = 3600.0


@dataclass(frozen=True)
class NumericalNodeSolution:
    """Grid-search result."""
    node_deg: float
    apparent_inclination_deg: float
    target_deg: float
    error_deg: float              # signed: apparent − target
    error_arcsec: float           # |error| × 3600
    delta_from_start_deg: float   # signed, shortest way round

    @property
    def rounded_node_deg(self) -> float:
        """Node rounded to 0.01° for use as a reference constant."""
        return round(self.node_deg, 2)


@dataclass(frozen=True)
class AnalyticalNodeSolution:
    """Closed-form result with both candidate nodes.

    chosen_deg is None when no hint was given: the solution set is
    genuinely two-valued.
    """
    delta_node_deg: float
    plus_candidate_deg: float
    minus_candidate_deg: float
    cos_ratio: float
    hint_deg: float | None = None
    chosen_deg: float | None = None
    alternate_deg: float | None = None

    feasible = True

    @property
    def candidates(self) -> tuple[float, float]:
        return (self.plus_candidate_deg, self.minus_candidate_deg)


@dataclass(frozen=True)
class InfeasibleNodeSolution:
    """No ascending node reproduces the target inclination."""
    cos_ratio: float
    message: str

    feasible = False


@dataclass(frozen=True)
class CrossValidation:
    """Numerical vs analytical solution for one set of inputs."""
    numerical: NumericalNodeSolution
    analytical: AnalyticalNodeSolution | InfeasibleNodeSolution
    node_difference_deg: float | None
    numerical_residual_arcsec: float
    analytical_residual_arcsec: float | None
    ambiguous: bool
    agrees: bool


def _wrap_array(nodes: np.ndarray) -> np.ndarray:
    wrapped = np.mod(nodes, 360.0)
    return np.where(wrapped >= 360.0, wrapped - 360.0, wrapped)


def _scan(
    inclination_deg: float,
    target_deg: float,
    reference_inclination_deg: float,
    reference_node_deg: float,
    center_deg: float,
    half_width_deg: float,
    step_deg: float,
) -> tuple[float, float]:
    """Best (node, |error|) on a uniform grid around center_deg.

    The first minimum in scan order wins.
    """
    n_steps = int(round(half_width_deg / step_deg))
    offsets = np.arange(-n_steps, n_steps + 1) * step_deg
    nodes = _wrap_array(center_deg + offsets)
    errors = np.abs(apparent_inclination_grid(
        inclination_deg, nodes, reference_inclination_deg, reference_node_deg,
    ) - target_deg)
    idx = int(np.argmin(errors))
    return float(nodes[idx]), float(errors[idx])


def solve_node_numerical(
    inclination_deg: float,
    target_deg: float,
    reference_inclination_deg: float,
    reference_node_deg: float,
    start_node_deg: float,
) -> NumericalNodeSolution:
    """
    Find the ascending node by two-phase grid search.

    Args:
        inclination_deg: Body inclination to the invariable plane (degrees).
        target_deg: Target apparent inclination (degrees).
        reference_inclination_deg: Reference plane inclination (degrees).
        reference_node_deg: Reference plane ascending node (degrees).
        start_node_deg: Starting guess; the coarse scan covers ±10° around it.

    Returns:
        NumericalNodeSolution.
    """
    best_node, best_error = _scan(
        inclination_deg, target_deg,
        reference_inclination_deg, reference_node_deg,
        wrap_deg(start_node_deg), COARSE_HALF_WIDTH_DEG, COARSE_STEP_DEG,
    )
    fine_node, fine_error = _scan(
        inclination_deg, target_deg,
        reference_inclination_deg, reference_node_deg,
        best_node, FINE_HALF_WIDTH_DEG, FINE_STEP_DEG,
    )
    if fine_error < best_error:
        best_node = fine_node

    apparent = apparent_inclination_between(
        inclination_deg, best_node, reference_inclination_deg, reference_node_deg,
    )
    error = apparent - target_deg
    delta = math.fmod(best_node - start_node_deg + 180.0, 360.0)
    if delta < 0.0:
        delta += 360.0
    return NumericalNodeSolution(
        node_deg=best_node,
        apparent_inclination_deg=apparent,
        target_deg=target_deg,
        error_deg=error,
        error_arcsec=abs(error) * ARCSEC_PER_DEG,
        delta_from_start_deg=delta - 180.0,
    )


def solve_node_analytical(
    inclination_deg: float,
    target_deg: float,
    reference_inclination_deg: float,
    reference_node_deg: float,
    hint_deg: float | None = None,
) -> AnalyticalNodeSolution | InfeasibleNodeSolution:
    """
    Solve the ascending node in closed form.

    cos(ΔΩ) = [cos(i_t) − cos(i_p)·cos(i_e)] / [sin(i_p)·sin(i_e)] and
    Ω_p = Ω_e ± ΔΩ. With a hint, the candidate angularly closer to it is
    chosen; on an exact tie the Ω_e − ΔΩ candidate wins.

    Returns:
        AnalyticalNodeSolution, or InfeasibleNodeSolution when
        |cos ΔΩ| > 1.0001 or the ratio is undefined.
    """
    i_t = math.radians(target_deg)
    i_p = math.radians(inclination_deg)
    i_e = math.radians(reference_inclination_deg)

    numerator = math.cos(i_t) - math.cos(i_p) * math.cos(i_e)
    denominator = math.sin(i_p) * math.sin(i_e)
    if denominator == 0.0:
        return InfeasibleNodeSolution(
            cos_ratio=math.nan,
            message="No solution: node is undefined when either plane "
                    "coincides with the invariable plane",
        )

    cos_ratio = numerator / denominator
    if abs(cos_ratio) > COS_RATIO_LIMIT:
        return InfeasibleNodeSolution(
            cos_ratio=cos_ratio,
            message=f"No solution: |cos(ΔΩ)| = {abs(cos_ratio):.4f} > 1",
        )

    clamped = max(-1.0, min(1.0, cos_ratio))
    delta_node = math.degrees(math.acos(clamped))
    plus = wrap_deg(reference_node_deg + delta_node)
    minus = wrap_deg(reference_node_deg - delta_node)

    chosen = alternate = None
    if hint_deg is not None:
        if angular_distance_deg(plus, hint_deg) < angular_distance_deg(minus, hint_deg):
            chosen, alternate = plus, minus
        else:
            chosen, alternate = minus, plus

    return AnalyticalNodeSolution(
        delta_node_deg=delta_node,
        plus_candidate_deg=plus,
        minus_candidate_deg=minus,
        cos_ratio=clamped,
        hint_deg=hint_deg,
        chosen_deg=chosen,
        alternate_deg=alternate,
    )


def cross_validate_node(
    inclination_deg: float,
    target_deg: float,
    reference_inclination_deg: float,
    reference_node_deg: float,
    start_node_deg: float,
    hint_deg: float | None = None,
    tolerance_deg: float = 0.01,
) -> CrossValidation:
    """
    Run both solvers on the same inputs and compare.

    The analytical hint defaults to the numerical starting guess.
    Agreement is always judged against the chosen analytical candidate.
    When both candidates fall inside the numerical coarse window the grid
    search may settle on either root; such inputs are flagged ambiguous,
    and only a hint near the intended root makes them agree.
    """
    if hint_deg is None:
        hint_deg = start_node_deg

    numerical = solve_node_numerical(
        inclination_deg, target_deg,
        reference_inclination_deg, reference_node_deg, start_node_deg,
    )
    analytical = solve_node_analytical(
        inclination_deg, target_deg,
        reference_inclination_deg, reference_node_deg, hint_deg,
    )

    if not analytical.feasible:
        return CrossValidation(
            numerical=numerical,
            analytical=analytical,
            node_difference_deg=None,
            numerical_residual_arcsec=numerical.error_arcsec,
            analytical_residual_arcsec=None,
            ambiguous=False,
            agrees=False,
        )

    ambiguous = all(
        angular_distance_deg(c, start_node_deg) <= COARSE_HALF_WIDTH_DEG
        for c in analytical.candidates
    )
    analytical_apparent = apparent_inclination_between(
        inclination_deg, analytical.chosen_deg,
        reference_inclination_deg, reference_node_deg,
    )
    difference = angular_distance_deg(numerical.node_deg, analytical.chosen_deg)

    return CrossValidation(
        numerical=numerical,
        analytical=analytical,
        node_difference_deg=difference,
        numerical_residual_arcsec=numerical.error_arcsec,
        analytical_residual_arcsec=abs(analytical_apparent - target_deg) * ARCSEC_PER_DEG,
        ambiguous=ambiguous,
        agrees=difference <= tolerance_deg,
    )


@dataclass(frozen=True)
class BodyNodeSolution:
    """Cross-validated node solution for one body of a table."""
    name: str
    start_node_deg: float
    hint_node_deg: float
    validation: CrossValidation


def solve_body_nodes(
    bodies: tuple[Body, ...],
    reference: ReferencePlane,
    start_provenance: NodeProvenance = NodeProvenance.ORIGINAL_REFERENCE,
    hint_preference: tuple[NodeProvenance, ...] = (NodeProvenance.NUMERICALLY_OPTIMIZED,),
    tolerance_deg: float = 0.01,
) -> tuple[BodyNodeSolution, ...]:
    """Cross-validate the node of every body with an observed apparent inclination.

    The stored node of start_provenance seeds the grid search. The
    closed-form solution is disambiguated by the first stored node in
    hint_preference (a prior reference solution), falling back to the
    starting node.

    Raises:
        ValueError: If a body has no observed apparent inclination.
    """
    solutions: list[BodyNodeSolution] = []
    for body in bodies:
        if body.apparent_inclination_deg is None:
            raise ValueError(f"{body.name}: apparent_inclination_deg is required")
        start = body.ascending_node_deg((start_provenance,))
        hint = body.ascending_node_deg(hint_preference + (start_provenance,))
        solutions.append(BodyNodeSolution(
            name=body.name,
            start_node_deg=start,
            hint_node_deg=hint,
            validation=cross_validate_node(
                body.inclination_deg,
                body.apparent_inclination_deg,
                reference.inclination_deg,
                reference.ascending_node_deg,
                start,
                hint_deg=hint,
                tolerance_deg=tolerance_deg,
            ),
        ))
    return tuple(solutions)


@dataclass(frozen=True)
class NodeVerification:
    """Apparent inclination reproduced by one stored node variant."""
    name: str
    provenance: NodeProvenance
    node_deg: float
    calculated_deg: float
    target_deg: float
    error_arcsec: float


def verify_ascending_nodes(
    bodies: tuple[Body, ...],
    reference: ReferencePlane,
    provenance: NodeProvenance,
) -> tuple[NodeVerification, ...]:
    """Feed a stored node variant back through the plane geometry.

    Bodies without that variant or without an observed apparent
    inclination are skipped.
    """
    results: list[NodeVerification] = []
    for body in bodies:
        if body.apparent_inclination_deg is None or not body.has_node(provenance):
            continue
        node = body.ascending_node_deg((provenance,))
        calculated = apparent_inclination_between(
            body.inclination_deg, node,
            reference.inclination_deg, reference.ascending_node_deg,
        )
        results.append(NodeVerification(
            name=body.name,
            provenance=provenance,
            node_deg=node,
            calculated_deg=calculated,
            target_deg=body.apparent_inclination_deg,
            error_arcsec=abs(calculated - body.apparent_inclination_deg) * ARCSEC_PER_DEG,
        ))
    return tuple(results)
