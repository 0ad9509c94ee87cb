# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for the numerical and analytical ascending-node solvers."""
import ast
import math

import pytest

from invariable_plane.domain.ascending_node import (
    AnalyticalNodeSolution,
    CrossValidation,
    InfeasibleNodeSolution,
    NumericalNodeSolution,
    cross_validate_node,
    solve_body_nodes,
    solve_node_analytical,
    solve_node_numerical,
    verify_ascending_nodes,
)
from invariable_plane.domain.bodies import NodeProvenance
from invariable_plane.domain.plane_geometry import (
    angular_distance_deg,
    apparent_inclination_between,
    wrap_deg,
)
from invariable_plane.domain.solar_system import (
    EARTH,
    EARTH_PLANE,
    MERCURY,
    SOLVER_BODIES,
)


# ── Helpers ──────────────────────────────────────────────────────────

_REF_I = EARTH_PLANE.inclination_deg
_REF_NODE = EARTH_PLANE.ascending_node_deg

_MERCURY_I = 6.3472858
_MERCURY_TARGET = 7.00497902
_MERCURY_START = 32.22


# ── Mercury end-to-end ───────────────────────────────────────────────

class TestMercuryEndToEnd:

    def test_reference_inclination(self):
        assert _REF_I == pytest.approx(1.57866663, abs=1e-6)

    def test_numerical_node(self):
        sol = solve_node_numerical(
            _MERCURY_I, _MERCURY_TARGET, _REF_I, _REF_NODE, _MERCURY_START,
        )
        assert sol.node_deg == pytest.approx(32.83, abs=0.01)
        assert sol.error_arcsec < 1.0

    def test_rounded_node(self):
        sol = solve_node_numerical(
            _MERCURY_I, _MERCURY_TARGET, _REF_I, _REF_NODE, _MERCURY_START,
        )
        assert sol.rounded_node_deg == pytest.approx(32.83, abs=0.011)
        assert sol.rounded_node_deg == round(sol.node_deg, 2)

    def test_delta_from_start(self):
        sol = solve_node_numerical(
            _MERCURY_I, _MERCURY_TARGET, _REF_I, _REF_NODE, _MERCURY_START,
        )
        assert sol.delta_from_start_deg == pytest.approx(sol.node_deg - _MERCURY_START, abs=1e-9)
        assert sol.delta_from_start_deg > 0

    def test_analytical_agrees(self):
        num = solve_node_numerical(
            _MERCURY_I, _MERCURY_TARGET, _REF_I, _REF_NODE, _MERCURY_START,
        )
        ana = solve_node_analytical(
            _MERCURY_I, _MERCURY_TARGET, _REF_I, _REF_NODE, hint_deg=_MERCURY_START,
        )
        assert ana.feasible
        assert abs(ana.chosen_deg - num.node_deg) < 0.01

    def test_analytical_alternate_is_mirror_about_reference(self):
        ana = solve_node_analytical(
            _MERCURY_I, _MERCURY_TARGET, _REF_I, _REF_NODE, hint_deg=_MERCURY_START,
        )
        mid = (ana.chosen_deg + ana.alternate_deg) / 2
        assert mid % 180.0 == pytest.approx(_REF_NODE % 180.0, abs=1e-9)


# ── NumericalNodeSolution ────────────────────────────────────────────

class TestNumericalSolver:

    def test_frozen(self):
        sol = solve_node_numerical(5.0, 5.5, 1.5, 0.0, 100.0)
        with pytest.raises(AttributeError):
            sol.node_deg = 0.0

    def test_result_type(self):
        sol = solve_node_numerical(5.0, 5.5, 1.5, 0.0, 100.0)
        assert isinstance(sol, NumericalNodeSolution)

    def test_error_is_signed(self):
        sol = solve_node_numerical(5.0, 5.5, 1.5, 0.0, 100.0)
        assert sol.error_deg == pytest.approx(sol.apparent_inclination_deg - sol.target_deg)
        assert sol.error_arcsec == pytest.approx(abs(sol.error_deg) * 3600.0)

    def test_node_wrapped(self):
        sol = solve_node_numerical(5.0, 5.5, 1.5, 0.0, 355.0)
        assert 0.0 <= sol.node_deg < 360.0

    def test_start_near_zero_crosses_wrap(self):
        # Truth at 2°, start at 355°: scan must cross 360 → 0
        target = apparent_inclination_between(6.0, 2.0, 1.5, 250.0)
        sol = solve_node_numerical(6.0, target, 1.5, 250.0, 355.0)
        assert angular_distance_deg(sol.node_deg, 2.0) < 0.001
        assert sol.delta_from_start_deg == pytest.approx(7.0, abs=0.001)

    def test_unreachable_target_returns_best_effort(self):
        sol = solve_node_numerical(2.0, 20.0, 1.5, 0.0, 100.0)
        assert math.isfinite(sol.node_deg)
        assert sol.error_deg < 0

    def test_deterministic(self):
        a = solve_node_numerical(5.0, 5.5, 1.5, 0.0, 100.0)
        b = solve_node_numerical(5.0, 5.5, 1.5, 0.0, 100.0)
        assert a == b


# ── AnalyticalNodeSolution ───────────────────────────────────────────

class TestAnalyticalSolver:

    def test_without_hint_exposes_both(self):
        sol = solve_node_analytical(_MERCURY_I, _MERCURY_TARGET, _REF_I, _REF_NODE)
        assert isinstance(sol, AnalyticalNodeSolution)
        assert sol.chosen_deg is None
        assert sol.alternate_deg is None
        plus, minus = sol.candidates
        assert plus == pytest.approx((_REF_NODE + sol.delta_node_deg) % 360.0)
        assert minus == pytest.approx((_REF_NODE - sol.delta_node_deg) % 360.0)

    def test_both_candidates_reproduce_target(self):
        sol = solve_node_analytical(_MERCURY_I, _MERCURY_TARGET, _REF_I, _REF_NODE)
        for node in sol.candidates:
            apparent = apparent_inclination_between(_MERCURY_I, node, _REF_I, _REF_NODE)
            assert apparent == pytest.approx(_MERCURY_TARGET, abs=1e-8)

    def test_hint_selects_closer_candidate(self):
        sol = solve_node_analytical(_MERCURY_I, _MERCURY_TARGET, _REF_I, _REF_NODE, hint_deg=180.0)
        assert sol.chosen_deg == pytest.approx(176.19, abs=0.05)
        assert sol.alternate_deg == pytest.approx(32.83, abs=0.01)

    def test_cos_ratio_in_range(self):
        sol = solve_node_analytical(_MERCURY_I, _MERCURY_TARGET, _REF_I, _REF_NODE)
        assert -1.0 <= sol.cos_ratio <= 1.0
        assert sol.cos_ratio == pytest.approx(-0.3143, abs=1e-3)

    def test_infeasible_target(self):
        sol = solve_node_analytical(2.0, 5.0, 1.5, 0.0, hint_deg=10.0)
        assert isinstance(sol, InfeasibleNodeSolution)
        assert not sol.feasible
        assert abs(sol.cos_ratio) > 1.0001
        assert "No solution" in sol.message

    def test_reference_in_invariable_plane_is_infeasible(self):
        sol = solve_node_analytical(5.0, 5.0, 0.0, 0.0)
        assert isinstance(sol, InfeasibleNodeSolution)
        assert math.isnan(sol.cos_ratio)

    def test_marginal_ratio_is_clamped(self):
        # Target exactly i_p + i_e gives cos(ΔΩ) = -1 up to rounding
        sol = solve_node_analytical(5.0, 6.5, 1.5, 40.0)
        assert sol.feasible
        assert sol.delta_node_deg == pytest.approx(180.0, abs=1e-3)

    def test_frozen(self):
        sol = solve_node_analytical(_MERCURY_I, _MERCURY_TARGET, _REF_I, _REF_NODE)
        with pytest.raises(AttributeError):
            sol.cos_ratio = 0.0


# ── Round trip ───────────────────────────────────────────────────────

_ROUND_TRIP_CASES = [
    # (i_p, node_p, i_ref, node_ref, start offset)
    (6.0, 40.0, 1.5, 284.51, 5.0),
    (2.15, 54.7, 1.5786666, 284.51, -3.0),
    (0.92, 118.8, 1.5786666, 284.51, 7.5),
    (15.56, 200.0, 2.0, 10.0, -5.0),
    (0.5, 300.0, 1.0, 200.0, 0.0),
]


class TestRoundTrip:

    @pytest.mark.parametrize("i_p,node_p,i_ref,node_ref,offset", _ROUND_TRIP_CASES)
    def test_numerical_recovers_node(self, i_p, node_p, i_ref, node_ref, offset):
        target = apparent_inclination_between(i_p, node_p, i_ref, node_ref)
        sol = solve_node_numerical(i_p, target, i_ref, node_ref, node_p + offset)
        assert angular_distance_deg(sol.node_deg, node_p) <= 0.001

    @pytest.mark.parametrize("i_p,node_p,i_ref,node_ref,offset", _ROUND_TRIP_CASES)
    def test_analytical_candidates_contain_node(self, i_p, node_p, i_ref, node_ref, offset):
        target = apparent_inclination_between(i_p, node_p, i_ref, node_ref)
        sol = solve_node_analytical(i_p, target, i_ref, node_ref, hint_deg=node_p + offset)
        assert angular_distance_deg(sol.chosen_deg, node_p) <= 1e-6


# ── Cross-validation ─────────────────────────────────────────────────

class TestCrossValidation:

    def test_mercury_agrees(self):
        cv = cross_validate_node(_MERCURY_I, _MERCURY_TARGET, _REF_I, _REF_NODE, _MERCURY_START)
        assert isinstance(cv, CrossValidation)
        assert cv.agrees
        assert not cv.ambiguous
        assert cv.node_difference_deg < 0.01
        assert cv.numerical_residual_arcsec < 1.0
        assert cv.analytical_residual_arcsec < 1e-4

    def test_infeasible_never_agrees(self):
        cv = cross_validate_node(2.0, 5.0, 1.5, 0.0, 10.0)
        assert not cv.agrees
        assert cv.node_difference_deg is None
        assert cv.analytical_residual_arcsec is None

    def test_both_roots_in_window_is_ambiguous(self):
        # ΔΩ = 3°: roots at node_ref ± 3 are both within ±10° of the start
        target = apparent_inclination_between(5.0, 103.0, 1.5, 100.0)
        numerical = solve_node_numerical(5.0, target, 1.5, 100.0, 100.0)
        cv = cross_validate_node(5.0, target, 1.5, 100.0, 100.0, hint_deg=numerical.node_deg)
        assert cv.ambiguous
        assert cv.agrees
        assert cv.node_difference_deg <= 0.01

    def test_ambiguous_judged_against_chosen_root(self):
        target = apparent_inclination_between(5.0, 103.0, 1.5, 100.0)
        numerical = solve_node_numerical(5.0, target, 1.5, 100.0, 100.0)
        # hint the root the grid search did not settle on
        other = wrap_deg(200.0 - numerical.node_deg)
        cv = cross_validate_node(5.0, target, 1.5, 100.0, 100.0, hint_deg=other)
        assert cv.ambiguous
        assert not cv.agrees
        assert cv.node_difference_deg == pytest.approx(
            angular_distance_deg(numerical.node_deg, cv.analytical.chosen_deg)
        )
        assert cv.node_difference_deg > 5.0


class TestSolverBodies:

    @pytest.fixture(scope="class")
    def solutions(self):
        return solve_body_nodes(SOLVER_BODIES, EARTH_PLANE)

    def test_one_solution_per_body(self, solutions):
        assert [s.name for s in solutions] == [b.name for b in SOLVER_BODIES]
        assert len(solutions) == 8

    def test_every_body_agrees_on_chosen_node(self, solutions):
        for s in solutions:
            cv = s.validation
            assert cv.agrees, f"{s.name}: Δ={cv.node_difference_deg}"
            assert angular_distance_deg(cv.numerical.node_deg, cv.analytical.chosen_deg) <= 0.01, s.name

    def test_numerical_residuals_below_hundredth_arcsec(self, solutions):
        for s in solutions:
            assert s.validation.numerical_residual_arcsec < 0.01, s.name

    def test_analytical_residuals_below_hundredth_arcsec(self, solutions):
        for s in solutions:
            assert s.validation.analytical_residual_arcsec < 0.01, s.name

    def test_only_pluto_is_ambiguous(self, solutions):
        ambiguous = [s.name for s in solutions if s.validation.ambiguous]
        assert ambiguous == ['pluto']

    def test_hint_is_prior_optimized_node(self, solutions):
        for s, body in zip(solutions, SOLVER_BODIES):
            assert s.hint_node_deg == body.ascending_node_deg((NodeProvenance.NUMERICALLY_OPTIMIZED,))
            assert s.validation.analytical.hint_deg == s.hint_node_deg

    def test_pluto_picks_root_near_prior_solution(self, solutions):
        pluto = solutions[-1].validation
        assert pluto.analytical.chosen_deg == pytest.approx(101.06, abs=0.01)
        assert pluto.numerical.node_deg == pytest.approx(101.06, abs=0.01)
        assert angular_distance_deg(pluto.analytical.alternate_deg, 101.06) > 5.0

    def test_hint_falls_back_to_start_node(self):
        (sol,) = solve_body_nodes(
            (MERCURY,), EARTH_PLANE, hint_preference=(NodeProvenance.ANALYTICALLY_DERIVED,),
        )
        assert sol.hint_node_deg == sol.start_node_deg == 32.22
        assert sol.validation.agrees

    def test_mercury_row(self, solutions):
        mercury = solutions[0]
        assert mercury.start_node_deg == 32.22
        assert mercury.validation.numerical.node_deg == pytest.approx(32.83, abs=0.01)

    def test_body_without_observed_inclination_raises(self):
        with pytest.raises(ValueError, match="apparent_inclination_deg"):
            solve_body_nodes((MERCURY, EARTH), EARTH_PLANE)


# ── Node verification ────────────────────────────────────────────────

class TestVerifyAscendingNodes:

    def test_optimized_nodes_reproduce_observations(self):
        results = verify_ascending_nodes(
            SOLVER_BODIES, EARTH_PLANE, NodeProvenance.NUMERICALLY_OPTIMIZED,
        )
        assert len(results) == 8
        for r in results:
            assert r.error_arcsec < 5.0, f"{r.name}: {r.error_arcsec:.3f}″"

    def test_optimized_beats_original_reference(self):
        optimized = verify_ascending_nodes(
            SOLVER_BODIES, EARTH_PLANE, NodeProvenance.NUMERICALLY_OPTIMIZED,
        )
        original = verify_ascending_nodes(
            SOLVER_BODIES, EARTH_PLANE, NodeProvenance.ORIGINAL_REFERENCE,
        )
        assert max(r.error_arcsec for r in optimized) < max(r.error_arcsec for r in original)

    def test_missing_variant_is_skipped(self):
        results = verify_ascending_nodes(
            SOLVER_BODIES, EARTH_PLANE, NodeProvenance.ANALYTICALLY_DERIVED,
        )
        assert results == ()

    def test_body_without_observation_is_skipped(self):
        results = verify_ascending_nodes(
            (EARTH, MERCURY), EARTH_PLANE, NodeProvenance.ORIGINAL_REFERENCE,
        )
        assert [r.name for r in results] == ['mercury']
        assert results[0].provenance is NodeProvenance.ORIGINAL_REFERENCE


# ── Domain purity ────────────────────────────────────────────────────

class TestAscendingNodePurity:

    def test_ascending_node_imports_only_stdlib_and_numpy(self):
        import invariable_plane.domain.ascending_node as mod

        allowed = {'math', 'numpy', 'dataclasses', 'typing', 'enum', '__future__'}
        with open(mod.__file__) as f:
            tree = ast.parse(f.read())

        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    root = alias.name.split('.')[0]
                    if root not in allowed and root != 'invariable_plane':
                        assert False, f"Disallowed import '{alias.name}'"
            if isinstance(node, ast.ImportFrom):
                if node.module and node.level == 0:
                    root = node.module.split('.')[0]
                    if root not in allowed and root != 'invariable_plane':
                        assert False, f"Disallowed import from '{node.module}'"
