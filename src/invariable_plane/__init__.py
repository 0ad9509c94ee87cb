# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Invariable Plane

Ascending-node solver and inclination balance search for planetary
orbits on the solar system's invariable plane. Includes plane-normal
geometry, a numerical grid-search and a closed-form node solver with
cross-validation, node verification per provenance, the angular-momentum
weighted balance model, an exhaustive multi-process balance search and
configuration-space filter analysis.
"""

__version__ = "1.0.0"

from invariable_plane.domain.plane_geometry import (
    plane_normal,
    apparent_inclination_deg,
    apparent_inclination_between,
    wrap_deg,
    angular_distance_deg,
)
from invariable_plane.domain.bodies import (
    NodeProvenance,
    NodeVariant,
    InclinationBounds,
    Body,
    BodyTable,
    ReferencePlane,
    Assignment,
    Configuration,
    Scenario,
    ModelConstants,
)
from invariable_plane.domain.ascending_node import (
    NumericalNodeSolution,
    AnalyticalNodeSolution,
    InfeasibleNodeSolution,
    CrossValidation,
    BodyNodeSolution,
    NodeVerification,
    solve_node_numerical,
    solve_node_analytical,
    cross_validate_node,
    solve_body_nodes,
    verify_ascending_nodes,
)
from invariable_plane.domain.balance_model import (
    BodyAssessment,
    EvaluationResult,
    BalanceModel,
)
from invariable_plane.domain.balance_search import (
    SearchState,
    SearchSpace,
    SearchResult,
    SearchOutcome,
    SearchEngine,
)
from invariable_plane.domain.configuration_analysis import (
    ConfigurationFilter,
    FilterCounts,
    ConfigurationSpaceSummary,
    analyze_configuration_space,
)
from invariable_plane.domain.solar_system import (
    PLANETS,
    SOLVER_BODIES,
    EARTH_PLANE,
    DEFAULT_CONSTANTS,
    SCENARIOS,
    CANONICAL,
    VARYING,
    MIRROR_PAIRS,
    CURRENT_CONFIGURATION,
    default_search_space,
)
from invariable_plane.adapters.json_io import JsonBodyTableReader, JsonPresetExporter
from invariable_plane.adapters.csv_exporter import CsvPresetExporter

__all__ = [
    "plane_normal",
    "apparent_inclination_deg",
    "apparent_inclination_between",
    "wrap_deg",
    "angular_distance_deg",
    "NodeProvenance",
    "NodeVariant",
    "InclinationBounds",
    "Body",
    "BodyTable",
    "ReferencePlane",
    "Assignment",
    "Configuration",
    "Scenario",
    "ModelConstants",
    "NumericalNodeSolution",
    "AnalyticalNodeSolution",
    "InfeasibleNodeSolution",
    "CrossValidation",
    "BodyNodeSolution",
    "NodeVerification",
    "solve_node_numerical",
    "solve_node_analytical",
    "cross_validate_node",
    "solve_body_nodes",
    "verify_ascending_nodes",
    "BodyAssessment",
    "EvaluationResult",
    "BalanceModel",
    "SearchState",
    "SearchSpace",
    "SearchResult",
    "SearchOutcome",
    "SearchEngine",
    "ConfigurationFilter",
    "FilterCounts",
    "ConfigurationSpaceSummary",
    "analyze_configuration_space",
    "PLANETS",
    "SOLVER_BODIES",
    "EARTH_PLANE",
    "DEFAULT_CONSTANTS",
    "SCENARIOS",
    "CANONICAL",
    "VARYING",
    "MIRROR_PAIRS",
    "CURRENT_CONFIGURATION",
    "default_search_space",
    "JsonBodyTableReader",
    "JsonPresetExporter",
    "CsvPresetExporter",
]
