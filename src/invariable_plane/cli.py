# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Command-line interface for the invariable-plane solver and balance search.

Usage:
    # Cross-validate ascending nodes for the solver bodies
    invariable-plane nodes

    # Residuals of a stored node variant
    invariable-plane verify --provenance verified

    # Exhaustive balance search (all four scenarios, 4 processes)
    invariable-plane search --workers 4 --export-json balance-presets.json
    invariable-plane search --scenario A --threshold 99.99 --limit 20
    invariable-plane search --quantum-numbers 3 5 8 --export-csv presets.csv

    # Filter-intersection table of the configuration space
    invariable-plane analyze

    # Alternative body table
    invariable-plane nodes --bodies table.json
"""
import argparse
import dataclasses
import logging
import sys

from invariable_plane.domain.ascending_node import (
    solve_body_nodes,
    verify_ascending_nodes,
)
from invariable_plane.domain.balance_search import SearchEngine, SearchSpace
from invariable_plane.domain.bodies import NodeProvenance
from invariable_plane.domain.configuration_analysis import (
    ConfigurationFilter,
    analyze_configuration_space,
)
from invariable_plane.domain.solar_system import (
    EARTH_PLANE,
    MIRROR_PAIRS,
    SOLVER_BODIES,
    default_search_space,
)
from invariable_plane.adapters.json_io import JsonBodyTableReader, JsonPresetExporter
from invariable_plane.adapters.csv_exporter import CsvPresetExporter


def _solver_inputs(bodies_path: str | None):
    if bodies_path is None:
        return SOLVER_BODIES, EARTH_PLANE
    table = JsonBodyTableReader().read_body_table(bodies_path)
    solvable = tuple(b for b in table.bodies if b.apparent_inclination_deg is not None)
    return solvable, table.reference


def build_search_space(
    bodies_path: str | None = None,
    threshold: float | None = None,
    scenarios: list[str] | None = None,
    quantum_numbers: list[int] | None = None,
) -> SearchSpace:
    """
    Default search space with command-line overrides applied.

    Raises:
        ValueError: If a named scenario does not exist.
    """
    space = default_search_space(threshold)
    if bodies_path is not None:
        table = JsonBodyTableReader(base_constants=space.constants).read_body_table(bodies_path)
        space = dataclasses.replace(
            space,
            bodies=table.bodies,
            reference=table.reference,
            constants=table.constants or space.constants,
        )
    if quantum_numbers:
        space = dataclasses.replace(
            space,
            constants=dataclasses.replace(
                space.constants, quantum_numbers=tuple(quantum_numbers),
            ),
        )
    if scenarios:
        known = {s.name: s for s in space.scenarios}
        unknown = [name for name in scenarios if name not in known]
        if unknown:
            raise ValueError(
                f"Unknown scenario(s) {unknown}; choose from {sorted(known)}"
            )
        space = dataclasses.replace(
            space, scenarios=tuple(known[name] for name in scenarios),
        )
    space.validate()
    return space


def _print_nodes(args: argparse.Namespace) -> None:
    bodies, reference = _solver_inputs(args.bodies)
    solutions = solve_body_nodes(bodies, reference)
    print(
        f"Reference plane: {reference.name} "
        f"i={reference.inclination_deg:.8f}° Ω={reference.ascending_node_deg:.4f}°"
    )
    print(
        f"{'Body':<10} {'Start':>9} {'Hint':>9} {'Numerical':>10} {'Err(″)':>8} "
        f"{'Analytical':>10} {'Alternate':>10} {'Δ(°)':>8}  Status"
    )
    for sol in solutions:
        cv = sol.validation
        num = cv.numerical
        if not cv.analytical.feasible:
            print(
                f"{sol.name:<10} {sol.start_node_deg:>9.2f} {sol.hint_node_deg:>9.2f} "
                f"{num.node_deg:>10.4f} {num.error_arcsec:>8.4f}  {cv.analytical.message}"
            )
            continue
        status = "OK" if cv.agrees else "MISMATCH"
        if cv.ambiguous:
            status += " (ambiguous)"
        print(
            f"{sol.name:<10} {sol.start_node_deg:>9.2f} {sol.hint_node_deg:>9.2f} "
            f"{num.node_deg:>10.4f} {num.error_arcsec:>8.4f} {cv.analytical.chosen_deg:>10.4f} "
            f"{cv.analytical.alternate_deg:>10.4f} {cv.node_difference_deg:>8.4f}  {status}"
        )
    agreed = sum(1 for s in solutions if s.validation.agrees)
    print(f"{agreed}/{len(solutions)} bodies agree")


def _print_verify(args: argparse.Namespace) -> None:
    bodies, reference = _solver_inputs(args.bodies)
    provenance = NodeProvenance(args.provenance)
    results = verify_ascending_nodes(bodies, reference, provenance)
    print(f"Provenance: {provenance.value}")
    print(f"{'Body':<10} {'Node':>10} {'Calculated':>12} {'Target':>12} {'Err(″)':>10}")
    for r in results:
        print(
            f"{r.name:<10} {r.node_deg:>10.4f} {r.calculated_deg:>12.8f} "
            f"{r.target_deg:>12.8f} {r.error_arcsec:>10.4f}"
        )
    if results:
        worst = max(results, key=lambda r: r.error_arcsec)
        print(f"Max error: {worst.error_arcsec:.4f}″ ({worst.name})")


def _run_search(args: argparse.Namespace) -> None:
    space = build_search_space(
        bodies_path=args.bodies,
        threshold=args.threshold,
        scenarios=args.scenario,
        quantum_numbers=args.quantum_numbers,
    )
    outcome = SearchEngine(space).run(workers=args.workers)

    for name, description in outcome.scenarios:
        count = outcome.count_by_scenario().get(name, 0)
        print(f"Scenario {name} ({description}): {count} configs >= {outcome.threshold}%")
    print(f"Total: {len(outcome.results)} of {outcome.evaluated} configs >= {outcome.threshold}%")
    print(f"All pass bounds + trend: {len(outcome.passing())}")
    if outcome.excluded:
        print(f"Excluded as invalid: {outcome.excluded}")

    if args.limit:
        print(" ".join(outcome.columns))
        for row in outcome.rows()[:args.limit]:
            print(" ".join(str(cell) for cell in row))

    if args.export_json:
        n = JsonPresetExporter().export(outcome, args.export_json)
        print(f"Exported {n} presets to {args.export_json}")

    if args.export_csv:
        n = CsvPresetExporter().export(outcome, args.export_csv)
        print(f"Exported {n} presets to {args.export_csv}")


_ANALYSIS_ROWS = (
    ("Total", ()),
    ("Balance", (ConfigurationFilter.BALANCE,)),
    ("Mirror", (ConfigurationFilter.MIRROR,)),
    ("Solo phase", (ConfigurationFilter.SOLO_PHASE,)),
    ("Bounds", (ConfigurationFilter.BOUNDS,)),
    ("Mirror ∩ Balance", (ConfigurationFilter.MIRROR, ConfigurationFilter.BALANCE)),
    ("Solo ∩ Balance", (ConfigurationFilter.SOLO_PHASE, ConfigurationFilter.BALANCE)),
    ("Solo ∩ Bounds", (ConfigurationFilter.SOLO_PHASE, ConfigurationFilter.BOUNDS)),
    ("Mirror ∩ Solo", (ConfigurationFilter.MIRROR, ConfigurationFilter.SOLO_PHASE)),
    ("Mirror ∩ Bounds", (ConfigurationFilter.MIRROR, ConfigurationFilter.BOUNDS)),
    ("Balance ∩ Bounds", (ConfigurationFilter.BALANCE, ConfigurationFilter.BOUNDS)),
    ("Solo ∩ Balance ∩ Bounds", (
        ConfigurationFilter.SOLO_PHASE, ConfigurationFilter.BALANCE, ConfigurationFilter.BOUNDS,
    )),
    ("Mirror ∩ Solo ∩ Bounds", (
        ConfigurationFilter.MIRROR, ConfigurationFilter.SOLO_PHASE, ConfigurationFilter.BOUNDS,
    )),
    ("Mirror ∩ Solo ∩ Balance", (
        ConfigurationFilter.MIRROR, ConfigurationFilter.SOLO_PHASE, ConfigurationFilter.BALANCE,
    )),
    ("Mirror ∩ Balance ∩ Bounds", (
        ConfigurationFilter.MIRROR, ConfigurationFilter.BALANCE, ConfigurationFilter.BOUNDS,
    )),
    ("All four", tuple(ConfigurationFilter)),
)


def _print_analysis(args: argparse.Namespace) -> None:
    space = build_search_space(
        bodies_path=args.bodies,
        threshold=args.threshold,
        scenarios=args.scenario,
        quantum_numbers=args.quantum_numbers,
    )
    summary = analyze_configuration_space(space, MIRROR_PAIRS, args.solo_body)
    total = summary.count()
    print(f"{'Filter':<28} {'Count':>10} {'Share':>10}")
    for label, filters in _ANALYSIS_ROWS:
        n = summary.count(*filters)
        share = 100.0 * n / total if total else 0.0
        print(f"{label:<28} {n:>10,} {share:>9.4f}%")
    print()
    print(f"{'Scenario':<10} {'Total':>10} {'Balance':>8} {'Mirror':>8} {'Solo':>8} {'Bounds':>8}")
    for name, counts in summary.by_scenario:
        print(
            f"{name:<10} {counts.total:>10,} "
            f"{counts.count(ConfigurationFilter.BALANCE):>8,} "
            f"{counts.count(ConfigurationFilter.MIRROR):>8,} "
            f"{counts.count(ConfigurationFilter.SOLO_PHASE):>8,} "
            f"{counts.count(ConfigurationFilter.BOUNDS):>8,}"
        )


def _add_space_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--threshold', type=float, default=None,
        help="Minimum balance percentage (default: 99.994)"
    )
    parser.add_argument(
        '--scenario', action='append', default=None,
        help="Restrict to a scenario (A-D); repeat for several"
    )
    parser.add_argument(
        '--quantum-numbers', type=int, nargs='+', default=None,
        help="Override the quantum-number domain (default: Fibonacci 1..55)"
    )
    parser.add_argument(
        '--bodies',
        help="Path to a JSON body table replacing the built-in planets"
    )


def main():
    parser = argparse.ArgumentParser(
        prog='invariable-plane',
        description="Ascending-node solver and inclination balance search "
                    "on the invariable plane",
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true', default=False,
        help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest='command', required=True)

    nodes = sub.add_parser('nodes', help="Cross-validate numerical and analytical nodes")
    nodes.add_argument('--bodies', help="Path to a JSON body table")

    verify = sub.add_parser('verify', help="Apparent-inclination residuals of stored nodes")
    verify.add_argument(
        '--provenance', default=NodeProvenance.NUMERICALLY_OPTIMIZED.value,
        choices=[p.value for p in NodeProvenance],
        help="Node variant to verify (default: numerically-optimized)"
    )
    verify.add_argument('--bodies', help="Path to a JSON body table")

    search = sub.add_parser('search', help="Exhaustive balance search")
    _add_space_arguments(search)
    search.add_argument(
        '--workers', type=int, default=1,
        help="Worker processes, one scenario each (default: 1)"
    )
    search.add_argument(
        '--limit', type=int, default=0,
        help="Print the top N rows (default: 0)"
    )
    search.add_argument('--export-json', help="Write balance presets JSON")
    search.add_argument('--export-csv', help="Write balance presets CSV")

    analyze = sub.add_parser('analyze', help="Filter-intersection counts")
    _add_space_arguments(analyze)
    analyze.add_argument(
        '--solo-body', default='saturn',
        help="Body expected alone in the secondary phase group (default: saturn)"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {
        'nodes': _print_nodes,
        'verify': _print_verify,
        'search': _run_search,
        'analyze': _print_analysis,
    }
    try:
        handlers[args.command](args)
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename}", file=sys.stderr)
        sys.exit(1)
    except (ValueError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
