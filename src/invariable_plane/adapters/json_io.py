# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
JSON file I/O adapter.

Reads body tables and writes balance presets in JSON format.
"""
import dataclasses
import json
import logging
from datetime import datetime, timezone
from fractions import Fraction
from typing import Any

from invariable_plane.domain.balance_search import SearchOutcome
from invariable_plane.domain.bodies import (
    Body,
    BodyTable,
    InclinationBounds,
    ModelConstants,
    NodeProvenance,
    NodeVariant,
    ReferencePlane,
)
from invariable_plane.ports import BodyTableReader
from invariable_plane.ports.export import ResultExporter

logger = logging.getLogger(__name__)

_REFERENCE_KEYS = (
    'name', 'inclination_deg', 'ascending_node_deg',
    'mean_inclination_deg', 'amplitude_deg', 'precession_period_yr',
)

_CONSTANT_KEYS = {
    'amplitude_constant', 'phase_angles_deg', 'quantum_numbers',
    'epoch_year', 'trend_years', 'bound_tolerance_deg', 'balance_threshold',
}

_TUPLE_CONSTANTS = ('phase_angles_deg', 'quantum_numbers', 'trend_years')


def _require(record: dict, key: str, where: str) -> Any:
    try:
        return record[key]
    except KeyError:
        raise ValueError(f"{where}: missing required key '{key}'") from None


def _parse_body(record: dict) -> Body:
    if not isinstance(record, dict):
        raise ValueError(f"body records must be JSON objects, got {record!r}")
    where = f"body {record.get('name', '?')}"
    nodes = _require(record, 'ascending_nodes', where)
    if not isinstance(nodes, dict):
        raise ValueError(f"{where}: ascending_nodes must map provenance to degrees")
    try:
        variants = tuple(
            NodeVariant(NodeProvenance(provenance), float(value))
            for provenance, value in nodes.items()
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"{where}: {e}") from None
    try:
        bounds = _require(record, 'inclination_bounds', where)
        if len(bounds) != 2:
            raise ValueError(f"{where}: inclination_bounds must be [min, max]")
        apparent = record.get('apparent_inclination_deg')
        return Body(
            name=_require(record, 'name', where),
            mass=float(_require(record, 'mass', where)),
            semi_major_axis=float(_require(record, 'semi_major_axis', where)),
            eccentricity=float(_require(record, 'eccentricity', where)),
            inclination_deg=float(_require(record, 'inclination_deg', where)),
            ascending_nodes=variants,
            precession_period_yr=float(_require(record, 'precession_period_yr', where)),
            inclination_bounds=InclinationBounds(float(bounds[0]), float(bounds[1])),
            observed_trend_deg_per_century=float(
                record.get('observed_trend_deg_per_century', 0.0)
            ),
            apparent_inclination_deg=None if apparent is None else float(apparent),
        )
    except TypeError as e:
        raise ValueError(f"{where}: {e}") from None


def _parse_constants(
    record: dict,
    base: ModelConstants | None,
) -> ModelConstants:
    if not isinstance(record, dict):
        raise ValueError("constants: expected a JSON object")
    unknown = sorted(set(record) - _CONSTANT_KEYS)
    if unknown:
        raise ValueError(f"constants: unknown keys {unknown}")
    try:
        overrides = dict(record)
        for key in _TUPLE_CONSTANTS:
            if key in overrides:
                overrides[key] = tuple(overrides[key])
        if base is not None:
            return dataclasses.replace(base, **overrides)
        return ModelConstants(**overrides)
    except TypeError as e:
        raise ValueError(f"constants: {e}") from None


class JsonBodyTableReader(BodyTableReader):
    """Reads a body table from JSON.

    Document layout: ``reference`` (reference plane), ``bodies`` (list of
    body records, ascending nodes keyed by provenance) and optional
    ``constants`` overrides applied on top of base_constants.
    """

    def __init__(self, base_constants: ModelConstants | None = None) -> None:
        self._base_constants = base_constants

    def read_body_table(self, path: str) -> BodyTable:
        with open(path, encoding='utf-8') as f:
            doc = json.load(f)
        if not isinstance(doc, dict):
            raise ValueError(f"{path}: expected a JSON object")

        ref = _require(doc, 'reference', path)
        if not isinstance(ref, dict):
            raise ValueError(f"{path}: reference must be a JSON object")
        try:
            reference = ReferencePlane(
                name=_require(ref, 'name', 'reference'),
                **{
                    key: float(_require(ref, key, 'reference'))
                    for key in _REFERENCE_KEYS[1:]
                },
            )
        except TypeError as e:
            raise ValueError(f"reference: {e}") from None

        records = _require(doc, 'bodies', path)
        if not isinstance(records, list):
            raise ValueError(f"{path}: bodies must be a JSON array")
        bodies = tuple(_parse_body(record) for record in records)
        if not bodies:
            raise ValueError(f"{path}: body table is empty")

        constants = None
        if 'constants' in doc:
            constants = _parse_constants(doc['constants'], self._base_constants)
        elif self._base_constants is not None:
            constants = self._base_constants

        logger.info("Read %d bodies from %s", len(bodies), path)
        return BodyTable(bodies=bodies, reference=reference, constants=constants)


def _json_number(value: Any) -> Any:
    if isinstance(value, Fraction):
        return value.numerator if value.denominator == 1 else float(value)
    return value


class JsonPresetExporter(ResultExporter):
    """Writes search results as a balance-presets JSON document."""

    def export(self, outcome: SearchOutcome, path: str) -> int:
        presets = [[_json_number(cell) for cell in row] for row in outcome.rows()]
        doc = {
            'generated': datetime.now(tz=timezone.utc).isoformat(),
            'threshold': outcome.threshold,
            'count': len(presets),
            'scenarios': dict(outcome.scenarios),
            'format': list(outcome.columns),
            'phaseAngles': list(outcome.constants.phase_angles_deg),
            'presets': presets,
        }
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(doc, f, indent=2, ensure_ascii=False)
        logger.info("Wrote %d presets to %s", len(presets), path)
        return len(presets)
