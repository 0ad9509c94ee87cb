# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for body-table value types and model constants."""
import math
from fractions import Fraction

import pytest

from invariable_plane.domain.bodies import (
    Assignment,
    Body,
    BodyTable,
    Configuration,
    InclinationBounds,
    ModelConstants,
    NodeProvenance,
    NodeVariant,
    ReferencePlane,
    Scenario,
)


# ── Helpers ──────────────────────────────────────────────────────────

def _body(**overrides) -> Body:
    fields = dict(
        name='test',
        mass=1e-6,
        semi_major_axis=2.0,
        eccentricity=0.1,
        inclination_deg=1.0,
        ascending_nodes=(
            NodeVariant(NodeProvenance.ORIGINAL_REFERENCE, 10.0),
            NodeVariant(NodeProvenance.NUMERICALLY_OPTIMIZED, 11.0),
        ),
        precession_period_yr=100_000.0,
        inclination_bounds=InclinationBounds(0.0, 3.0),
    )
    fields.update(overrides)
    return Body(**fields)


def _constants(**overrides) -> ModelConstants:
    fields = dict(
        amplitude_constant=0.0033,
        phase_angles_deg=(203.3195, 23.3195),
        quantum_numbers=(1, 2, 3),
    )
    fields.update(overrides)
    return ModelConstants(**fields)


# ── Body ─────────────────────────────────────────────────────────────

class TestBody:

    def test_frozen(self):
        b = _body()
        with pytest.raises(AttributeError):
            b.mass = 2.0

    @pytest.mark.parametrize("field,value", [
        ('mass', 0.0),
        ('mass', -1e-6),
        ('semi_major_axis', 0.0),
        ('eccentricity', 1.0),
        ('eccentricity', -0.1),
        ('precession_period_yr', 0.0),
        ('name', ''),
        ('ascending_nodes', ()),
    ])
    def test_invalid_field_raises(self, field, value):
        with pytest.raises(ValueError):
            _body(**{field: value})

    def test_node_default_is_first_variant(self):
        assert _body().ascending_node_deg() == 10.0

    def test_node_follows_preference_order(self):
        b = _body()
        preference = (NodeProvenance.NUMERICALLY_OPTIMIZED, NodeProvenance.ORIGINAL_REFERENCE)
        assert b.ascending_node_deg(preference) == 11.0

    def test_node_falls_back_to_later_preference(self):
        b = _body()
        preference = (NodeProvenance.VERIFIED, NodeProvenance.ORIGINAL_REFERENCE)
        assert b.ascending_node_deg(preference) == 10.0

    def test_node_missing_raises_key_error(self):
        with pytest.raises(KeyError):
            _body().ascending_node_deg((NodeProvenance.VERIFIED,))

    def test_has_node(self):
        b = _body()
        assert b.has_node(NodeProvenance.ORIGINAL_REFERENCE)
        assert not b.has_node(NodeProvenance.ANALYTICALLY_DERIVED)

    def test_angular_momentum_weight(self):
        b = _body(mass=4e-6, semi_major_axis=2.0, eccentricity=0.5)
        assert b.angular_momentum_weight == pytest.approx(4e-6 * math.sqrt(2.0 * 0.75))

    @pytest.mark.parametrize("trend,sign", [(0.002, 1), (0.0, 1), (-0.001, -1)])
    def test_observed_trend_sign(self, trend, sign):
        assert _body(observed_trend_deg_per_century=trend).observed_trend_sign == sign


class TestInclinationBounds:

    def test_min_above_max_raises(self):
        with pytest.raises(ValueError):
            InclinationBounds(3.0, 1.0)

    def test_degenerate_range_allowed(self):
        b = InclinationBounds(1.0, 1.0)
        assert b.min_deg == b.max_deg


# ── ReferencePlane ───────────────────────────────────────────────────

class TestReferencePlane:

    def _plane(self) -> ReferencePlane:
        return ReferencePlane(
            name='earth',
            inclination_deg=1.57866663,
            ascending_node_deg=284.51,
            mean_inclination_deg=1.481592,
            amplitude_deg=0.633849,
            precession_period_yr=111_296.0,
        )

    def test_inclination_at_epoch_is_stored_value(self):
        p = self._plane()
        assert p.inclination_at(2000.0, 2000.0) == pytest.approx(p.inclination_deg, abs=1e-12)

    def test_inclination_stays_within_oscillation(self):
        p = self._plane()
        for year in (-50_000.0, 1900.0, 2100.0, 80_000.0):
            i = p.inclination_at(year, 2000.0)
            assert p.mean_inclination_deg - p.amplitude_deg - 1e-12 <= i
            assert i <= p.mean_inclination_deg + p.amplitude_deg + 1e-12

    def test_node_advances_linearly(self):
        p = self._plane()
        rate = 360.0 / p.precession_period_yr
        assert p.ascending_node_at(2100.0, 2000.0) == pytest.approx(284.51 + 100 * rate)

    def test_zero_period_raises(self):
        with pytest.raises(ValueError):
            ReferencePlane('x', 1.0, 0.0, 1.0, 0.5, 0.0)

    def test_negative_amplitude_raises(self):
        with pytest.raises(ValueError):
            ReferencePlane('x', 1.0, 0.0, 1.0, -0.5, 1000.0)


# ── Configuration / Scenario ─────────────────────────────────────────

class TestConfiguration:

    def test_from_mapping_orders_bodies(self):
        mapping = {'b': Assignment(2, 23.3195), 'a': Assignment(1, 203.3195)}
        config = Configuration.from_mapping(mapping, ('a', 'b'))
        assert config.body_names == ('a', 'b')
        assert config['b'].quantum_number == 2

    def test_missing_body_raises(self):
        with pytest.raises(ValueError, match="missing"):
            Configuration.from_mapping({'a': Assignment(1, 0.0)}, ('a', 'b'))

    def test_unknown_body_raises(self):
        mapping = {'a': Assignment(1, 0.0), 'z': Assignment(1, 0.0)}
        with pytest.raises(ValueError, match="unknown"):
            Configuration.from_mapping(mapping, ('a',))

    def test_getitem_unknown_raises_key_error(self):
        config = Configuration.from_mapping({'a': Assignment(1, 0.0)}, ('a',))
        with pytest.raises(KeyError):
            config['b']

    def test_contains(self):
        config = Configuration.from_mapping({'a': Assignment(1, 0.0)}, ('a',))
        assert 'a' in config
        assert 'b' not in config

    def test_hashable(self):
        config = Configuration.from_mapping({'a': Assignment(Fraction(3, 2), 0.0)}, ('a',))
        same = Configuration.from_mapping({'a': Assignment(Fraction(3, 2), 0.0)}, ('a',))
        assert hash(config) == hash(same)
        assert config == same

    def test_scenario_body_names(self):
        s = Scenario('A', (('jupiter', Assignment(5, 0.0)), ('saturn', Assignment(3, 1.0))))
        assert s.body_names == ('jupiter', 'saturn')


# ── ModelConstants ───────────────────────────────────────────────────

class TestModelConstants:

    def test_frozen(self):
        c = _constants()
        with pytest.raises(AttributeError):
            c.balance_threshold = 50.0

    def test_defaults(self):
        c = _constants()
        assert c.epoch_year == 2000.0
        assert c.trend_years == (1900.0, 2100.0)
        assert c.bound_tolerance_deg == 0.01
        assert c.node_preference[0] is NodeProvenance.NUMERICALLY_OPTIMIZED

    @pytest.mark.parametrize("overrides", [
        {'amplitude_constant': 0.0},
        {'phase_angles_deg': (1.0,)},
        {'phase_angles_deg': (1.0, 2.0, 3.0)},
        {'quantum_numbers': ()},
        {'quantum_numbers': (1, 0, 2)},
        {'quantum_numbers': (-3,)},
        {'trend_years': (2100.0, 1900.0)},
        {'bound_tolerance_deg': -0.01},
    ])
    def test_invalid_constants_raise(self, overrides):
        with pytest.raises(ValueError):
            _constants(**overrides)

    def test_fraction_quantum_numbers_accepted(self):
        c = _constants(quantum_numbers=(Fraction(1, 2), 1, Fraction(3, 2)))
        assert c.quantum_numbers[0] == Fraction(1, 2)

    @pytest.mark.parametrize("phase,index", [
        (203.3195, 0), (23.3195, 1), (200.0, 0), (30.0, 1),
    ])
    def test_phase_index(self, phase, index):
        assert _constants().phase_index(phase) == index

    @pytest.mark.parametrize("phase,index", [
        (5.0, 0), (355.0, 0), (-10.0, 0), (170.0, 1), (190.0, 1), (720.0, 0),
    ])
    def test_phase_index_across_zero(self, phase, index):
        c = _constants(phase_angles_deg=(350.0, 170.0))
        assert c.phase_index(phase) == index


class TestBodyTable:

    def test_lookup_by_name(self):
        plane = ReferencePlane('test', 1.0, 0.0, 1.0, 0.0, 1000.0)
        table = BodyTable(bodies=(_body(),), reference=plane)
        assert table.body('test').mass == 1e-6
        assert table.constants is None
        with pytest.raises(KeyError):
            table.body('other')
