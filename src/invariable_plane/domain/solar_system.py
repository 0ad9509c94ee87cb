# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Solar system reference data for the invariable-plane balance model.

Semi-major axes follow from integer solar-year counts over the holistic
year via Kepler's third law; masses follow from DE440 mass ratios and a
GM_sun derived from the mean AU and the sidereal year. Earth's mass uses
the Earth–Moon chain.

Invariable-plane inclinations and original-reference ascending nodes:
Souami & Souchay (2012). Inclination bounds: Laplace–Lagrange secular
theory. Trends and ecliptic inclinations: JPL J2000 elements.

No external dependencies — only stdlib math/dataclasses.
"""
import math

from invariable_plane.domain.balance_search import SearchSpace
from invariable_plane.domain.bodies import (
    Assignment,
    Body,
    InclinationBounds,
    ModelConstants,
    NodeProvenance,
    NodeVariant,
    ReferencePlane,
    Scenario,
)

HOLISTIC_YEAR = 333_888              # years
MEAN_SOLAR_YEAR_INPUT_DAYS = 365.2421897
MEAN_SIDEREAL_YEAR_S = 31_558_149.724
CURRENT_AU_KM = 149_597_870.698828
G_CONSTANT = 6.6743e-20              # km³/(kg·s²)

PRIMARY_PHASE_DEG = 203.3195
SECONDARY_PHASE_DEG = 23.3195
FIBONACCI_QUANTUM_NUMBERS = (1, 2, 3, 5, 8, 13, 21, 34, 55)
BALANCE_THRESHOLD = 99.994

# ψ₁ = F₅·F₈² / (2H)
AMPLITUDE_CONSTANT = 2205 / (2 * HOLISTIC_YEAR)

EARTH_MEAN_INCLINATION_DEG = 1.481592
EARTH_INCLINATION_AMPLITUDE_DEG = 0.633849
EARTH_ASCENDING_NODE_DEG = 284.51


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


_MEAN_SOLAR_YEAR_DAYS = (
    _round_half_up(MEAN_SOLAR_YEAR_INPUT_DAYS * (HOLISTIC_YEAR / 16))
    / (HOLISTIC_YEAR / 16)
)

# Orbital periods (days) used to derive the integer solar-year counts
_SOLAR_YEAR_INPUT_DAYS = {
    'mercury': 87.96845,
    'venus': 224.6965,
    'mars': 686.934,
    'jupiter': 4330.595,
    'saturn': 10746.6,
    'uranus': 30583.0,
    'neptune': 59896.0,
}

_DE440_MASS_RATIOS = {
    'mercury': 6023625.5,
    'venus': 408523.72,
    'mars': 3098703.59,
    'jupiter': 1047.348625,
    'saturn': 3497.9018,
    'uranus': 22902.944,
    'neptune': 19412.237,
}


def solar_year_count(orbital_period_days: float) -> int:
    """Whole orbits completed in one holistic year."""
    return _round_half_up(HOLISTIC_YEAR * _MEAN_SOLAR_YEAR_DAYS / orbital_period_days)


def semi_major_axis_from_count(count: int) -> float:
    """Kepler's third law with periods in units of the holistic year / count."""
    return ((HOLISTIC_YEAR / count) ** 2) ** (1.0 / 3.0)


def _gm_sun() -> tuple[float, float, float]:
    """(GM_sun km³/s², mean AU km, mean length of day s)."""
    sidereal_year_days = (
        _MEAN_SOLAR_YEAR_DAYS * (HOLISTIC_YEAR / 13) / ((HOLISTIC_YEAR / 13) - 1)
    )
    mean_day_s = MEAN_SIDEREAL_YEAR_S / sidereal_year_days
    year_h = MEAN_SIDEREAL_YEAR_S / 60 / 60
    sun_speed_km_h = (CURRENT_AU_KM * 2 * math.pi) / year_h
    mean_au_km = (year_h * sun_speed_km_h) / (2 * math.pi)
    gm = 4 * math.pi ** 2 * mean_au_km ** 3 / MEAN_SIDEREAL_YEAR_S ** 2
    return gm, mean_au_km, mean_day_s


def _earth_mass_fraction(gm_sun: float, mean_au_km: float, mean_day_s: float) -> float:
    moon_distance_km = 384399.07
    moon_sidereal_month_input = 27.32166156
    moon_apogee_km = 405400.0
    earth_moon_mass_ratio = 81.3007

    total_days = HOLISTIC_YEAR * _MEAN_SOLAR_YEAR_DAYS
    moon_sidereal_month = total_days / math.ceil(total_days / moon_sidereal_month_input)
    gm_earth_moon = (
        4 * math.pi ** 2 * moon_distance_km ** 3
        / (moon_sidereal_month * mean_day_s) ** 2
    )
    gm_earth = (
        gm_earth_moon * (earth_moon_mass_ratio / (earth_moon_mass_ratio + 1))
        / (1 - moon_apogee_km / mean_au_km)
    )
    return (gm_earth / G_CONSTANT) / (gm_sun / G_CONSTANT)


def derived_masses() -> dict[str, float]:
    """Planet masses as fractions of the solar mass."""
    gm_sun, mean_au_km, mean_day_s = _gm_sun()
    m_sun = gm_sun / G_CONSTANT
    masses = {
        name: (gm_sun / ratio / G_CONSTANT) / m_sun
        for name, ratio in _DE440_MASS_RATIOS.items()
    }
    masses['earth'] = _earth_mass_fraction(gm_sun, mean_au_km, mean_day_s)
    return masses


def derived_semi_major_axes() -> dict[str, float]:
    """Semi-major axes (AU); Earth is 1 by definition."""
    axes = {'earth': 1.0}
    for name, period in _SOLAR_YEAR_INPUT_DAYS.items():
        axes[name] = semi_major_axis_from_count(solar_year_count(period))
    return axes


_MASS = derived_masses()
_SMA = derived_semi_major_axes()

_ECCENTRICITY = {
    'mercury': 0.20563593, 'venus': 0.00677672, 'earth': 0.01671,
    'mars': 0.09339410, 'jupiter': 0.04838624, 'saturn': 0.05386179,
    'uranus': 0.04725744, 'neptune': 0.00859048,
}

_EARTH_INCLINATION_DEG = (
    EARTH_MEAN_INCLINATION_DEG
    + EARTH_INCLINATION_AMPLITUDE_DEG
    * math.cos(math.radians(EARTH_ASCENDING_NODE_DEG - PRIMARY_PHASE_DEG))
)

_INCLINATION_DEG = {
    'mercury': 6.3472858, 'venus': 2.1545441, 'earth': _EARTH_INCLINATION_DEG,
    'mars': 1.6311858, 'jupiter': 0.3219652, 'saturn': 0.9254704,
    'uranus': 0.9946692, 'neptune': 0.7354155, 'pluto': 15.5639473,
}

# (original-reference, numerically-optimized, verified); verified values
# were calibrated against an Earth node of 284.5304°
_NODES_DEG = {
    'mercury': (32.22, 32.83, 32.85),
    'venus': (52.31, 54.70, 54.72),
    'mars': (352.95, 354.87, 354.89),
    'jupiter': (306.92, 312.89, 312.91),
    'saturn': (122.27, 118.81, 118.83),
    'uranus': (308.44, 307.80, 307.82),
    'neptune': (189.28, 192.04, 192.06),
    'pluto': (107.06, 101.06, 101.08),
}

_PRECESSION_PERIOD_YR = {
    'mercury': HOLISTIC_YEAR / (1 + 3 / 8),
    'venus': HOLISTIC_YEAR * 2,
    'earth': HOLISTIC_YEAR / 3,
    'mars': HOLISTIC_YEAR / (4 + 1 / 3),
    'jupiter': HOLISTIC_YEAR / 5,
    'saturn': -HOLISTIC_YEAR / 8,
    'uranus': HOLISTIC_YEAR / 3,
    'neptune': HOLISTIC_YEAR * 2,
    'pluto': HOLISTIC_YEAR,
}

_BOUNDS_DEG = {
    'mercury': (4.57, 9.86), 'venus': (0.00, 3.38), 'earth': (0.00, 2.95),
    'mars': (0.00, 5.84), 'jupiter': (0.241, 0.489), 'saturn': (0.797, 1.02),
    'uranus': (0.902, 1.11), 'neptune': (0.554, 0.800), 'pluto': (15.0, 16.5),
}

_TREND_DEG_PER_CENTURY = {
    'mercury': -0.00595, 'venus': -0.00079, 'earth': 0.0, 'mars': -0.00813,
    'jupiter': -0.00184, 'saturn': 0.00194, 'uranus': -0.00243,
    'neptune': 0.00035, 'pluto': -0.00100,
}

_ECLIPTIC_INCLINATION_DEG = {
    'mercury': 7.00497902, 'venus': 3.39467605, 'mars': 1.84969142,
    'jupiter': 1.30439695, 'saturn': 2.48599187, 'uranus': 0.77263783,
    'neptune': 1.77004347, 'pluto': 17.14001,
}


def _planet(name: str) -> Body:
    original, optimized, verified = _NODES_DEG[name]
    return Body(
        name=name,
        mass=_MASS[name],
        semi_major_axis=_SMA[name],
        eccentricity=_ECCENTRICITY[name],
        inclination_deg=_INCLINATION_DEG[name],
        ascending_nodes=(
            NodeVariant(NodeProvenance.ORIGINAL_REFERENCE, original),
            NodeVariant(NodeProvenance.NUMERICALLY_OPTIMIZED, optimized),
            NodeVariant(NodeProvenance.VERIFIED, verified),
        ),
        precession_period_yr=_PRECESSION_PERIOD_YR[name],
        inclination_bounds=InclinationBounds(*_BOUNDS_DEG[name]),
        observed_trend_deg_per_century=_TREND_DEG_PER_CENTURY[name],
        apparent_inclination_deg=_ECLIPTIC_INCLINATION_DEG[name],
    )


EARTH = Body(
    name='earth',
    mass=_MASS['earth'],
    semi_major_axis=_SMA['earth'],
    eccentricity=_ECCENTRICITY['earth'],
    inclination_deg=_EARTH_INCLINATION_DEG,
    ascending_nodes=(
        NodeVariant(NodeProvenance.ORIGINAL_REFERENCE, EARTH_ASCENDING_NODE_DEG),
        NodeVariant(NodeProvenance.VERIFIED, 284.5304),
    ),
    precession_period_yr=_PRECESSION_PERIOD_YR['earth'],
    inclination_bounds=InclinationBounds(*_BOUNDS_DEG['earth']),
    observed_trend_deg_per_century=_TREND_DEG_PER_CENTURY['earth'],
)

PLUTO = Body(
    name='pluto',
    mass=7.35e-9,
    semi_major_axis=39.48,
    eccentricity=0.2488,
    inclination_deg=_INCLINATION_DEG['pluto'],
    ascending_nodes=(
        NodeVariant(NodeProvenance.ORIGINAL_REFERENCE, _NODES_DEG['pluto'][0]),
        NodeVariant(NodeProvenance.NUMERICALLY_OPTIMIZED, _NODES_DEG['pluto'][1]),
        NodeVariant(NodeProvenance.VERIFIED, _NODES_DEG['pluto'][2]),
    ),
    precession_period_yr=_PRECESSION_PERIOD_YR['pluto'],
    inclination_bounds=InclinationBounds(*_BOUNDS_DEG['pluto']),
    observed_trend_deg_per_century=_TREND_DEG_PER_CENTURY['pluto'],
    apparent_inclination_deg=_ECLIPTIC_INCLINATION_DEG['pluto'],
)

MERCURY = _planet('mercury')
VENUS = _planet('venus')
MARS = _planet('mars')
JUPITER = _planet('jupiter')
SATURN = _planet('saturn')
URANUS = _planet('uranus')
NEPTUNE = _planet('neptune')

# Balance-model body table, in orbital order
PLANETS: tuple[Body, ...] = (
    MERCURY, VENUS, EARTH, MARS, JUPITER, SATURN, URANUS, NEPTUNE,
)

# Node-solver fixture: every body observed from Earth's plane
SOLVER_BODIES: tuple[Body, ...] = (
    MERCURY, VENUS, MARS, JUPITER, SATURN, URANUS, NEPTUNE, PLUTO,
)

EARTH_PLANE = ReferencePlane(
    name='earth',
    inclination_deg=_EARTH_INCLINATION_DEG,
    ascending_node_deg=EARTH_ASCENDING_NODE_DEG,
    mean_inclination_deg=EARTH_MEAN_INCLINATION_DEG,
    amplitude_deg=EARTH_INCLINATION_AMPLITUDE_DEG,
    precession_period_yr=_PRECESSION_PERIOD_YR['earth'],
)

DEFAULT_CONSTANTS = ModelConstants(
    amplitude_constant=AMPLITUDE_CONSTANT,
    phase_angles_deg=(PRIMARY_PHASE_DEG, SECONDARY_PHASE_DEG),
    quantum_numbers=FIBONACCI_QUANTUM_NUMBERS,
    epoch_year=2000.0,
    trend_years=(1900.0, 2100.0),
    bound_tolerance_deg=0.01,
    balance_threshold=BALANCE_THRESHOLD,
)

VARYING: tuple[str, ...] = ('mercury', 'venus', 'mars', 'uranus', 'neptune')

CANONICAL: tuple[tuple[str, Assignment], ...] = (
    ('earth', Assignment(3, PRIMARY_PHASE_DEG)),
)


def _scenario(name: str, jupiter_d: int, saturn_d: int) -> Scenario:
    return Scenario(
        name=name,
        fixed=(
            ('jupiter', Assignment(jupiter_d, PRIMARY_PHASE_DEG)),
            ('saturn', Assignment(saturn_d, SECONDARY_PHASE_DEG)),
        ),
        description=f"Ju={jupiter_d}, Sa={saturn_d}",
    )


SCENARIOS: tuple[Scenario, ...] = (
    _scenario('A', 5, 3),
    _scenario('B', 8, 5),
    _scenario('C', 13, 8),
    _scenario('D', 21, 13),
)

# Preferred configuration: Saturn alone in the secondary phase group
CURRENT_CONFIGURATION: tuple[tuple[str, Assignment], ...] = (
    ('mercury', Assignment(21, PRIMARY_PHASE_DEG)),
    ('venus', Assignment(34, PRIMARY_PHASE_DEG)),
    ('earth', Assignment(3, PRIMARY_PHASE_DEG)),
    ('mars', Assignment(5, PRIMARY_PHASE_DEG)),
    ('jupiter', Assignment(5, PRIMARY_PHASE_DEG)),
    ('saturn', Assignment(3, SECONDARY_PHASE_DEG)),
    ('uranus', Assignment(21, PRIMARY_PHASE_DEG)),
    ('neptune', Assignment(34, PRIMARY_PHASE_DEG)),
)

# Inner/outer pairs mirrored across the asteroid belt
MIRROR_PAIRS: tuple[tuple[str, str], ...] = (
    ('mercury', 'uranus'),
    ('venus', 'neptune'),
    ('earth', 'saturn'),
    ('mars', 'jupiter'),
)


def default_search_space(threshold: float | None = None) -> SearchSpace:
    """The four-scenario Fibonacci search over the eight planets."""
    return SearchSpace(
        bodies=PLANETS,
        reference=EARTH_PLANE,
        constants=DEFAULT_CONSTANTS,
        varying=VARYING,
        scenarios=SCENARIOS,
        canonical=CANONICAL,
        threshold=threshold,
    )
