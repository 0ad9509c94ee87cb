# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Orbital plane geometry relative to the invariable plane.

An orbital plane with inclination i and ascending node Ω (both measured
on the invariable plane) has unit normal

    n = (sin(i)·sin(Ω), sin(i)·cos(Ω), cos(i))

and the apparent inclination between two planes is the angle between
their normals.

Grid evaluation is vectorized with numpy.
"""
import math

import numpy as np


def wrap_deg(angle_deg: float) -> float:
    """Wrap an angle into [0, 360)."""
    wrapped = math.fmod(angle_deg, 360.0)
    if wrapped < 0.0:
        wrapped += 360.0
    # fmod of a tiny negative value can round up to exactly 360
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


def angular_distance_deg(a_deg: float, b_deg: float) -> float:
    """Shortest angular separation between two directions, in [0, 180]."""
    diff = abs(wrap_deg(a_deg) - wrap_deg(b_deg))
    return min(diff, 360.0 - diff)


def plane_normal(inclination_deg: float, ascending_node_deg: float) -> np.ndarray:
    """
    Unit normal of an orbital plane in invariable-plane coordinates.

    Args:
        inclination_deg: Inclination to the invariable plane (degrees).
        ascending_node_deg: Ascending node on the invariable plane (degrees).

    Returns:
        Length-3 array with unit norm.
    """
    i_rad = np.radians(inclination_deg)
    node_rad = np.radians(ascending_node_deg)
    sin_i = np.sin(i_rad)
    return np.array([
        sin_i * np.sin(node_rad),
        sin_i * np.cos(node_rad),
        np.cos(i_rad),
    ])


def apparent_inclination_deg(n1: np.ndarray, n2: np.ndarray) -> float:
    """
    Angle between two plane normals, in degrees within [0, 180].

    The dot product is clipped to [-1, 1] before arccos; rounding can push
    it fractionally outside for nearly parallel planes.
    """
    dot = float(np.dot(n1, n2))
    return float(np.degrees(np.arccos(np.clip(dot, -1.0, 1.0))))


def apparent_inclination_between(
    inclination_deg: float,
    ascending_node_deg: float,
    reference_inclination_deg: float,
    reference_node_deg: float,
) -> float:
    """Apparent inclination of one plane seen from a reference plane (degrees)."""
    return apparent_inclination_deg(
        plane_normal(inclination_deg, ascending_node_deg),
        plane_normal(reference_inclination_deg, reference_node_deg),
    )


def apparent_inclination_grid(
    inclination_deg: float,
    ascending_nodes_deg: np.ndarray,
    reference_inclination_deg: float,
    reference_node_deg: float,
) -> np.ndarray:
    """Apparent inclination for an array of candidate ascending nodes.

    Same computation as apparent_inclination_between, evaluated for every
    element of ascending_nodes_deg at once.
    """
    i_rad = np.radians(inclination_deg)
    nodes_rad = np.radians(np.asarray(ascending_nodes_deg, dtype=float))
    sin_i = np.sin(i_rad)
    normals = np.stack([
        sin_i * np.sin(nodes_rad),
        sin_i * np.cos(nodes_rad),
        np.full_like(nodes_rad, np.cos(i_rad)),
    ], axis=-1)
    ref = plane_normal(reference_inclination_deg, reference_node_deg)
    dots = normals @ ref
    return np.degrees(np.arccos(np.clip(dots, -1.0, 1.0)))
