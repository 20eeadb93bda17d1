#!/usr/bin/env python3
"""
Vector helper functions for 2D operations.

These are small, fast functions for vector math used throughout the package.
Vectors are plain (x, y) tuples.
"""
import math
from typing import Tuple

Vec2 = Tuple[float, float]

ZERO: Vec2 = (0.0, 0.0)


def vec_add(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] + b[0], a[1] + b[1])


def vec_sub(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] - b[0], a[1] - b[1])


def vec_len(a: Vec2) -> float:
    return math.hypot(a[0], a[1])


def vec_dist(a: Vec2, b: Vec2) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def vec_dot(a: Vec2, b: Vec2) -> float:
    return a[0] * b[0] + a[1] * b[1]


def vec_cross(a: Vec2, b: Vec2) -> float:
    """z component of the 3D cross product of two planar vectors."""
    return a[0] * b[1] - a[1] * b[0]


def vec_polar(r: float, angle: float) -> Vec2:
    return (r * math.cos(angle), r * math.sin(angle))


def vec_angle(a: Vec2) -> float:
    return math.atan2(a[1], a[0])


def as_vec(value) -> Vec2:
    """Coerce any two-item sequence (list, tuple, numpy row) to a float tuple."""
    return (float(value[0]), float(value[1]))
