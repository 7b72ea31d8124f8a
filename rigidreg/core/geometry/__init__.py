# rigidreg/core/geometry/__init__.py
"""Geometric primitives: point arrays, rigid transforms, rotation utilities."""

from __future__ import annotations

from rigidreg.core.geometry.angles import (
    axis_angle_from_matrix,
    euler_from_matrix,
    matrix_from_euler,
    random_rotation,
    rotation_distance_deg,
)
from rigidreg.core.geometry.points import PointArray, as_points, centroid
from rigidreg.core.geometry.transform import RigidTransform

__all__ = [
    "PointArray",
    "RigidTransform",
    "as_points",
    "axis_angle_from_matrix",
    "centroid",
    "euler_from_matrix",
    "matrix_from_euler",
    "random_rotation",
    "rotation_distance_deg",
]
