# rigidreg/core/geometry/points.py
"""Validation and conversion of point sequences."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

PointArray = npt.NDArray[np.float64]


def as_points(points: npt.ArrayLike, *, name: str = "points") -> PointArray:
    """Return ``points`` as a read-only float64 array of shape (N, 3).

    An empty input yields an array of shape (0, 3).
    """
    arr = np.array(points, dtype=np.float64)
    if arr.size == 0:
        arr = arr.reshape(0, 3)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"{name} must have shape (N, 3), got {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} contains non-finite coordinates")
    arr.setflags(write=False)
    return arr


def centroid(points: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Arithmetic mean of the coordinates."""
    arr = as_points(points)
    if arr.shape[0] == 0:
        raise ValueError("Centroid of an empty point set is undefined")
    return arr.mean(axis=0)


__all__ = ["PointArray", "as_points", "centroid"]
