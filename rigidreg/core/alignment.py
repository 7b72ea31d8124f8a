# rigidreg/core/alignment.py
"""Closed-form least-squares rigid alignment (Kabsch / orthogonal Procrustes).

Given two equally long sequences with known one-to-one correspondence,
:func:`solve` returns the proper rotation R and translation t minimising
``sum ||R @ source_i + t - target_i||^2``. Reflections are corrected so the
result always has ``det(R) == +1``, and collinear or coincident inputs are
rejected instead of returning an arbitrary spin about the free axis.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from rigidreg.config import ALIGN_DEGENERACY_RTOL, RANSAC_SAMPLE_SIZE
from rigidreg.core.geometry.points import PointArray, as_points
from rigidreg.core.geometry.transform import RigidTransform
from rigidreg.errors import CardinalityMismatch, DegenerateGeometry, InsufficientPoints


# spread below this multiple of the coordinate resolution counts as a single point
_COINCIDENT_ULPS = 100 * np.finfo(np.float64).eps


def _spread_is_degenerate(centered: PointArray, magnitude: float, rtol: float) -> bool:
    s = np.linalg.svd(centered, compute_uv=False)
    # coincident: spread indistinguishable from rounding of the raw coordinates
    if s[0] <= _COINCIDENT_ULPS * magnitude:
        return True
    # collinear: a single dominant direction
    return bool(s[1] <= rtol * s[0])


def is_degenerate(points: npt.ArrayLike, *, rtol: float = ALIGN_DEGENERACY_RTOL) -> bool:
    """True when ``points`` are too few, coincident or collinear to fix a rotation.

    Collinearity is a singular value ratio of the centered points and
    coincidence is judged at floating point resolution, so the answer does
    not change when the points are translated or uniformly scaled.
    """
    pts = as_points(points)
    if pts.shape[0] < RANSAC_SAMPLE_SIZE:
        return True
    return _spread_is_degenerate(pts - pts.mean(axis=0), float(np.abs(pts).max()), rtol)


def cross_covariance(
    centered_source: PointArray, centered_target: PointArray
) -> npt.NDArray[np.float64]:
    """H = sum_i outer(source_i, target_i) over centered points."""
    return centered_source.T @ centered_target


def solve(
    source: npt.ArrayLike,
    target: npt.ArrayLike,
    *,
    rtol: float = ALIGN_DEGENERACY_RTOL,
) -> RigidTransform:
    """Least-squares rigid transform mapping ``source`` onto ``target``.

    Args:
        source: (N, 3) points to be moved
        target: (N, 3) corresponding destination points
        rtol: Relative singular value tolerance for degeneracy checks

    Returns:
        RigidTransform with a proper rotation

    Raises:
        CardinalityMismatch: source and target lengths differ
        InsufficientPoints: fewer than 3 correspondences
        DegenerateGeometry: points are collinear or coincident
    """
    src = as_points(source, name="source")
    dst = as_points(target, name="target")
    if src.shape[0] != dst.shape[0]:
        raise CardinalityMismatch(src.shape[0], dst.shape[0])
    if src.shape[0] < RANSAC_SAMPLE_SIZE:
        raise InsufficientPoints(RANSAC_SAMPLE_SIZE, src.shape[0], "correspondences")

    centroid_src = src.mean(axis=0)
    centroid_dst = dst.mean(axis=0)
    centered_src = src - centroid_src
    centered_dst = dst - centroid_dst

    if _spread_is_degenerate(
        centered_src, float(np.abs(src).max()), rtol
    ) or _spread_is_degenerate(centered_dst, float(np.abs(dst).max()), rtol):
        raise DegenerateGeometry("Points are collinear or coincident")

    H = cross_covariance(centered_src, centered_dst)
    U, S, Vt = np.linalg.svd(H)
    # three points span at most a plane, so H is rank 2 at best; rank 1 is ill-posed
    if S[1] <= rtol * S[0]:
        raise DegenerateGeometry(
            f"Cross-covariance is rank deficient (singular values {S.tolist()})"
        )

    V = Vt.T
    R = V @ U.T
    if np.linalg.det(R) < 0:
        # reflection: flip the axis of the smallest singular value
        V[:, -1] *= -1.0
        R = V @ U.T

    t = centroid_dst - R @ centroid_src
    return RigidTransform(rotation=R, translation=t)


def residuals(
    transform: RigidTransform, source: npt.ArrayLike, target: npt.ArrayLike
) -> npt.NDArray[np.float64]:
    """Euclidean distance of each transformed source point to its target."""
    src = as_points(source, name="source")
    dst = as_points(target, name="target")
    if src.shape[0] != dst.shape[0]:
        raise CardinalityMismatch(src.shape[0], dst.shape[0])
    return np.linalg.norm(transform.apply(src) - dst, axis=1)


__all__ = ["cross_covariance", "is_degenerate", "residuals", "solve"]
