# rigidreg/core/geometry/angles.py
"""Rotation matrix conversions: Euler angles, axis-angle, angular distance."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt
from scipy.spatial.transform import Rotation as SciRot


def axis_angle_from_matrix(R: npt.NDArray[np.float64]) -> tuple[float, npt.NDArray[np.float64]]:
    """Convert rotation matrix to axis-angle representation.

    Args:
        R: 3x3 rotation matrix

    Returns:
        Tuple of (angle_degrees, axis_unit_vector)
    """
    rotvec = SciRot.from_matrix(R).as_rotvec()

    angle_rad = float(np.linalg.norm(rotvec))
    angle_deg = float(np.degrees(angle_rad))

    if angle_rad > 1e-12:
        axis = rotvec / angle_rad
    else:
        axis = np.array([0.0, 0.0, 1.0])  # Arbitrary axis for zero rotation

    return angle_deg, axis


def euler_from_matrix(
    R: npt.NDArray[np.float64], seq: str = "xyz", degrees: bool = True
) -> npt.NDArray[np.float64]:
    """Convert rotation matrix to Euler angles.

    Args:
        R: 3x3 rotation matrix
        seq: Euler sequence (e.g., 'xyz', 'zyx')
        degrees: Return angles in degrees if True, radians if False

    Returns:
        Array of Euler angles in specified sequence
    """
    return SciRot.from_matrix(R).as_euler(seq, degrees=degrees)


def matrix_from_euler(
    angles: npt.ArrayLike, seq: str = "xyz", degrees: bool = True
) -> npt.NDArray[np.float64]:
    """Convert Euler angles to rotation matrix.

    Args:
        angles: Array of Euler angles
        seq: Euler sequence (e.g., 'xyz', 'zyx')
        degrees: Input angles in degrees if True, radians if False

    Returns:
        3x3 rotation matrix
    """
    return SciRot.from_euler(seq, angles, degrees=degrees).as_matrix()


def rotation_distance_deg(R_a: npt.NDArray[np.float64], R_b: npt.NDArray[np.float64]) -> float:
    """Angle in degrees of the relative rotation ``R_a^T R_b``."""
    relative = np.asarray(R_a, dtype=np.float64).T @ np.asarray(R_b, dtype=np.float64)
    cos_angle = (np.trace(relative) - 1.0) / 2.0
    return float(np.degrees(np.arccos(np.clip(cos_angle, -1.0, 1.0))))


def random_rotation(rng: np.random.Generator) -> npt.NDArray[np.float64]:
    """Uniformly distributed proper rotation drawn from ``rng``."""
    # a normalised 4-D Gaussian is a uniform unit quaternion
    quat = rng.normal(size=4)
    return SciRot.from_quat(quat / np.linalg.norm(quat)).as_matrix()


__all__ = [
    "axis_angle_from_matrix",
    "euler_from_matrix",
    "matrix_from_euler",
    "random_rotation",
    "rotation_distance_deg",
]
