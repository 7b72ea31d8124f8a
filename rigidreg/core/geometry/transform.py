# rigidreg/core/geometry/transform.py
"""Immutable rigid-body transform (proper rotation + translation)."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from rigidreg.core.geometry.points import as_points

ORTHONORMAL_ATOL = 1e-6


def _frozen(arr: npt.ArrayLike, shape: tuple[int, ...], name: str) -> npt.NDArray[np.float64]:
    out = np.array(arr, dtype=np.float64)
    if out.shape != shape:
        raise ValueError(f"{name} must have shape {shape}, got {out.shape}")
    out.setflags(write=False)
    return out


@dataclass(frozen=True, eq=False)
class RigidTransform:
    """Rotation followed by translation: ``x -> R @ x + t``.

    Attributes:
        rotation: 3x3 orthonormal matrix with determinant +1
        translation: 3-vector offset
    """

    rotation: npt.NDArray[np.float64]
    translation: npt.NDArray[np.float64]

    def __post_init__(self) -> None:
        """Validate shapes and the proper-rotation invariant."""
        R = _frozen(self.rotation, (3, 3), "rotation")
        t = _frozen(self.translation, (3,), "translation")
        if not np.allclose(R.T @ R, np.eye(3), atol=ORTHONORMAL_ATOL):
            raise ValueError("rotation must be orthonormal")
        if np.linalg.det(R) <= 0:
            raise ValueError("rotation must have determinant +1, got a reflection")
        object.__setattr__(self, "rotation", R)
        object.__setattr__(self, "translation", t)

    @classmethod
    def identity(cls) -> RigidTransform:
        return cls(rotation=np.eye(3), translation=np.zeros(3))

    @classmethod
    def from_matrix(cls, T: npt.ArrayLike) -> RigidTransform:
        """Build from a 4x4 homogeneous matrix."""
        T = np.asarray(T, dtype=np.float64)
        if T.shape != (4, 4):
            raise ValueError(f"T must be 4x4, got {T.shape}")
        return cls(rotation=T[:3, :3], translation=T[:3, 3])

    def as_matrix(self) -> npt.NDArray[np.float64]:
        """Return the transform as a 4x4 homogeneous matrix."""
        T = np.eye(4, dtype=np.float64)
        T[:3, :3] = self.rotation
        T[:3, 3] = self.translation
        return T

    def apply(self, points: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Transform an (N, 3) array of points."""
        return as_points(points) @ self.rotation.T + self.translation

    def inverse(self) -> RigidTransform:
        R_inv = self.rotation.T
        return RigidTransform(rotation=R_inv, translation=-R_inv @ self.translation)

    def compose(self, other: RigidTransform) -> RigidTransform:
        """Transform equivalent to applying ``other`` first, then ``self``."""
        return RigidTransform(
            rotation=self.rotation @ other.rotation,
            translation=self.rotation @ other.translation + self.translation,
        )

    def allclose(self, other: RigidTransform, *, atol: float = 1e-8) -> bool:
        return bool(
            np.allclose(self.rotation, other.rotation, atol=atol)
            and np.allclose(self.translation, other.translation, atol=atol)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RigidTransform):
            return NotImplemented
        return bool(
            np.array_equal(self.rotation, other.rotation)
            and np.array_equal(self.translation, other.translation)
        )

    __hash__ = None  # type: ignore[assignment]


__all__ = ["RigidTransform"]
