"""Tests for point arrays, rigid transforms and rotation helpers."""

from __future__ import annotations

import numpy as np
import pytest

from rigidreg.core.geometry import (
    RigidTransform,
    as_points,
    axis_angle_from_matrix,
    centroid,
    euler_from_matrix,
    matrix_from_euler,
    random_rotation,
    rotation_distance_deg,
)


def test_as_points_validates_shape() -> None:
    assert as_points([]).shape == (0, 3)
    assert as_points([[1, 2, 3]]).dtype == np.float64

    with pytest.raises(ValueError, match="shape"):
        as_points([1.0, 2.0, 3.0])
    with pytest.raises(ValueError, match="non-finite"):
        as_points([[0.0, np.nan, 1.0]])


def test_as_points_is_read_only() -> None:
    source = np.zeros((2, 3))
    points = as_points(source)

    with pytest.raises(ValueError):
        points[0, 0] = 1.0
    source[0, 0] = 5.0
    assert points[0, 0] == 0.0


def test_centroid(tetrahedron: np.ndarray) -> None:
    assert np.allclose(centroid(tetrahedron), [0.25, 0.25, 0.25])
    with pytest.raises(ValueError, match="empty"):
        centroid(np.empty((0, 3)))


def test_transform_rejects_reflection() -> None:
    with pytest.raises(ValueError, match="determinant"):
        RigidTransform(rotation=np.diag([1.0, 1.0, -1.0]), translation=np.zeros(3))


def test_transform_rejects_non_orthonormal() -> None:
    with pytest.raises(ValueError, match="orthonormal"):
        RigidTransform(rotation=np.eye(3) * 2.0, translation=np.zeros(3))


def test_transform_rejects_bad_shapes() -> None:
    with pytest.raises(ValueError, match="rotation must have shape"):
        RigidTransform(rotation=np.eye(2), translation=np.zeros(3))
    with pytest.raises(ValueError, match="translation must have shape"):
        RigidTransform(rotation=np.eye(3), translation=np.zeros(2))


def test_transform_is_immutable(known_transform: RigidTransform) -> None:
    assert not known_transform.rotation.flags.writeable
    with pytest.raises(Exception):  # FrozenInstanceError
        known_transform.translation = np.zeros(3)  # type: ignore[misc]


def test_inverse_and_compose(known_transform: RigidTransform, tetrahedron: np.ndarray) -> None:
    roundtrip = known_transform.inverse().compose(known_transform)

    assert roundtrip.allclose(RigidTransform.identity())
    assert np.allclose(known_transform.inverse().apply(known_transform.apply(tetrahedron)), tetrahedron)


def test_matrix_conversion(known_transform: RigidTransform) -> None:
    T = known_transform.as_matrix()

    assert T.shape == (4, 4)
    assert np.allclose(T[3], [0.0, 0.0, 0.0, 1.0])
    assert RigidTransform.from_matrix(T) == known_transform


def test_apply_matches_homogeneous_product(known_transform: RigidTransform, tetrahedron: np.ndarray) -> None:
    homogeneous = np.hstack([tetrahedron, np.ones((4, 1))]) @ known_transform.as_matrix().T
    assert np.allclose(known_transform.apply(tetrahedron), homogeneous[:, :3])


def test_euler_roundtrip() -> None:
    R = matrix_from_euler([30.0, 45.0, 0.0], seq="xyz")
    assert np.allclose(euler_from_matrix(R, seq="xyz"), [30.0, 45.0, 0.0])


def test_axis_angle() -> None:
    angle, axis = axis_angle_from_matrix(matrix_from_euler([0.0, 0.0, 90.0]))

    assert angle == pytest.approx(90.0)
    assert np.allclose(axis, [0.0, 0.0, 1.0])

    angle, axis = axis_angle_from_matrix(np.eye(3))
    assert angle == pytest.approx(0.0)


def test_rotation_distance() -> None:
    Rz = matrix_from_euler([0.0, 0.0, 90.0])

    assert rotation_distance_deg(np.eye(3), Rz) == pytest.approx(90.0)
    assert rotation_distance_deg(Rz, Rz) == pytest.approx(0.0, abs=1e-4)


def test_random_rotation_is_proper(rng: np.random.Generator) -> None:
    R = random_rotation(rng)

    assert np.isclose(np.linalg.det(R), 1.0)
    assert np.allclose(R.T @ R, np.eye(3))
