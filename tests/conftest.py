"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import pytest

# keep test runs from writing log files next to the sources
os.environ.setdefault("RIGIDREG_LOG_TO_FILE", "0")

if TYPE_CHECKING:
    from rigidreg.config import Settings
    from rigidreg.core.geometry.transform import RigidTransform


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for reproducible point sets."""
    return np.random.default_rng(1234)


@pytest.fixture
def known_transform() -> RigidTransform:
    """Rotation of (30, 45, 0) degrees about xyz and a (1.5, 1.5, 1.5) shift."""
    from rigidreg.core.geometry.angles import matrix_from_euler
    from rigidreg.core.geometry.transform import RigidTransform

    return RigidTransform(
        rotation=matrix_from_euler([30.0, 45.0, 0.0], seq="xyz"),
        translation=np.array([1.5, 1.5, 1.5]),
    )


@pytest.fixture
def tetrahedron() -> np.ndarray:
    """Four non-coplanar points."""
    return np.array(
        [
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )


@pytest.fixture
def scattered_points(rng: np.random.Generator) -> np.ndarray:
    """Forty points uniform in a 4x4x4 cube."""
    return rng.uniform(-2.0, 2.0, size=(40, 3))


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings with temporary directories and a fixed seed."""
    from rigidreg.config import (
        GeneratorConfig,
        PathsConfig,
        RansacConfig,
        Settings,
        ViewerConfig,
    )

    paths = PathsConfig(
        data_root=tmp_path,
        logs_root=tmp_path / "logs",
        results_root=tmp_path / "results",
    )
    return Settings(
        paths=paths,
        ransac=RansacConfig(iterations=200, inlier_threshold=0.5, seed=7),
        generator=GeneratorConfig(),
        viewer=ViewerConfig(),
    )
