# rigidreg/__init__.py
"""Robust rigid registration of corresponding 3-D point sets."""

from __future__ import annotations

from rigidreg.config import RansacConfig, Settings, get_settings
from rigidreg.core.alignment import solve
from rigidreg.core.geometry.transform import RigidTransform
from rigidreg.core.ransac import RansacResult, RobustEstimator, estimate
from rigidreg.errors import (
    CardinalityMismatch,
    DegenerateGeometry,
    InsufficientPoints,
    NoValidHypothesis,
    RegistrationError,
)

__all__ = [
    "CardinalityMismatch",
    "DegenerateGeometry",
    "InsufficientPoints",
    "NoValidHypothesis",
    "RansacConfig",
    "RansacResult",
    "RegistrationError",
    "RigidTransform",
    "RobustEstimator",
    "Settings",
    "estimate",
    "get_settings",
    "solve",
]
