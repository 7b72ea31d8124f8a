# rigidreg/core/__init__.py
"""Registration core: Kabsch solver, correspondence policy and RANSAC loop."""

from __future__ import annotations

from rigidreg.core.alignment import is_degenerate, residuals, solve
from rigidreg.core.correspondence import correspondence_indices
from rigidreg.core.geometry import RigidTransform, as_points
from rigidreg.core.ransac import (
    IterationReport,
    RansacResult,
    RobustEstimator,
    estimate,
    is_better,
)

__all__ = [
    "IterationReport",
    "RansacResult",
    "RigidTransform",
    "RobustEstimator",
    "as_points",
    "correspondence_indices",
    "estimate",
    "is_better",
    "is_degenerate",
    "residuals",
    "solve",
]
