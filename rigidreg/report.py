# rigidreg/report.py
"""Presentation of registration results: aligned points, info text, JSON dict."""

from __future__ import annotations

from typing import Any

import numpy as np
import numpy.typing as npt

from rigidreg.config import RegistrationDirection
from rigidreg.core.geometry.angles import axis_angle_from_matrix
from rigidreg.core.geometry.points import PointArray, as_points
from rigidreg.core.ransac import RansacResult
from rigidreg.utils.format import format_rows, format_vector


def aligned_points(
    result: RansacResult,
    P: npt.ArrayLike,
    Q: npt.ArrayLike,
    direction: RegistrationDirection | str = RegistrationDirection.SECOND_TO_FIRST,
) -> PointArray:
    """Move one of the sets with the estimated transform.

    ``FIRST_TO_SECOND`` maps P onto Q with the transform itself;
    ``SECOND_TO_FIRST`` maps Q onto P with its inverse.
    """
    direction = RegistrationDirection(direction)
    if direction is RegistrationDirection.FIRST_TO_SECOND:
        return result.transform.apply(P)
    return result.transform.inverse().apply(Q)


def estimate_display_scale(
    reference: npt.ArrayLike, aligned: npt.ArrayLike, pair: tuple[int, int] = (0, 1)
) -> float:
    """Ratio of the offset between two aligned points and the same reference offset.

    Display only; a rigid transform has unit scale, so values far from 1.0
    signal bad correspondences. Returns 1.0 when either set has fewer than
    two points or the reference offset has zero length.
    """
    ref = as_points(reference, name="reference")
    moved = as_points(aligned, name="aligned")
    i, j = pair
    if min(ref.shape[0], moved.shape[0]) <= max(i, j):
        return 1.0
    original = float(np.linalg.norm(ref[j] - ref[i]))
    if original == 0.0:
        return 1.0
    return float(np.linalg.norm(moved[j] - moved[i])) / original


def format_result(result: RansacResult, *, scale: float | None = None, decimals: int = 2) -> str:
    """Multi-line info text for a result panel or the console."""
    lines = [
        "RANSAC Applied.",
        "Rotation Matrix:",
        format_rows(result.transform.rotation, decimals),
        "Translation Vector:",
        format_vector(result.transform.translation, decimals),
    ]
    if scale is not None:
        lines.append(f"Scale: {scale:.{decimals}f}")
    lines.extend(
        [
            f"Inliers: {result.inliers}/{result.scored_pairs}",
            f"Error (MSE): {result.mse:.4f}",
            f"Best Iteration: {result.best_iteration + 1}/{result.iterations}",
        ]
    )
    if result.refined:
        lines.append("Refined on inliers.")
    return "\n".join(lines)


def result_to_dict(result: RansacResult) -> dict[str, Any]:
    """JSON-ready summary of a result."""
    angle_deg, axis = axis_angle_from_matrix(result.transform.rotation)
    return {
        "rotation": result.transform.rotation.tolist(),
        "translation": result.transform.translation.tolist(),
        "matrix": result.transform.as_matrix().tolist(),
        "axis_angle": {"angle_deg": angle_deg, "axis": axis.tolist()},
        "inliers": result.inliers,
        "scored_pairs": result.scored_pairs,
        "mse": result.mse,
        "best_iteration": result.best_iteration,
        "iterations": result.iterations,
        "valid_hypotheses": result.valid_hypotheses,
        "policy": result.policy.value,
        "refined": result.refined,
    }


__all__ = ["aligned_points", "estimate_display_scale", "format_result", "result_to_dict"]
