# rigidreg/cloud/io.py
"""Input/output helpers for point sets.

Text files hold the point count on the first line followed by that many
lines of three whitespace separated coordinates. ``.npy`` files hold an
(N, 3) array.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt

from rigidreg.config import POINT_FILE_DECIMALS
from rigidreg.core.geometry.points import PointArray, as_points
from rigidreg.core.ransac import RansacResult
from rigidreg.report import result_to_dict
from rigidreg.utils.io import atomic_write_json, atomic_write_text, ensure_directory
from rigidreg.utils.logger import get_logger

LOGGER = get_logger(__name__)


def parse_point_set(text: str, *, source: str = "<text>") -> PointArray:
    """Parse the count-prefixed text format."""
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        raise ValueError(f"{source}: empty point file")
    try:
        count = int(lines[0])
    except ValueError:
        raise ValueError(f"{source}: first line must be the point count, got {lines[0]!r}") from None
    if count < 0:
        raise ValueError(f"{source}: negative point count {count}")
    if len(lines) - 1 < count:
        raise ValueError(f"{source}: expected {count} points, found {len(lines) - 1}")

    rows = []
    for number, line in enumerate(lines[1 : count + 1], start=2):
        fields = line.split()
        if len(fields) != 3:
            raise ValueError(f"{source}: line {number} must hold 3 coordinates, got {line!r}")
        try:
            rows.append([float(value) for value in fields])
        except ValueError:
            raise ValueError(f"{source}: line {number} is not numeric: {line!r}") from None
    return as_points(np.array(rows, dtype=np.float64).reshape(-1, 3), name=source)


def format_point_set(points: npt.ArrayLike, *, decimals: int = POINT_FILE_DECIMALS) -> str:
    pts = as_points(points)
    body = [f"{x:.{decimals}f} {y:.{decimals}f} {z:.{decimals}f}" for x, y, z in pts]
    return "\n".join([str(pts.shape[0]), *body]) + "\n"


def load_point_set(path: Path) -> PointArray:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Point file not found: {path}")
    if path.suffix == ".npy":
        points = as_points(np.load(path), name=path.name)
    else:
        points = parse_point_set(path.read_text(encoding="utf-8"), source=path.name)
    LOGGER.info("Loaded point set {} with {} points", path.name, points.shape[0])
    return points


def save_point_set(
    path: Path, points: npt.ArrayLike, *, decimals: int = POINT_FILE_DECIMALS
) -> None:
    path = Path(path)
    pts = as_points(points)
    if path.suffix == ".npy":
        ensure_directory(path.parent)
        np.save(path, pts)
    else:
        atomic_write_text(path, format_point_set(pts, decimals=decimals))
    LOGGER.info("Saved point set {} with {} points", path.name, pts.shape[0])


def export_result(path: Path, result: RansacResult) -> None:
    atomic_write_json(Path(path), result_to_dict(result))
    LOGGER.debug("Exported registration result to {}", path)


__all__ = [
    "export_result",
    "format_point_set",
    "load_point_set",
    "parse_point_set",
    "save_point_set",
]
