# rigidreg/viz/viewer.py
"""Open3D scene building and viewer for registration results."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import open3d as o3d

from rigidreg.config import ViewerConfig
from rigidreg.core.geometry.points import as_points
from rigidreg.utils.logger import get_logger

logger = get_logger(__name__)


def make_cloud(
    points: npt.ArrayLike, color: Sequence[float]
) -> o3d.geometry.PointCloud:
    """Uniformly colored point cloud."""
    pts = as_points(points)
    cloud = o3d.geometry.PointCloud()
    cloud.points = o3d.utility.Vector3dVector(np.array(pts))
    cloud.paint_uniform_color(list(color))
    return cloud


def make_lines(
    start: npt.ArrayLike, end: npt.ArrayLike, color: Sequence[float]
) -> o3d.geometry.LineSet:
    """Segments joining ``start[i]`` to ``end[i]`` for the common prefix."""
    a = as_points(start, name="start")
    b = as_points(end, name="end")
    count = min(a.shape[0], b.shape[0])
    vertices = np.vstack([a[:count], b[:count]])
    edges = np.stack([np.arange(count), np.arange(count) + count], axis=1)
    lines = o3d.geometry.LineSet()
    lines.points = o3d.utility.Vector3dVector(vertices)
    lines.lines = o3d.utility.Vector2iVector(edges.astype(np.int32))
    lines.paint_uniform_color(list(color))
    return lines


def build_scene(
    reference: npt.ArrayLike,
    candidate: npt.ArrayLike,
    aligned: npt.ArrayLike | None = None,
    *,
    config: ViewerConfig | None = None,
    show_lines: bool | None = None,
) -> list[o3d.geometry.Geometry]:
    """Reference (red), candidate (blue), aligned (green) and optional lines (yellow).

    Lines join each reference point to the aligned point at the same index.
    """
    config = config or ViewerConfig()
    draw_lines = config.show_lines if show_lines is None else show_lines
    geometries: list[o3d.geometry.Geometry] = [
        make_cloud(reference, config.reference_color),
        make_cloud(candidate, config.candidate_color),
    ]
    if aligned is not None:
        geometries.append(make_cloud(aligned, config.aligned_color))
        if draw_lines:
            geometries.append(make_lines(reference, aligned, config.line_color))
    return geometries


class Viewer:
    """Open3D visualization wrapper."""

    def __init__(self, config: ViewerConfig | None = None) -> None:
        self.config = config or ViewerConfig()
        self._vis = o3d.visualization.Visualizer()
        self._vis.create_window(window_name="rigidreg", visible=True)
        options = self._vis.get_render_option()
        if options is not None:
            options.point_size = self.config.point_size

    def _clear(self) -> None:
        self._vis.clear_geometries()

    def _update(self) -> None:
        self._vis.poll_events()
        self._vis.update_renderer()

    def show_geometries(self, geometries: Sequence[o3d.geometry.Geometry]) -> None:
        """Replace the scene with ``geometries``."""
        self._clear()
        for geometry in geometries:
            self._vis.add_geometry(geometry)
        self._update()

    def run(self) -> None:
        """Block until the window is closed."""
        self._vis.run()

    def close(self) -> None:
        """Close the visualizer."""
        self._vis.destroy_window()


def show_registration(
    reference: npt.ArrayLike,
    candidate: npt.ArrayLike,
    aligned: npt.ArrayLike | None = None,
    *,
    config: ViewerConfig | None = None,
) -> None:
    """Open a window with the registration scene and wait for it to close."""
    config = config or ViewerConfig()
    viewer = Viewer(config)
    try:
        viewer.show_geometries(build_scene(reference, candidate, aligned, config=config))
        logger.info("Showing registration scene; close the window to continue")
        viewer.run()
    finally:
        viewer.close()


__all__ = ["Viewer", "build_scene", "make_cloud", "make_lines", "show_registration"]
