# rigidreg/viz/__init__.py
"""Visualization helpers."""

from .viewer import Viewer, build_scene, make_cloud, make_lines, show_registration

__all__ = ["Viewer", "build_scene", "make_cloud", "make_lines", "show_registration"]
