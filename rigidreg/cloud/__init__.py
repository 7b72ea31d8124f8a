# rigidreg/cloud/__init__.py
"""Point set IO and synthetic generation."""

from .generator import PointCloudGenerator
from .io import export_result, load_point_set, parse_point_set, save_point_set

__all__ = [
    "PointCloudGenerator",
    "export_result",
    "load_point_set",
    "parse_point_set",
    "save_point_set",
]
