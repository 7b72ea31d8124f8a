# rigidreg/utils/__init__.py
"""Utility package re-exporting shared helpers for rigidreg."""

from rigidreg.utils.error_tracker import ErrorTracker
from rigidreg.utils.format import format_rows, format_vector
from rigidreg.utils.io import (
    atomic_write_json,
    atomic_write_text,
    atomic_write_yaml,
    ensure_directory,
    load_json,
    load_yaml,
)
from rigidreg.utils.logger import get_logger
from rigidreg.utils.progress import progress_bar, track

__all__ = [
    "ErrorTracker",
    "atomic_write_json",
    "atomic_write_text",
    "atomic_write_yaml",
    "ensure_directory",
    "format_rows",
    "format_vector",
    "get_logger",
    "load_json",
    "load_yaml",
    "progress_bar",
    "track",
]
