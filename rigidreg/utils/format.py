# rigidreg/utils/format.py
"""Formatting helpers for NumPy outputs."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def format_vector(values: npt.ArrayLike, decimals: int = 2) -> str:
    """Render ``[a, b, c]`` with a fixed number of decimals."""
    flat = np.asarray(values, dtype=np.float64).reshape(-1)
    # normalise -0.00 to 0.00
    parts = [f"{float(v) + 0.0:.{decimals}f}" for v in np.round(flat, decimals)]
    return "[" + ", ".join(parts) + "]"


def format_rows(arr: npt.NDArray[np.float64], decimals: int = 2) -> str:
    """One bracketed row per line, as shown in the registration info panel."""
    matrix = np.atleast_2d(np.asarray(arr, dtype=np.float64))
    return "\n".join(format_vector(row, decimals) for row in matrix)


__all__ = ["format_rows", "format_vector"]
