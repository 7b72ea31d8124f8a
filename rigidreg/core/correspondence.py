# rigidreg/core/correspondence.py
"""Index pairing between two point sequences of possibly different length."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from rigidreg.config import CorrespondencePolicy
from rigidreg.errors import CardinalityMismatch, InsufficientPoints


def correspondence_indices(
    len_p: int,
    len_q: int,
    policy: CorrespondencePolicy | str = CorrespondencePolicy.CYCLIC,
) -> tuple[npt.NDArray[np.intp], npt.NDArray[np.intp]]:
    """Return paired index arrays ``(idx_p, idx_q)`` under ``policy``.

    With ``CYCLIC`` every index of the longer sequence is scored and the
    shorter sequence wraps around, e.g. for lengths 10 and 13 the pair at
    position 12 is ``(2, 12)``.
    """
    policy = CorrespondencePolicy(policy)
    if len_p < 1 or len_q < 1:
        raise InsufficientPoints(1, min(len_p, len_q))

    if policy is CorrespondencePolicy.STRICT and len_p != len_q:
        raise CardinalityMismatch(len_p, len_q)

    if policy is CorrespondencePolicy.CYCLIC:
        positions = np.arange(max(len_p, len_q), dtype=np.intp)
        return positions % len_p, positions % len_q

    positions = np.arange(min(len_p, len_q), dtype=np.intp)
    return positions, positions.copy()


def sample_range(len_p: int, len_q: int) -> int:
    """Upper bound (exclusive) of indices valid in both sequences."""
    return min(len_p, len_q)


__all__ = ["correspondence_indices", "sample_range"]
