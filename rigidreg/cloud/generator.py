# rigidreg/cloud/generator.py
"""Synthetic point set generator for tests and demos."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

from rigidreg.config import GeneratorConfig
from rigidreg.core.geometry.angles import matrix_from_euler
from rigidreg.core.geometry.points import PointArray, as_points
from rigidreg.core.geometry.transform import RigidTransform
from rigidreg.utils.logger import get_logger

LOGGER = get_logger(__name__)


class PointCloudGenerator:
    def __init__(
        self,
        config: GeneratorConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        self.rng = rng if rng is not None else np.random.default_rng()

    def cube_grid(
        self, shape: Sequence[int] = (3, 5, 2), *, spacing: float = 1.0
    ) -> PointArray:
        """Regular grid with ``prod(shape)`` points, starting at the origin."""
        axes = [np.arange(n, dtype=np.float64) * spacing for n in shape]
        grid = np.stack(np.meshgrid(*axes, indexing="ij"), axis=-1).reshape(-1, 3)
        LOGGER.debug("Generated {} grid with {} points", tuple(shape), grid.shape[0])
        return as_points(grid)

    def uniform(self, count: int, *, extent: float | None = None) -> PointArray:
        """``count`` points uniform in the cube ``[-extent, extent]^3``."""
        extent = self.config.outlier_extent if extent is None else extent
        return as_points(self.rng.uniform(-extent, extent, size=(count, 3)))

    def rigid_transform(
        self,
        rotation_deg: Sequence[float] | None = None,
        translation: Sequence[float] | None = None,
    ) -> RigidTransform:
        angles = self.config.rotation_deg if rotation_deg is None else rotation_deg
        offset = self.config.translation if translation is None else translation
        return RigidTransform(rotation=matrix_from_euler(angles, seq="xyz"), translation=offset)

    def transform(
        self,
        points: npt.ArrayLike,
        rotation_deg: Sequence[float] | None = None,
        translation: Sequence[float] | None = None,
    ) -> PointArray:
        """Rotate by Euler angles (degrees, xyz) then translate, plus optional noise."""
        return self.apply(self.rigid_transform(rotation_deg, translation), points)

    def apply(self, transform: RigidTransform, points: npt.ArrayLike) -> PointArray:
        """Apply ``transform`` and add Gaussian noise when ``noise_sigma`` is set."""
        moved = transform.apply(points)
        if self.config.noise_sigma > 0:
            moved = moved + self.rng.normal(scale=self.config.noise_sigma, size=moved.shape)
        LOGGER.debug("Transformed {} points", moved.shape[0])
        return as_points(moved)

    def candidate_set(self, reference: npt.ArrayLike) -> PointArray:
        """Unpaired candidate set: exact copies of reference points mixed with noise points.

        The total size is uniform in ``[n, n + max_extra_points]``; at least
        half of it are copies of reference points drawn with replacement, the
        rest are uniform in the outlier cube. The result is shuffled and
        rounded to ``config.decimals``.
        """
        ref = as_points(reference, name="reference")
        n = ref.shape[0]
        if n == 0:
            raise ValueError("reference must contain at least one point")
        total = int(self.rng.integers(n, n + self.config.max_extra_points + 1))
        exact_min = int(np.ceil(total / 2))
        exact = int(self.rng.integers(exact_min, total + 1))

        copies = ref[self.rng.integers(0, n, size=exact)]
        noise = self.uniform(total - exact)
        candidate = np.vstack([copies, noise])
        self.rng.shuffle(candidate, axis=0)
        candidate = np.round(candidate, self.config.decimals)
        LOGGER.info(
            "Generated candidate set with {} points. Exact matches: {}, random points: {}",
            total,
            exact,
            total - exact,
        )
        return as_points(candidate)

    def outlier_pairs(
        self,
        reference: npt.ArrayLike,
        transform: RigidTransform,
        outliers: int,
        *,
        extent: float | None = None,
    ) -> tuple[PointArray, PointArray, npt.NDArray[np.bool_]]:
        """Paired sets where ``outliers`` correspondences are replaced by noise.

        Returns ``(P, Q, inlier_mask)``; the pairs are shuffled jointly so the
        correspondence by index is preserved while the order is not.
        """
        ref = as_points(reference, name="reference")
        n = ref.shape[0]
        if not 0 <= outliers <= n:
            raise ValueError(f"outliers must be within [0, {n}], got {outliers}")

        candidate = np.array(self.apply(transform, ref))
        mask = np.ones(n, dtype=bool)
        replaced = self.rng.choice(n, size=outliers, replace=False)
        mask[replaced] = False
        candidate[replaced] = self.uniform(outliers, extent=extent)

        order = self.rng.permutation(n)
        LOGGER.debug("Generated {} pairs with {} outliers", n, outliers)
        return as_points(ref[order]), as_points(candidate[order]), mask[order]


__all__ = ["PointCloudGenerator"]
