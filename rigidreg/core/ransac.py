# rigidreg/core/ransac.py
"""RANSAC estimation of a rigid transform from partially wrong correspondences.

Each iteration draws one set of indices, reads both sequences at those
indices, fits a transform with :func:`rigidreg.core.alignment.solve` and
scores it against every paired point. Hypotheses are ranked by inlier count
first and mean squared error second. The loop always runs the configured
number of iterations; degenerate samples are redrawn a bounded number of
times and otherwise skipped.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Optional

import numpy as np
import numpy.typing as npt

from rigidreg.config import CorrespondencePolicy, RansacConfig
from rigidreg.core.alignment import is_degenerate, solve
from rigidreg.core.correspondence import correspondence_indices, sample_range
from rigidreg.core.geometry.points import PointArray, as_points
from rigidreg.core.geometry.transform import RigidTransform
from rigidreg.errors import DegenerateGeometry, InsufficientPoints, NoValidHypothesis

Solver = Callable[..., RigidTransform]


@dataclass(frozen=True, slots=True)
class IterationReport:
    """Progress record emitted once per iteration.

    ``inliers`` and ``mse`` are None when the iteration produced no
    hypothesis (every sample degenerate, or the solver rejected it).

    ``best_inliers``, ``best_mse`` and ``improved`` describe the best
    hypothesis of the emitting ``worker`` so far. With several workers the
    reports of different workers interleave, so only the reports of one
    worker form a monotonic sequence; the overall best is known only once
    the run has finished.
    """

    iteration: int
    inliers: Optional[int]
    mse: Optional[float]
    best_inliers: Optional[int]
    best_mse: Optional[float]
    improved: bool
    worker: int = 0

    @property
    def skipped(self) -> bool:
        return self.inliers is None


ProgressCallback = Callable[[IterationReport], None]


@dataclass(frozen=True, eq=False)
class RansacResult:
    """Best hypothesis found by :class:`RobustEstimator`.

    Attributes:
        transform: Rigid transform mapping P onto Q
        inliers: Number of scored pairs closer than the threshold
        mse: Mean squared residual over all scored pairs
        best_iteration: 0-based iteration that produced the hypothesis
        iterations: Iterations executed
        valid_hypotheses: Iterations that produced a scorable transform
        inlier_mask: Boolean mask over the scored pairs
        policy: Correspondence policy used for scoring
        refined: True when the transform was re-fitted on its inliers
    """

    transform: RigidTransform
    inliers: int
    mse: float
    best_iteration: int
    iterations: int
    valid_hypotheses: int
    inlier_mask: npt.NDArray[np.bool_]
    policy: CorrespondencePolicy
    refined: bool = False

    @property
    def scored_pairs(self) -> int:
        return int(self.inlier_mask.shape[0])

    @property
    def inlier_ratio(self) -> float:
        return self.inliers / self.scored_pairs if self.scored_pairs else 0.0


def is_better(
    inliers: int, mse: float, best_inliers: Optional[int], best_mse: Optional[float]
) -> bool:
    """More inliers wins; equal inliers with strictly lower error wins."""
    if best_inliers is None or best_mse is None:
        return True
    if inliers != best_inliers:
        return inliers > best_inliers
    return mse < best_mse


@dataclass(frozen=True, slots=True)
class _Candidate:
    transform: RigidTransform
    inliers: int
    mse: float
    iteration: int


@dataclass(frozen=True)
class _Problem:
    P: PointArray
    Q: PointArray
    scored_p: PointArray
    scored_q: PointArray
    sample_limit: int


def _prepare(
    P: npt.ArrayLike, Q: npt.ArrayLike, config: RansacConfig
) -> _Problem:
    p = as_points(P, name="P")
    q = as_points(Q, name="Q")
    for pts in (p, q):
        if pts.shape[0] < config.sample_size:
            raise InsufficientPoints(config.sample_size, pts.shape[0])
    idx_p, idx_q = correspondence_indices(p.shape[0], q.shape[0], config.policy)
    limit = sample_range(p.shape[0], q.shape[0])
    return _Problem(P=p, Q=q, scored_p=p[idx_p], scored_q=q[idx_q], sample_limit=limit)


def score(
    transform: RigidTransform,
    source: PointArray,
    target: PointArray,
    threshold: float,
) -> tuple[int, float, npt.NDArray[np.float64]]:
    """Return ``(inliers, mse, distances)`` of ``transform`` over paired points."""
    moved = source @ transform.rotation.T + transform.translation
    distances = np.linalg.norm(moved - target, axis=1)
    inliers = int(np.count_nonzero(distances < threshold))
    mse = float(np.mean(distances**2))
    return inliers, mse, distances


def draw_sample(
    rng: np.random.Generator,
    P: PointArray,
    Q: PointArray,
    limit: int,
    config: RansacConfig,
) -> Optional[npt.NDArray[np.intp]]:
    """Draw one index set shared by P and Q; None if every attempt was degenerate."""
    for _ in range(config.max_sample_attempts):
        indices = rng.choice(limit, size=config.sample_size, replace=False)
        if is_degenerate(P[indices], rtol=config.degeneracy_rtol):
            continue
        if is_degenerate(Q[indices], rtol=config.degeneracy_rtol):
            continue
        return indices
    return None


@dataclass
class RobustEstimator:
    """Sequential or thread-parallel RANSAC over a fixed iteration budget."""

    config: RansacConfig = field(default_factory=RansacConfig)
    solver: Solver = solve

    def run(
        self,
        P: npt.ArrayLike,
        Q: npt.ArrayLike,
        *,
        rng: Optional[np.random.Generator] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> RansacResult:
        """Estimate the transform mapping ``P`` onto ``Q``.

        Args:
            P: (N, 3) reference points
            Q: (M, 3) candidate points paired with P by index
            rng: Sampling generator; built from ``config.seed`` when omitted
            progress: Called with an IterationReport after each iteration

        Raises:
            InsufficientPoints: either input has fewer than 3 points
            CardinalityMismatch: lengths differ under the strict policy
            NoValidHypothesis: no iteration produced a scorable transform
        """
        problem = _prepare(P, Q, self.config)
        workers = min(self.config.workers, self.config.iterations)
        if workers == 1:
            generator = rng if rng is not None else np.random.default_rng(self.config.seed)
            best, valid = self._search(
                problem, range(self.config.iterations), generator, progress
            )
        else:
            best, valid = self._run_parallel(problem, workers, rng, progress)

        if best is None:
            raise NoValidHypothesis(self.config.iterations)
        return self._result(problem, best, valid)

    def _search(
        self,
        problem: _Problem,
        iterations: range,
        rng: np.random.Generator,
        progress: Optional[ProgressCallback],
        worker: int = 0,
    ) -> tuple[Optional[_Candidate], int]:
        config = self.config
        best: Optional[_Candidate] = None
        valid = 0

        for iteration in iterations:
            hypothesis: Optional[_Candidate] = None
            indices = draw_sample(rng, problem.P, problem.Q, problem.sample_limit, config)
            if indices is not None:
                try:
                    transform = self.solver(
                        problem.P[indices], problem.Q[indices], rtol=config.degeneracy_rtol
                    )
                except DegenerateGeometry:
                    transform = None
                if transform is not None:
                    inliers, mse, _ = score(
                        transform, problem.scored_p, problem.scored_q, config.inlier_threshold
                    )
                    hypothesis = _Candidate(transform, inliers, mse, iteration)
                    valid += 1

            improved = False
            if hypothesis is not None and is_better(
                hypothesis.inliers,
                hypothesis.mse,
                best.inliers if best else None,
                best.mse if best else None,
            ):
                best = hypothesis
                improved = True

            if progress is not None:
                progress(
                    IterationReport(
                        iteration=iteration,
                        inliers=hypothesis.inliers if hypothesis else None,
                        mse=hypothesis.mse if hypothesis else None,
                        best_inliers=best.inliers if best else None,
                        best_mse=best.mse if best else None,
                        improved=improved,
                        worker=worker,
                    )
                )
        return best, valid

    def _run_parallel(
        self,
        problem: _Problem,
        workers: int,
        rng: Optional[np.random.Generator],
        progress: Optional[ProgressCallback],
    ) -> tuple[Optional[_Candidate], int]:
        chunks = partition_iterations(self.config.iterations, workers)
        if rng is not None:
            seeds = rng.integers(0, np.iinfo(np.int64).max, size=workers)
            generators = [np.random.default_rng(int(seed)) for seed in seeds]
        else:
            children = np.random.SeedSequence(self.config.seed).spawn(workers)
            generators = [np.random.default_rng(child) for child in children]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(self._search, problem, chunk, generator, progress, worker)
                for worker, (chunk, generator) in enumerate(zip(chunks, generators))
            ]
            outcomes = [future.result() for future in futures]

        return reduce_candidates([best for best, _ in outcomes]), sum(
            valid for _, valid in outcomes
        )

    def _result(self, problem: _Problem, best: _Candidate, valid: int) -> RansacResult:
        _, _, distances = score(
            best.transform, problem.scored_p, problem.scored_q, self.config.inlier_threshold
        )
        mask = distances < self.config.inlier_threshold
        mask.setflags(write=False)
        return RansacResult(
            transform=best.transform,
            inliers=best.inliers,
            mse=best.mse,
            best_iteration=best.iteration,
            iterations=self.config.iterations,
            valid_hypotheses=valid,
            inlier_mask=mask,
            policy=self.config.policy,
        )

    def refine(self, P: npt.ArrayLike, Q: npt.ArrayLike, result: RansacResult) -> RansacResult:
        """Re-fit ``result`` over all of its inlier pairs.

        The refit is kept unless it ranks strictly worse than ``result``;
        too few or degenerate inliers leave ``result`` unchanged.
        """
        problem = _prepare(P, Q, self.config)
        mask = np.asarray(result.inlier_mask, dtype=bool)
        if mask.shape[0] != problem.scored_p.shape[0]:
            raise ValueError("inlier_mask does not match the scored pairs of P and Q")
        if np.count_nonzero(mask) < self.config.sample_size:
            return result
        try:
            transform = self.solver(
                problem.scored_p[mask], problem.scored_q[mask], rtol=self.config.degeneracy_rtol
            )
        except DegenerateGeometry:
            return result

        inliers, mse, distances = score(
            transform, problem.scored_p, problem.scored_q, self.config.inlier_threshold
        )
        if is_better(result.inliers, result.mse, inliers, mse):
            return result
        new_mask = distances < self.config.inlier_threshold
        new_mask.setflags(write=False)
        return replace(
            result, transform=transform, inliers=inliers, mse=mse, inlier_mask=new_mask, refined=True
        )


def partition_iterations(iterations: int, workers: int) -> list[range]:
    """Split ``range(iterations)`` into ``workers`` contiguous, near-equal chunks."""
    base, extra = divmod(iterations, workers)
    chunks: list[range] = []
    start = 0
    for worker in range(workers):
        size = base + (1 if worker < extra else 0)
        chunks.append(range(start, start + size))
        start += size
    return chunks


def reduce_candidates(candidates: Sequence[Optional[_Candidate]]) -> Optional[_Candidate]:
    """Merge per-worker bests in order; earlier candidates keep exact ties."""
    best: Optional[_Candidate] = None
    for candidate in candidates:
        if candidate is None:
            continue
        if is_better(
            candidate.inliers,
            candidate.mse,
            best.inliers if best else None,
            best.mse if best else None,
        ):
            best = candidate
    return best


def estimate(
    P: npt.ArrayLike,
    Q: npt.ArrayLike,
    config: Optional[RansacConfig] = None,
    *,
    rng: Optional[np.random.Generator] = None,
    progress: Optional[ProgressCallback] = None,
) -> RansacResult:
    """Run RANSAC and, when ``config.refine`` is set, refine on the inliers."""
    estimator = RobustEstimator(config or RansacConfig())
    result = estimator.run(P, Q, rng=rng, progress=progress)
    if estimator.config.refine:
        result = estimator.refine(P, Q, result)
    return result


__all__ = [
    "IterationReport",
    "ProgressCallback",
    "RansacResult",
    "RobustEstimator",
    "draw_sample",
    "estimate",
    "is_better",
    "partition_iterations",
    "reduce_candidates",
    "score",
]
