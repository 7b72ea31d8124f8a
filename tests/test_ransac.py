"""Tests for the RANSAC robust estimator."""

from __future__ import annotations

import numpy as np
import pytest

from rigidreg.cloud.generator import PointCloudGenerator
from rigidreg.config import CorrespondencePolicy, RansacConfig
from rigidreg.core.geometry.angles import rotation_distance_deg
from rigidreg.core.geometry.transform import RigidTransform
from rigidreg.core.ransac import (
    IterationReport,
    RobustEstimator,
    _Candidate,
    estimate,
    is_better,
    partition_iterations,
    reduce_candidates,
)
from rigidreg.errors import (
    CardinalityMismatch,
    DegenerateGeometry,
    InsufficientPoints,
    NoValidHypothesis,
)


def _outlier_scenario(
    known_transform: RigidTransform, seed: int = 2024
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """30 grid points, 20 exact correspondences, 10 random ones, jointly shuffled."""
    generator = PointCloudGenerator(rng=np.random.default_rng(seed))
    grid = generator.cube_grid((3, 5, 2), spacing=1.0)
    return generator.outlier_pairs(grid, known_transform, outliers=10, extent=10.0)


def test_recovers_transform_despite_outliers(known_transform: RigidTransform) -> None:
    """End-to-end: 20 of 30 pairs are exact, 10 are noise."""
    P, Q, truth = _outlier_scenario(known_transform)
    config = RansacConfig(iterations=500, inlier_threshold=0.5, seed=11)

    result = RobustEstimator(config).run(P, Q)

    assert rotation_distance_deg(result.transform.rotation, known_transform.rotation) < 1e-3
    assert np.allclose(result.transform.translation, known_transform.translation, atol=1e-5)
    assert result.inliers >= 18
    assert np.all(result.inlier_mask[truth])
    assert 0 <= result.best_iteration < config.iterations
    assert result.valid_hypotheses <= config.iterations


def test_best_score_is_monotonic(known_transform: RigidTransform) -> None:
    """Best inliers never drop; at equal inliers best error never rises."""
    P, Q, _ = _outlier_scenario(known_transform, seed=5)
    reports: list[IterationReport] = []

    RobustEstimator(RansacConfig(iterations=300, seed=3)).run(P, Q, progress=reports.append)

    assert [r.iteration for r in reports] == list(range(300))
    previous = None
    for report in reports:
        if report.best_inliers is None:
            assert previous is None
            continue
        if previous is not None:
            best_inliers, best_mse = previous
            assert report.best_inliers >= best_inliers
            if report.best_inliers == best_inliers:
                assert report.best_mse <= best_mse
        previous = (report.best_inliers, report.best_mse)


def test_improvements_follow_selection_rule(known_transform: RigidTransform) -> None:
    """An iteration is flagged as improved exactly when it beats the previous best."""
    P, Q, _ = _outlier_scenario(known_transform, seed=8)
    reports: list[IterationReport] = []

    RobustEstimator(RansacConfig(iterations=100, seed=4)).run(P, Q, progress=reports.append)

    best = (None, None)
    for report in reports:
        if report.skipped:
            assert not report.improved
            continue
        expected = is_better(report.inliers, report.mse, *best)
        assert report.improved is expected
        if expected:
            best = (report.inliers, report.mse)


def test_cyclic_policy_scores_wrapped_pairs(
    rng: np.random.Generator, known_transform: RigidTransform
) -> None:
    """With 10 and 13 points, Q index 12 is scored against P index 2."""
    P = rng.uniform(-3.0, 3.0, size=(10, 3))
    moved = known_transform.apply(P)
    far = np.full((2, 3), 50.0) + rng.uniform(0.0, 1.0, size=(2, 3))
    Q = np.vstack([moved, far, moved[2:3]])
    assert Q.shape == (13, 3)

    cyclic = RobustEstimator(RansacConfig(iterations=50, seed=1)).run(P, Q)
    truncated = RobustEstimator(
        RansacConfig(iterations=50, seed=1, policy=CorrespondencePolicy.TRUNCATE)
    ).run(P, Q)

    assert cyclic.inliers == 11
    assert cyclic.inlier_mask.shape == (13,)
    assert cyclic.inlier_mask[12]
    assert not cyclic.inlier_mask[10] and not cyclic.inlier_mask[11]
    assert truncated.inliers == 10
    assert truncated.inlier_mask.shape == (10,)


def test_strict_policy_rejects_mismatch(scattered_points: np.ndarray) -> None:
    config = RansacConfig(iterations=5, policy=CorrespondencePolicy.STRICT)

    with pytest.raises(CardinalityMismatch):
        RobustEstimator(config).run(scattered_points, scattered_points[:-1])


def test_insufficient_points(scattered_points: np.ndarray) -> None:
    with pytest.raises(InsufficientPoints):
        RobustEstimator(RansacConfig(iterations=5)).run(scattered_points[:2], scattered_points)


def test_all_degenerate_raises_no_valid_hypothesis() -> None:
    """Collinear inputs never yield a hypothesis."""
    line = np.outer(np.arange(10, dtype=np.float64), [1.0, 2.0, 3.0])

    with pytest.raises(NoValidHypothesis, match="20 iterations"):
        RobustEstimator(RansacConfig(iterations=20, seed=0)).run(line, line + 1.0)


def test_solver_failures_are_absorbed(scattered_points: np.ndarray) -> None:
    """DegenerateGeometry from the solver skips the iteration instead of escaping."""
    calls: list[int] = []

    def always_degenerate(source, target, **kwargs):
        calls.append(len(source))
        raise DegenerateGeometry("forced")

    reports: list[IterationReport] = []
    estimator = RobustEstimator(RansacConfig(iterations=7, seed=0), solver=always_degenerate)

    with pytest.raises(NoValidHypothesis):
        estimator.run(scattered_points, scattered_points, progress=reports.append)

    assert calls == [3] * 7
    assert len(reports) == 7
    assert all(report.skipped for report in reports)


def test_same_seed_same_result(known_transform: RigidTransform) -> None:
    P, Q, _ = _outlier_scenario(known_transform)
    config = RansacConfig(iterations=100, seed=99)

    first = RobustEstimator(config).run(P, Q)
    second = RobustEstimator(config).run(P, Q)

    assert first.transform == second.transform
    assert first.best_iteration == second.best_iteration
    assert first.mse == second.mse


def test_explicit_generator_is_used(known_transform: RigidTransform) -> None:
    """A caller-supplied generator drives the sampling instead of the seed."""
    P, Q, _ = _outlier_scenario(known_transform)
    estimator = RobustEstimator(RansacConfig(iterations=60, seed=1))

    first = estimator.run(P, Q, rng=np.random.default_rng(42))
    second = estimator.run(P, Q, rng=np.random.default_rng(42))

    assert first.best_iteration == second.best_iteration
    assert first.transform == second.transform


def test_refine_keeps_or_improves(
    scattered_points: np.ndarray, known_transform: RigidTransform
) -> None:
    """Refitting on the inliers of noisy data lowers the error."""
    noise = np.random.default_rng(3).normal(scale=0.01, size=scattered_points.shape)
    Q = known_transform.apply(scattered_points) + noise
    config = RansacConfig(iterations=100, seed=2)

    raw = estimate(scattered_points, Q, config)
    refined = estimate(scattered_points, Q, RansacConfig(iterations=100, seed=2, refine=True))

    assert not raw.refined
    assert refined.refined
    assert refined.inliers == raw.inliers == len(scattered_points)
    assert refined.mse <= raw.mse
    assert refined.best_iteration == raw.best_iteration


def test_refine_with_too_few_inliers_returns_input(scattered_points: np.ndarray) -> None:
    """A result whose mask has fewer than three inliers is returned unchanged."""
    estimator = RobustEstimator(RansacConfig(iterations=10, seed=0, inlier_threshold=1e-9))
    Q = np.random.default_rng(9).uniform(-2.0, 2.0, size=scattered_points.shape)
    result = estimator.run(scattered_points, Q)

    assert result.inliers < 3
    assert estimator.refine(scattered_points, Q, result) is result


@pytest.mark.parametrize(
    ("candidate", "best", "expected"),
    [
        ((5, 1.0), (None, None), True),
        ((6, 9.0), (5, 1.0), True),
        ((5, 0.5), (5, 1.0), True),
        ((5, 1.0), (5, 1.0), False),
        ((4, 0.0), (5, 1.0), False),
        ((0, 3.0), (None, None), True),
    ],
)
def test_is_better(candidate, best, expected) -> None:
    assert is_better(*candidate, *best) is expected


def test_partition_iterations() -> None:
    assert partition_iterations(10, 3) == [range(0, 4), range(4, 7), range(7, 10)]
    assert partition_iterations(4, 4) == [range(0, 1), range(1, 2), range(2, 3), range(3, 4)]
    assert sum(len(chunk) for chunk in partition_iterations(1000, 7)) == 1000


def test_reduce_candidates_keeps_earliest_tie() -> None:
    identity = RigidTransform.identity()
    shifted = RigidTransform(rotation=np.eye(3), translation=np.ones(3))
    first = _Candidate(identity, inliers=5, mse=1.0, iteration=3)
    tie = _Candidate(shifted, inliers=5, mse=1.0, iteration=40)
    better = _Candidate(shifted, inliers=5, mse=0.5, iteration=90)

    assert reduce_candidates([None, first, tie]) is first
    assert reduce_candidates([first, tie, better]) is better
    assert reduce_candidates([None, None]) is None


@pytest.mark.slow
def test_parallel_run_recovers_and_is_reproducible(known_transform: RigidTransform) -> None:
    """Worker-sharded runs find the transform and repeat exactly for one seed."""
    P, Q, _ = _outlier_scenario(known_transform)
    config = RansacConfig(iterations=400, seed=21, workers=4)
    reports: list[IterationReport] = []

    first = RobustEstimator(config).run(P, Q, progress=reports.append)
    second = RobustEstimator(config).run(P, Q)

    assert rotation_distance_deg(first.transform.rotation, known_transform.rotation) < 1e-3
    assert first.inliers >= 18
    assert first.transform == second.transform
    assert first.best_iteration == second.best_iteration
    assert sorted(r.iteration for r in reports) == list(range(400))


def test_more_workers_than_iterations(known_transform: RigidTransform) -> None:
    P, Q, _ = _outlier_scenario(known_transform)

    result = RobustEstimator(RansacConfig(iterations=2, workers=8, seed=0)).run(P, Q)

    assert result.iterations == 2
    assert result.best_iteration in (0, 1)


@pytest.mark.parametrize(
    ("offset", "extent"),
    [(1e7, 2.0), (0.0, 2e-7)],
    ids=["large-offset", "sub-micron"],
)
def test_run_ignores_translation_and_scale(
    known_transform: RigidTransform, offset: float, extent: float
) -> None:
    """Coordinates far from the origin or in tiny units still yield hypotheses."""
    rng = np.random.default_rng(0)
    P = rng.uniform(-extent, extent, size=(40, 3)) + offset
    shift = RigidTransform(rotation=known_transform.rotation, translation=np.array([0.3, 0.2, -0.1]))
    Q = shift.apply(P)

    result = RobustEstimator(
        RansacConfig(iterations=50, inlier_threshold=max(extent, 1e-9) * 1e-3, seed=0)
    ).run(P, Q)

    assert result.inliers == 40
    assert result.valid_hypotheses > 40
    assert rotation_distance_deg(result.transform.rotation, known_transform.rotation) < 1e-3


@pytest.mark.slow
def test_parallel_reports_are_monotonic_per_worker(known_transform: RigidTransform) -> None:
    """Best-so-far fields never regress within the reports of a single worker."""
    P, Q, _ = _outlier_scenario(known_transform)
    reports: list[IterationReport] = []

    RobustEstimator(RansacConfig(iterations=200, seed=5, workers=4)).run(
        P, Q, progress=reports.append
    )

    assert {r.worker for r in reports} == {0, 1, 2, 3}
    for worker, chunk in enumerate(partition_iterations(200, 4)):
        own = sorted((r for r in reports if r.worker == worker), key=lambda r: r.iteration)
        assert [r.iteration for r in own] == list(chunk)
        scored = [r for r in own if r.best_inliers is not None]
        for before, after in zip(scored, scored[1:]):
            assert not is_better(before.best_inliers, before.best_mse, after.best_inliers, after.best_mse)


def test_sequential_reports_come_from_worker_zero(known_transform: RigidTransform) -> None:
    P, Q, _ = _outlier_scenario(known_transform)
    reports: list[IterationReport] = []

    RobustEstimator(RansacConfig(iterations=10, seed=1)).run(P, Q, progress=reports.append)

    assert [r.worker for r in reports] == [0] * 10
