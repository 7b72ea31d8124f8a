# rigidreg/analysis/register_runner.py
"""Entry point for registering a candidate point set onto a reference set."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import yaml
from tqdm.auto import tqdm

from rigidreg.cloud.io import export_result, load_point_set
from rigidreg.config import (
    FILENAME_RESULT_JSON,
    RegistrationDirection,
    Settings,
    get_settings,
    load_settings,
)
from rigidreg.core.geometry.points import PointArray
from rigidreg.core.ransac import IterationReport, ProgressCallback, RansacResult, estimate
from rigidreg.errors import RegistrationError
from rigidreg.report import aligned_points, estimate_display_scale, format_result
from rigidreg.utils.error_tracker import ErrorTracker
from rigidreg.utils.logger import configure, get_logger
from rigidreg.utils.progress import progress_bar

logger = get_logger(__name__)

USAGE = "usage: python -m rigidreg.analysis.register_runner REFERENCE CANDIDATE [OUTPUT_JSON]"


@dataclass(frozen=True)
class RegistrationOutcome:
    """Everything a caller needs to present a finished registration."""

    result: RansacResult
    aligned: PointArray
    scale: float
    text: str
    output_path: Path


def make_progress_logger(total: int, bar: tqdm | None = None) -> ProgressCallback:
    """Progress callback logging each iteration at DEBUG and advancing ``bar``."""

    def _report(report: IterationReport) -> None:
        step = report.iteration + 1
        if report.skipped:
            logger.debug(f"Iteration {step}/{total}: skipped (degenerate sample)")
        else:
            logger.debug(
                f"Iteration {step}/{total}: Inliers = {report.inliers}, Error = {report.mse:.4f}"
            )
        if bar is not None:
            bar.update(1)

    return _report


def run_registration(
    reference_path: Path | str,
    candidate_path: Path | str,
    *,
    settings: Settings | None = None,
    output_path: Path | None = None,
    visualize: bool | None = None,
) -> RegistrationOutcome:
    """Load both sets, estimate the transform and export the result as JSON."""
    settings = settings or get_settings()
    P = load_point_set(Path(reference_path))
    Q = load_point_set(Path(candidate_path))
    config = settings.ransac
    logger.info(
        f"Registering {len(Q)} candidate points onto {len(P)} reference points "
        f"(iterations={config.iterations}, threshold={config.inlier_threshold}, "
        f"policy={config.policy.value}, workers={config.workers})"
    )

    with progress_bar(config.iterations, description="RANSAC") as bar:
        result = estimate(P, Q, config, progress=make_progress_logger(config.iterations, bar))

    logger.info(
        f"Best Iteration: {result.best_iteration + 1} | Best Inliers: {result.inliers} | "
        f"Best Error: {result.mse:.4f} | Total Iterations: {result.iterations}"
    )

    direction = settings.viewer.direction
    aligned = aligned_points(result, P, Q, direction)
    target = P if direction is RegistrationDirection.SECOND_TO_FIRST else Q
    scale = estimate_display_scale(target, aligned)
    text = format_result(result, scale=scale)
    for line in text.splitlines():
        logger.info(line)

    destination = Path(output_path) if output_path else settings.paths.results_root / FILENAME_RESULT_JSON
    export_result(destination, result)
    logger.info(f"Registration result written to {destination}")

    show = settings.viewer.visualize if visualize is None else visualize
    if show:
        from rigidreg.viz.viewer import show_registration

        show_registration(P, Q, aligned, config=settings.viewer)

    return RegistrationOutcome(
        result=result, aligned=aligned, scale=scale, text=text, output_path=destination
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Module entry point for ``python -m rigidreg.analysis.register_runner``.

    Settings come from ``RIGIDREG_*`` environment variables, optionally
    overlaid with the YAML/JSON file named by ``RIGIDREG_CONFIG``.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) not in (2, 3):
        print(USAGE)
        return 2

    tracker = ErrorTracker(context="register_runner")
    try:
        config_path = os.getenv("RIGIDREG_CONFIG")
        settings = load_settings(Path(config_path)) if config_path else get_settings()
        configure(level=settings.log_level.value)
        output = Path(args[2]) if len(args) == 3 else None
        outcome = run_registration(args[0], args[1], settings=settings, output_path=output)
    except RegistrationError as exc:
        tracker.record_exception("registration", exc)
    except yaml.YAMLError as exc:
        tracker.record_exception("config", exc)
    except (OSError, ValueError) as exc:
        tracker.record_exception("input", exc)
    else:
        print(outcome.text)
        return 0

    tracker.summary()
    for key, messages in tracker.errors.items():
        for message in messages:
            print(f"Registration failed ({key}): {message}")
    return 1


if __name__ == "__main__":
    sys.exit(main())


__all__ = ["RegistrationOutcome", "main", "make_progress_logger", "run_registration"]
