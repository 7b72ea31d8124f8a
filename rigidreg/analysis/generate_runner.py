# rigidreg/analysis/generate_runner.py
"""Entry point for writing a synthetic candidate set from a reference file."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

import numpy as np

from rigidreg.cloud.generator import PointCloudGenerator
from rigidreg.cloud.io import load_point_set, save_point_set
from rigidreg.config import Settings, get_settings
from rigidreg.utils.logger import get_logger

logger = get_logger(__name__)

USAGE = (
    "usage: python -m rigidreg.analysis.generate_runner "
    "{transform|candidate} REFERENCE OUTPUT [SEED]"
)


class GenerateMode(str, Enum):
    """Synthetic candidate flavours."""

    TRANSFORM = "transform"  # every reference point moved by the configured transform
    CANDIDATE = "candidate"  # shuffled copies mixed with uniform noise points


def run_generate(
    reference_path: Path | str,
    output_path: Path | str,
    *,
    mode: GenerateMode | str = GenerateMode.TRANSFORM,
    settings: Settings | None = None,
    seed: int | None = None,
) -> Path:
    """Write a candidate point set derived from the reference file."""
    settings = settings or get_settings()
    mode = GenerateMode(mode)
    generator = PointCloudGenerator(settings.generator, np.random.default_rng(seed))
    reference = load_point_set(Path(reference_path))

    if mode is GenerateMode.TRANSFORM:
        candidate = generator.transform(reference)
        logger.info(
            f"Applied rotation {settings.generator.rotation_deg} deg and "
            f"translation {settings.generator.translation}"
        )
    else:
        candidate = generator.candidate_set(reference)

    destination = Path(output_path)
    save_point_set(destination, candidate)
    return destination


def main(argv: Sequence[str] | None = None) -> int:
    """Module entry point for ``python -m rigidreg.analysis.generate_runner``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) not in (3, 4) or args[0] not in {m.value for m in GenerateMode}:
        print(USAGE)
        return 2
    try:
        seed = int(args[3]) if len(args) == 4 else None
        run_generate(args[1], args[2], mode=args[0], seed=seed)
    except (OSError, ValueError) as exc:
        logger.error(f"Generation failed: {exc}")
        print(f"Generation failed: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())


__all__ = ["GenerateMode", "main", "run_generate"]
