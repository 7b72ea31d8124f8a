# rigidreg/config.py
"""Centralized configuration for the rigidreg registration toolkit.

All constants, enums and configuration dataclasses are defined here.
Modules should import from this single source of truth.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Final, Mapping, Optional, Tuple

# ============================================================================
# PROJECT PATHS
# ============================================================================

BASE_DIR: Final[Path] = Path(__file__).resolve().parent.parent


def _env_path(key: str, default: Path) -> Path:
    """Resolve path from environment variable with fallback."""
    value = os.getenv(key)
    return Path(value).expanduser() if value else default


def _env_str(key: str, default: str) -> str:
    """Resolve string from environment variable with fallback."""
    value = os.getenv(key)
    return value if value is not None else default


def _env_int(key: str, default: int) -> int:
    """Resolve integer from environment variable with fallback."""
    value = os.getenv(key)
    return int(value) if value is not None else default


def _env_float(key: str, default: float) -> float:
    """Resolve float from environment variable with fallback."""
    value = os.getenv(key)
    return float(value) if value is not None else default


def _env_optional_int(key: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(key)
    if value is None or value.strip() == "":
        return default
    return int(value)


# ============================================================================
# RANSAC CONSTANTS
# ============================================================================

RANSAC_SAMPLE_SIZE: Final[int] = 3
RANSAC_DEFAULT_ITERATIONS: Final[int] = 1000
RANSAC_DEFAULT_THRESHOLD: Final[float] = 0.5
RANSAC_MAX_SAMPLE_ATTEMPTS: Final[int] = 10
RANSAC_DEFAULT_WORKERS: Final[int] = 1

# Relative tolerance for collinear/coincident detection in the Kabsch solver
ALIGN_DEGENERACY_RTOL: Final[float] = 1e-6

# ============================================================================
# SYNTHETIC DATA CONSTANTS
# ============================================================================

GEN_ROTATION_DEG: Final[Tuple[float, float, float]] = (30.0, 45.0, 0.0)
GEN_TRANSLATION: Final[Tuple[float, float, float]] = (1.5, 1.5, 1.5)
GEN_OUTLIER_EXTENT: Final[float] = 5.0
GEN_MAX_EXTRA_POINTS: Final[int] = 20
GEN_DECIMALS: Final[int] = 2

# ============================================================================
# VIEWER CONSTANTS
# ============================================================================

VIEW_COLOR_REFERENCE: Final[Tuple[float, float, float]] = (1.0, 0.0, 0.0)
VIEW_COLOR_CANDIDATE: Final[Tuple[float, float, float]] = (0.0, 0.0, 1.0)
VIEW_COLOR_ALIGNED: Final[Tuple[float, float, float]] = (0.0, 1.0, 0.0)
VIEW_COLOR_LINES: Final[Tuple[float, float, float]] = (1.0, 1.0, 0.0)
VIEW_POINT_SIZE: Final[float] = 8.0

# ============================================================================
# FILE NAMING CONSTANTS
# ============================================================================

FILENAME_REFERENCE: Final[str] = "fileP.txt"
FILENAME_CANDIDATE: Final[str] = "fileQ.txt"
FILENAME_RESULT_JSON: Final[str] = "registration.json"
POINT_FILE_DECIMALS: Final[int] = 4

# ============================================================================
# ENUMS
# ============================================================================


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class CorrespondencePolicy(str, Enum):
    """How indices pair up when the two sequences differ in length.

    CYCLIC:   index i of the longer sequence pairs with ``i % len(shorter)``.
    TRUNCATE: only indices below ``min(len(P), len(Q))`` are paired.
    STRICT:   both sequences must have the same length.
    """

    CYCLIC = "cyclic"
    TRUNCATE = "truncate"
    STRICT = "strict"


class RegistrationDirection(str, Enum):
    """Which set is moved when displaying a registration."""

    SECOND_TO_FIRST = "second_to_first"
    FIRST_TO_SECOND = "first_to_second"


# ============================================================================
# DATACLASSES - Configuration Sections
# ============================================================================


@dataclass(frozen=True)
class PathsConfig:
    """File system paths configuration."""

    data_root: Path
    logs_root: Path
    results_root: Path


@dataclass(frozen=True)
class RansacConfig:
    """RANSAC estimation parameters.

    Attributes:
        iterations: Number of hypotheses drawn; the loop never exits early
        inlier_threshold: Residual distance below which a pair is an inlier
        sample_size: Correspondences per minimal sample (at least 3)
        max_sample_attempts: Redraws of a degenerate sample before skipping
        policy: Index pairing rule for sequences of different length
        seed: Seed for the sampling generator (None draws fresh entropy)
        workers: Thread count; iterations are split across workers
        degeneracy_rtol: Relative singular value tolerance for degeneracy
        refine: Re-fit the best hypothesis over all of its inliers
    """

    iterations: int = RANSAC_DEFAULT_ITERATIONS
    inlier_threshold: float = RANSAC_DEFAULT_THRESHOLD
    sample_size: int = RANSAC_SAMPLE_SIZE
    max_sample_attempts: int = RANSAC_MAX_SAMPLE_ATTEMPTS
    policy: CorrespondencePolicy = CorrespondencePolicy.CYCLIC
    seed: Optional[int] = None
    workers: int = RANSAC_DEFAULT_WORKERS
    degeneracy_rtol: float = ALIGN_DEGENERACY_RTOL
    refine: bool = False

    def __post_init__(self) -> None:
        """Validate ranges and normalize the policy."""
        if self.iterations < 1:
            raise ValueError(f"iterations must be >= 1, got {self.iterations}")
        if not self.inlier_threshold > 0:
            raise ValueError(f"inlier_threshold must be positive, got {self.inlier_threshold}")
        if self.sample_size < RANSAC_SAMPLE_SIZE:
            raise ValueError(
                f"sample_size must be >= {RANSAC_SAMPLE_SIZE}, got {self.sample_size}"
            )
        if self.max_sample_attempts < 1:
            raise ValueError(
                f"max_sample_attempts must be >= 1, got {self.max_sample_attempts}"
            )
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if not self.degeneracy_rtol > 0:
            raise ValueError(f"degeneracy_rtol must be positive, got {self.degeneracy_rtol}")
        # accept plain strings such as "cyclic" from env/YAML
        object.__setattr__(self, "policy", CorrespondencePolicy(self.policy))


@dataclass(frozen=True)
class GeneratorConfig:
    """Synthetic point set generation configuration."""

    rotation_deg: Tuple[float, float, float] = GEN_ROTATION_DEG
    translation: Tuple[float, float, float] = GEN_TRANSLATION
    outlier_extent: float = GEN_OUTLIER_EXTENT
    max_extra_points: int = GEN_MAX_EXTRA_POINTS
    noise_sigma: float = 0.0
    decimals: int = GEN_DECIMALS


@dataclass(frozen=True)
class ViewerConfig:
    """Visualization configuration."""

    point_size: float = VIEW_POINT_SIZE
    show_lines: bool = False
    direction: RegistrationDirection = RegistrationDirection.SECOND_TO_FIRST
    visualize: bool = False
    reference_color: Tuple[float, float, float] = VIEW_COLOR_REFERENCE
    candidate_color: Tuple[float, float, float] = VIEW_COLOR_CANDIDATE
    aligned_color: Tuple[float, float, float] = VIEW_COLOR_ALIGNED
    line_color: Tuple[float, float, float] = VIEW_COLOR_LINES

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", RegistrationDirection(self.direction))


# ============================================================================
# MAIN CONFIGURATION
# ============================================================================


@dataclass(frozen=True)
class Settings:
    """Main application configuration.

    All subsystem configurations are aggregated here.
    Instances are immutable (frozen=True) to prevent accidental mutation.
    """

    paths: PathsConfig
    ransac: RansacConfig
    generator: GeneratorConfig
    viewer: ViewerConfig
    log_level: LogLevel = LogLevel.INFO


def get_settings() -> Settings:
    """Factory function to create Settings with environment variable overrides.

    Environment variables:
        RIGIDREG_DATA_ROOT: Base data directory
        RIGIDREG_LOGS_ROOT: Logs directory
        RIGIDREG_RESULTS_ROOT: Registration results directory
        RIGIDREG_ITERATIONS: RANSAC iteration count
        RIGIDREG_THRESHOLD: RANSAC inlier threshold
        RIGIDREG_POLICY: Correspondence policy (cyclic, truncate, strict)
        RIGIDREG_SEED: Sampling seed
        RIGIDREG_WORKERS: RANSAC worker threads
        RIGIDREG_LOG_LEVEL: Logging level
    """
    data_root = _env_path("RIGIDREG_DATA_ROOT", BASE_DIR / "data")
    paths = PathsConfig(
        data_root=data_root,
        logs_root=_env_path("RIGIDREG_LOGS_ROOT", data_root / "logs"),
        results_root=_env_path("RIGIDREG_RESULTS_ROOT", data_root / "results"),
    )

    ransac = RansacConfig(
        iterations=_env_int("RIGIDREG_ITERATIONS", RANSAC_DEFAULT_ITERATIONS),
        inlier_threshold=_env_float("RIGIDREG_THRESHOLD", RANSAC_DEFAULT_THRESHOLD),
        policy=CorrespondencePolicy(
            _env_str("RIGIDREG_POLICY", CorrespondencePolicy.CYCLIC.value).lower()
        ),
        seed=_env_optional_int("RIGIDREG_SEED", None),
        workers=_env_int("RIGIDREG_WORKERS", RANSAC_DEFAULT_WORKERS),
    )

    return Settings(
        paths=paths,
        ransac=ransac,
        generator=GeneratorConfig(),
        viewer=ViewerConfig(),
        log_level=LogLevel(_env_str("RIGIDREG_LOG_LEVEL", LogLevel.INFO.value).upper()),
    )


def _overlay(section: Any, values: Mapping[str, Any], name: str) -> Any:
    known = {f.name for f in dataclasses.fields(section)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"Unknown {name} settings: {', '.join(unknown)}")
    coerced = {
        key: tuple(value) if isinstance(value, list) else value
        for key, value in values.items()
    }
    return dataclasses.replace(section, **coerced)


def load_settings(path: Path) -> Settings:
    """Overlay a YAML or JSON settings file on top of :func:`get_settings`.

    The file may contain ``ransac``, ``generator`` and ``viewer`` mappings
    whose keys match the dataclass fields of the respective section.
    """
    from rigidreg.utils.io import load_json, load_yaml

    path = Path(path)
    data = load_json(path) if path.suffix == ".json" else load_yaml(path)
    data = data or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Settings file {path} must contain a mapping")

    sections = {"ransac", "generator", "viewer"}
    unknown = sorted(set(data) - sections)
    if unknown:
        raise ValueError(f"Unknown settings sections: {', '.join(unknown)}")

    base = get_settings()
    return dataclasses.replace(
        base,
        ransac=_overlay(base.ransac, data.get("ransac", {}), "ransac"),
        generator=_overlay(base.generator, data.get("generator", {}), "generator"),
        viewer=_overlay(base.viewer, data.get("viewer", {}), "viewer"),
    )


# ============================================================================
# MODULE EXPORTS
# ============================================================================

__all__ = [
    # Factory
    "get_settings",
    "load_settings",
    # Main config
    "Settings",
    # Config sections
    "PathsConfig",
    "RansacConfig",
    "GeneratorConfig",
    "ViewerConfig",
    # Enums
    "LogLevel",
    "CorrespondencePolicy",
    "RegistrationDirection",
    # Constants (selected for external use)
    "RANSAC_SAMPLE_SIZE",
    "RANSAC_DEFAULT_ITERATIONS",
    "RANSAC_DEFAULT_THRESHOLD",
    "ALIGN_DEGENERACY_RTOL",
    "FILENAME_REFERENCE",
    "FILENAME_CANDIDATE",
    "FILENAME_RESULT_JSON",
    "POINT_FILE_DECIMALS",
    "BASE_DIR",
]
