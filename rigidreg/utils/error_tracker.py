# rigidreg/utils/error_tracker.py
"""Centralised error tracking utility for registration runs."""

from __future__ import annotations

from dataclasses import dataclass, field

from rigidreg.utils.logger import get_logger


@dataclass(slots=True)
class ErrorTracker:
    """Collect exceptions and contextual information during execution."""

    context: str = "ErrorTracker"
    errors: dict[str, list[str]] = field(default_factory=dict)

    def record(self, key: str, message: str) -> None:
        logger = get_logger(self.context)
        logger.error(f"{key}: {message}")
        self.errors.setdefault(key, []).append(message)

    def record_exception(self, key: str, exc: BaseException) -> None:
        self.record(key, f"{type(exc).__name__}: {exc}")

    def has_errors(self) -> bool:
        return bool(self.errors)

    def summary(self) -> dict[str, list[str]]:
        logger = get_logger(self.context)
        if not self.errors:
            logger.info("No errors recorded")
            return {}
        for key, messages in self.errors.items():
            logger.warning(f"Encountered {len(messages)} issues for {key}")
        return dict(self.errors)


__all__ = ["ErrorTracker"]
