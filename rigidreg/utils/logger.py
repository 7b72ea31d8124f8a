# rigidreg/utils/logger.py
"""Single-source Loguru setup: console and file sinks without format strings."""

from __future__ import annotations

import inspect
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from loguru import logger as _root_logger
from loguru._logger import Logger as LoguruLogger


# ---------- options ----------
@dataclass(slots=True)
class _LogOptions:
    level: str = os.environ.get("RIGIDREG_LOG_LEVEL", "INFO").upper()
    to_file: bool = os.environ.get("RIGIDREG_LOG_TO_FILE", "1") not in ("0", "false", "no")


_OPTIONS = _LogOptions()
_CONFIGURED = False
_LOGGER: Optional[LoguruLogger] = None
_LOG_HANDLE: Optional[TextIO] = None


def _resolve_log_dir() -> Path:
    from rigidreg.config import get_settings

    return get_settings().paths.logs_root


# ---------- sinks as callables ----------
def _console_sink(msg) -> None:
    r = msg.record
    module = r["extra"].get("module", r.get("name", "unknown"))
    # one record == one line
    print(f"{r['time']:%H:%M:%S} | {r['level'].name: <3.3} | {module} | {r['message']}")


def _make_file_sink(fh: TextIO):
    def _file_sink(msg) -> None:
        r = msg.record
        module = r["extra"].get("module", r.get("name", "unknown"))
        fh.write(f"{r['time'].isoformat()} | {r['level'].name} | {module} | {r['message']}\n")
        fh.flush()

    return _file_sink


def _configure_logger(level: str | None = None, to_file: bool | None = None) -> None:
    global _CONFIGURED, _LOGGER, _LOG_HANDLE

    # drop every existing handler, including loguru's default stderr sink
    _root_logger.remove()
    if _LOG_HANDLE is not None:
        _LOG_HANDLE.close()
        _LOG_HANDLE = None

    def _inject_extras(record):
        record["extra"].setdefault("module", record.get("name", "unknown"))

    logger = _root_logger.patch(_inject_extras)
    resolved_level = (level or _OPTIONS.level).upper()
    logger.add(_console_sink, level=resolved_level, catch=True)

    write_file = _OPTIONS.to_file if to_file is None else to_file
    if write_file:
        log_dir = _resolve_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = log_dir / f"rigidreg_{timestamp}.log"
        _LOG_HANDLE = log_path.open("a", encoding="utf-8")
        logger.add(_make_file_sink(_LOG_HANDLE), level=resolved_level, catch=True)

    _LOGGER = logger
    _CONFIGURED = True


def get_logger(name: str | None = None) -> LoguruLogger:
    """Return a logger bound to ``name`` (or the calling module)."""
    if not _CONFIGURED:
        _configure_logger()

    module_name = name
    frame = inspect.currentframe()
    if module_name is None and frame is not None:
        caller_frame = frame.f_back
        if caller_frame is not None:
            module = inspect.getmodule(caller_frame)
            if module is not None and module.__name__ != "__main__":
                module_name = module.__name__

    assert _LOGGER is not None
    bound = _LOGGER.bind(module=module_name or "unknown")

    def _tag(label: str, msg: str | None = None, *args, level: str = "info") -> None:
        text = f"[{label}] " + (msg or "")
        if args:
            text = text.format(*args)
        getattr(bound, level, bound.info)(text)

    setattr(bound, "tag", _tag)
    return bound


def configure(level: str | None = None, to_file: bool | None = None) -> None:
    """Reconfigure sinks, e.g. to raise verbosity for a single run."""
    _configure_logger(level=level, to_file=to_file)


__all__ = ["configure", "get_logger"]
