# rigidreg/utils/progress.py
"""Shared tqdm wrappers to ensure consistent progress indicators."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Iterable, TypeVar

from tqdm.auto import tqdm

T = TypeVar("T")

_BAR_FORMAT = "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"


def track(
    iterable: Iterable[T], *, description: str | None = None, total: int | None = None
) -> Iterator[T]:
    yield from tqdm(
        iterable,
        desc=description,
        total=total,
        leave=False,
        bar_format=_BAR_FORMAT,
    )


@contextmanager
def progress_bar(
    total: int, *, description: str | None = None, disable: bool = False
) -> Iterator[tqdm]:
    """Manual progress bar for loops driven by callbacks."""
    bar = tqdm(
        total=total,
        desc=description,
        leave=False,
        disable=disable,
        bar_format=_BAR_FORMAT,
    )
    try:
        yield bar
    finally:
        bar.close()


__all__ = ["progress_bar", "track"]
