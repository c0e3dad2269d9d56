"""
Utility helpers for the effectpath library.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable
from typing import Any


_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def _is_effectpath_internal(path: str) -> bool:
    return os.path.abspath(path).startswith(_PACKAGE_DIR + os.sep)


# Environment variable to control debug mode
DEBUG_EFFECTS = os.environ.get("EFFECTPATH_DEBUG", "").lower() in ("1", "true", "yes")


def capture_creation_site(skip_frames: int = 2) -> str | None:
    """
    Describe the first caller frame outside effectpath as ``file:line in func``.

    Args:
        skip_frames: Number of frames to skip (default 2 to skip this function and caller)

    Returns:
        The location string, or None when frames are unavailable.
    """
    try:
        frame = sys._getframe(skip_frames)
    except ValueError:
        return None

    while frame is not None and _is_effectpath_internal(frame.f_code.co_filename):
        frame = frame.f_back
    if frame is None:
        return None
    return f"{frame.f_code.co_filename}:{frame.f_lineno} in {frame.f_code.co_name}"


class BoundedLog(list):
    """List that keeps only the most recent ``max_entries`` items.

    ``max_entries=None`` means unbounded.
    """

    def __init__(self, iterable: Iterable[Any] = (), *, max_entries: int | None = None) -> None:
        super().__init__(iterable)
        self._max_entries = max_entries
        self._trim()

    @property
    def max_entries(self) -> int | None:
        return self._max_entries

    def set_max_entries(self, max_entries: int | None) -> None:
        self._max_entries = max_entries
        self._trim()

    def append(self, item: Any) -> None:
        super().append(item)
        self._trim()

    def extend(self, items: Iterable[Any]) -> None:
        super().extend(items)
        self._trim()

    def _trim(self) -> None:
        if self._max_entries is None:
            return
        overflow = len(self) - self._max_entries
        if overflow > 0:
            del self[:overflow]


__all__ = [
    "DEBUG_EFFECTS",
    "BoundedLog",
    "capture_creation_site",
]
