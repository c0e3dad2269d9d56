"""Factory helpers for building effect descriptors.

Raw lists are always accepted by the driver; these helpers exist for
readability and, when ``EFFECTPATH_DEBUG`` is set, record where each
descriptor was created.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from effectpath.types import EffectDescriptor, Mode, normalize_path
from effectpath.utils import DEBUG_EFFECTS, capture_creation_site

PathLike = str | Sequence[str]


def create_descriptor_with_trace(descriptor: EffectDescriptor) -> EffectDescriptor:
    """Attach the creation site when debug tracing is enabled."""

    if not DEBUG_EFFECTS:
        return descriptor
    return descriptor.with_created_at(capture_creation_site(skip_frames=2))


def get(path: PathLike) -> EffectDescriptor:
    """Read the value at ``path`` without calling it."""

    return create_descriptor_with_trace(
        EffectDescriptor(Mode.DIRECT, normalize_path(path))
    )


def call(path: PathLike, *args: Any) -> EffectDescriptor:
    """Resolve ``path`` and, if callable, call it with ``args``."""

    return create_descriptor_with_trace(
        EffectDescriptor(Mode.DIRECT, normalize_path(path), args)
    )


def callback(path: PathLike, *args: Any) -> EffectDescriptor:
    """Call an error-first callback style function at ``path``."""

    return create_descriptor_with_trace(
        EffectDescriptor(Mode.CALLBACK, normalize_path(path), args)
    )


def parallel(*descriptors: Any) -> EffectDescriptor:
    """Resolve ``descriptors`` concurrently; yields their results in order."""

    members = tuple(EffectDescriptor.parse(item) for item in descriptors)
    return create_descriptor_with_trace(EffectDescriptor(Mode.PARALLEL, (), members))


__all__ = [
    "PathLike",
    "call",
    "callback",
    "create_descriptor_with_trace",
    "get",
    "parallel",
]
