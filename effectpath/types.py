"""
Core data types for effectpath.

An effect descriptor travels on the wire as a plain list::

    [mode?, path, *args]

where ``mode`` is one of the :class:`Mode` markers (``PARALLEL`` or
``CALLBACK``), ``path`` is a string or a sequence of strings addressing a
value inside the context, and ``args`` are positional call arguments. A
``PARALLEL`` descriptor instead carries nested descriptors after the marker.
:meth:`EffectDescriptor.parse` turns the wire shape into a typed value.
"""

from __future__ import annotations

import inspect
from collections.abc import Generator, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, TypeAlias, TypeVar

from effectpath.errors import MalformedDescriptorError

T = TypeVar("T")

Path: TypeAlias = tuple[str, ...]
Context: TypeAlias = Mapping[str, Any]
Computation: TypeAlias = Generator[Any, Any, T]


class Mode(Enum):
    """Execution mode carried by a descriptor."""

    DIRECT = "direct"
    PARALLEL = "parallel"
    CALLBACK = "callback"

    def __repr__(self) -> str:
        return self.name


# Wire markers
PARALLEL = Mode.PARALLEL
CALLBACK = Mode.CALLBACK
CALLBACK_STYLE = Mode.CALLBACK


class Invocation(Enum):
    """How a resolved context value turns into an outcome."""

    VALUE = "value"
    DIRECT = "direct"
    CALLBACK = "callback"


def normalize_path(value: Any, *, descriptor: Any = None) -> Path:
    """Normalize a bare string or a sequence of strings into a path tuple."""

    source = value if descriptor is None else descriptor
    if isinstance(value, str):
        if not value:
            raise MalformedDescriptorError(source, "path must not be empty")
        return (value,)
    if isinstance(value, (list, tuple)):
        if not value:
            raise MalformedDescriptorError(source, "path must not be empty")
        for index, segment in enumerate(value):
            if not isinstance(segment, str) or not segment:
                raise MalformedDescriptorError(
                    source, f"path segment {index} must be a non-empty str, got {segment!r}"
                )
        return tuple(value)
    raise MalformedDescriptorError(
        source, f"path must be str or a sequence of str, got {type(value).__name__}"
    )


@dataclass(frozen=True)
class EffectDescriptor:
    """Parsed form of ``[mode?, path, *args]``.

    For ``Mode.PARALLEL`` the path is empty and ``args`` holds the nested
    descriptors.
    """

    mode: Mode
    path: Path
    args: tuple[Any, ...] = ()
    created_at: str | None = field(default=None, compare=False, repr=False)

    @classmethod
    def parse(cls, raw: Any) -> EffectDescriptor:
        if isinstance(raw, EffectDescriptor):
            return raw
        if not isinstance(raw, (list, tuple)):
            raise MalformedDescriptorError(
                raw, "expected a list of the form [mode?, path, *args]"
            )
        if not raw:
            raise MalformedDescriptorError(raw, "descriptor is empty")

        head, *rest = raw
        mode = Mode.DIRECT
        if isinstance(head, Mode):
            mode = head
        else:
            rest = list(raw)

        if mode is Mode.PARALLEL:
            return cls(Mode.PARALLEL, (), tuple(cls.parse(member) for member in rest))

        if not rest:
            raise MalformedDescriptorError(raw, "path is missing")
        path = normalize_path(rest[0], descriptor=raw)
        return cls(mode, path, tuple(rest[1:]))

    @property
    def members(self) -> tuple[EffectDescriptor, ...]:
        """Nested descriptors of a parallel group."""

        if self.mode is not Mode.PARALLEL:
            return ()
        return self.args

    def shape(self) -> EffectDescriptor:
        """Return this descriptor with call arguments stripped."""

        if self.mode is Mode.PARALLEL:
            return replace(self, args=tuple(member.shape() for member in self.members))
        return replace(self, args=())

    def to_wire(self) -> list[Any]:
        if self.mode is Mode.PARALLEL:
            return [Mode.PARALLEL, *(member.to_wire() for member in self.members)]
        head = [] if self.mode is Mode.DIRECT else [self.mode]
        return [*head, list(self.path), *self.args]

    def with_created_at(self, created_at: str | None) -> EffectDescriptor:
        return replace(self, created_at=created_at)


def is_computation(item: Any) -> bool:
    """Return True when ``item`` is a suspended computation the driver can step."""

    return inspect.isgenerator(item)


__all__ = [
    "CALLBACK",
    "CALLBACK_STYLE",
    "Computation",
    "Context",
    "EffectDescriptor",
    "Invocation",
    "Mode",
    "PARALLEL",
    "Path",
    "is_computation",
    "normalize_path",
]
