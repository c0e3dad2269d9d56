"""Error types raised while resolving and testing effect descriptors."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class EffectError(Exception):
    """Base class for every error raised by effectpath itself."""


class MalformedDescriptorError(EffectError, TypeError):
    """Raised when a yielded item is not a valid effect descriptor."""

    def __init__(self, descriptor: Any, reason: str) -> None:
        self.descriptor = descriptor
        self.reason = reason
        super().__init__(f"Malformed effect descriptor {descriptor!r}: {reason}")


class PathNotFoundError(EffectError, KeyError):
    """Raised when a descriptor path does not resolve inside the context.

    Attributes:
        path: The full path that was being resolved.
        segment: The key at which traversal stopped.
    """

    def __init__(self, path: Sequence[str], segment: str, reason: str = "missing") -> None:
        self.path = tuple(path)
        self.segment = segment
        self.reason = reason
        super().__init__(path, segment)

    def __str__(self) -> str:
        dotted = ".".join(self.path)
        return (
            f"Context path not found: {dotted!r} (segment {self.segment!r} is {self.reason})\n"
            f"Hint: Provide {self.segment!r} in the context passed to run()"
        )


class EffectExecutionError(EffectError):
    """Raised when an effect reports a failure that is not itself an exception.

    This covers only the non-exception case. An exception raised by a context
    callable (direct or callback style), or passed as the error argument of an
    error-first callback, is thrown into the computation unchanged so business
    logic can catch its concrete type. Any other error value (for example a
    string handed to the callback) is wrapped here, with the failing
    descriptor in ``effect`` and the reported value in ``cause``.
    """

    def __init__(self, effect: Any, cause: Any) -> None:
        self.effect = effect
        self.cause = cause
        super().__init__(effect, cause)

    def __str__(self) -> str:
        return f"Effect {self.effect!r} failed\nCaused by: {self.cause!r}"


class UnexpectedEffectError(EffectError, AssertionError):
    """Raised by the test harness when a yielded effect was not the next expected one."""

    def __init__(self, actual: Any, expected: Any | None, index: int) -> None:
        self.actual = actual
        self.expected = expected
        self.index = index
        super().__init__(actual, expected, index)

    def __str__(self) -> str:
        if self.expected is None:
            return f"Unexpected effect #{self.index}: {self.actual!r} (no expectations left)"
        return (
            f"Unexpected effect #{self.index}:\n"
            f"  expected: {self.expected!r}\n"
            f"  actual:   {self.actual!r}"
        )


class UnusedExpectationsError(EffectError, AssertionError):
    """Raised by the test harness when the computation finished early."""

    def __init__(self, remaining: Sequence[Any]) -> None:
        self.remaining = tuple(remaining)
        super().__init__(self.remaining)

    def __str__(self) -> str:
        listing = "\n".join(f"  - {item!r}" for item in self.remaining)
        return f"Computation completed with {len(self.remaining)} unused expectation(s):\n{listing}"


__all__ = [
    "EffectError",
    "EffectExecutionError",
    "MalformedDescriptorError",
    "PathNotFoundError",
    "UnexpectedEffectError",
    "UnusedExpectationsError",
]
