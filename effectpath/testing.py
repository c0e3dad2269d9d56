"""Testing helpers: drive a computation against canned effect outcomes.

``run_test`` steps a computation synchronously, checking every yielded
descriptor against an ordered list of expectations instead of touching a
real context::

    def increment():
        step = yield [["config", "increment"]]
        current = yield [["db", "get_value"]]
        yield [["db", "set_value"], current + step]

    writes = []
    run_test(
        [
            ([["config", "increment"]], 5),
            ([["db", "get_value"]], 2),
            ([["db", "set_value"], 7], writes.append),
        ],
        increment(),
    )
    assert writes == [7]
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger as _logger

from effectpath.errors import UnexpectedEffectError, UnusedExpectationsError
from effectpath.types import Computation, EffectDescriptor, is_computation

T = TypeVar("T")

logger = _logger.bind(component="testing")

_PROTOCOL_ERRORS = (UnexpectedEffectError, UnusedExpectationsError)
_EXPECTATION_KEYS = frozenset({"effect", "yields", "raises"})


@dataclass(frozen=True)
class Expectation:
    """One expected effect and the outcome to feed back for it.

    ``yields`` is either the literal value to send back, or a callable that
    receives the descriptor's call arguments and returns the value. ``raises``
    makes the effect fail with that exception instead.
    """

    effect: Any
    yields: Any = None
    raises: Exception | None = None

    def __post_init__(self) -> None:
        EffectDescriptor.parse(self.effect)
        if self.raises is not None and not isinstance(self.raises, Exception):
            raise TypeError(
                f"raises must be an Exception instance, got {type(self.raises).__name__}"
            )

    @classmethod
    def coerce(cls, entry: Any) -> Expectation:
        if isinstance(entry, Expectation):
            return entry
        if isinstance(entry, Mapping):
            unknown = set(entry) - _EXPECTATION_KEYS
            if "effect" not in entry or unknown:
                raise TypeError(
                    f"expectation mapping needs an 'effect' key and only {sorted(_EXPECTATION_KEYS)}, "
                    f"got {sorted(entry)}"
                )
            return cls(**entry)
        if isinstance(entry, (tuple, list)) and len(entry) == 2:
            return cls(effect=entry[0], yields=entry[1])
        raise TypeError(
            "expectation must be an Expectation, an (effect, yields) pair or a mapping, "
            f"got {type(entry).__name__}"
        )

    @property
    def descriptor(self) -> EffectDescriptor:
        return EffectDescriptor.parse(self.effect)

    def matches(self, actual: EffectDescriptor, *, match_args: bool = True) -> bool:
        expected = self.descriptor
        if match_args:
            return expected == actual
        return expected.shape() == actual.shape()

    def produce(self, actual: EffectDescriptor) -> Any:
        if self.raises is not None:
            raise self.raises
        if callable(self.yields):
            return self.yields(*actual.args)
        return self.yields


class _ExpectationDriver:
    def __init__(self, pending: deque[Expectation], *, match_args: bool) -> None:
        self._pending = pending
        self._match_args = match_args
        self._index = 0

    def drive(self, gen: Computation[T]) -> T:
        try:
            return self._drive(gen)
        except _PROTOCOL_ERRORS:
            gen.close()
            raise

    def _drive(self, gen: Computation[T]) -> T:
        send_value: Any = None
        error: Exception | None = None
        while True:
            try:
                item = gen.send(send_value) if error is None else gen.throw(error)
            except StopIteration as stop:
                return stop.value

            send_value, error = None, None
            try:
                send_value = self._step(item)
            except _PROTOCOL_ERRORS:
                raise
            except Exception as exc:
                error = exc

    def _step(self, item: Any) -> Any:
        if is_computation(item):
            return self.drive(item)
        descriptor = EffectDescriptor.parse(item)
        expectation = self._take(descriptor)
        logger.debug("expectation #{} matched {}", self._index - 1, descriptor)
        return expectation.produce(descriptor)

    def _take(self, descriptor: EffectDescriptor) -> Expectation:
        if not self._pending:
            raise UnexpectedEffectError(descriptor, None, self._index)
        expectation = self._pending[0]
        if not expectation.matches(descriptor, match_args=self._match_args):
            raise UnexpectedEffectError(descriptor, expectation.descriptor, self._index)
        self._pending.popleft()
        self._index += 1
        return expectation


def run_test(
    expectations: Iterable[Any],
    computation: Computation[T],
    *,
    strict: bool = True,
    match_args: bool = True,
) -> T:
    """Drive ``computation`` against ``expectations`` and return its result.

    Args:
        expectations: Ordered ``Expectation`` objects, ``(effect, yields)``
            pairs (tuples or lists), or ``{"effect": ..., "yields": ...}`` mappings.
        computation: The generator under test.
        strict: Fail with ``UnusedExpectationsError`` if expectations remain
            once the computation completes.
        match_args: Compare call arguments when matching descriptors. When
            False only the mode and path are compared.

    Raises:
        UnexpectedEffectError: A yielded effect did not match the next expectation.
        UnusedExpectationsError: ``strict`` and the computation finished early.
    """
    if not is_computation(computation):
        raise TypeError(
            f"Computation {computation!r} is not a generator; "
            "call the generator function before running it"
        )
    pending = deque(Expectation.coerce(entry) for entry in expectations)
    value = _ExpectationDriver(pending, match_args=match_args).drive(computation)
    if strict and pending:
        raise UnusedExpectationsError([expectation.effect for expectation in pending])
    return value


__all__ = ["Expectation", "run_test"]
