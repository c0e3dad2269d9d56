"""
Effect driver for effectpath.

This module contains the EffectInterpreter that steps a computation (a
generator yielding effect descriptors), resolves each yielded descriptor
against a context, and sends the outcome back in until the computation
returns.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from loguru import logger as _logger

from effectpath._vendor import Err, Ok, Result
from effectpath.resolver import resolve
from effectpath.types import Computation, EffectDescriptor, is_computation
from effectpath.utils import BoundedLog

T = TypeVar("T")

logger = _logger.bind(component="driver")


@dataclass(frozen=True)
class EffectRecord:
    """One resolved effect, kept in :attr:`RunResult.trace`."""

    descriptor: EffectDescriptor
    result: Result[Any]
    elapsed: float


@dataclass(frozen=True)
class RunResult(Generic[T]):
    """Outcome of :meth:`EffectInterpreter.run` together with its effect trace."""

    result: Result[T]
    trace: BoundedLog

    @property
    def value(self) -> T:
        """Get the successful value or raise the failure."""
        return self.result.unwrap()

    @property
    def error(self) -> BaseException:
        return self.result.unwrap_err()

    def is_ok(self) -> bool:
        return self.result.is_ok()

    def is_err(self) -> bool:
        return self.result.is_err()


class EffectInterpreter:
    """
    Drives computations to completion against a context.

    Each yielded descriptor is resolved before the computation is resumed, so
    effects of a single computation run strictly in the order they were
    yielded. Failures are thrown back into the computation at the yield that
    produced them; a computation that does not catch them fails the run.
    """

    def __init__(self, *, max_trace_entries: int | None = None) -> None:
        """Initialize the interpreter.

        Args:
            max_trace_entries: Optional cap on the number of effect records
                retained in ``RunResult.trace``.
        """
        if max_trace_entries is not None and max_trace_entries < 0:
            raise ValueError("max_trace_entries must be >= 0 or None")

        self._max_trace_entries = max_trace_entries

    def _new_trace(self) -> BoundedLog:
        return BoundedLog(max_entries=self._max_trace_entries)

    def run(self, context: Mapping[str, Any], computation: Computation[T]) -> RunResult[T]:
        """
        Run a computation (synchronous interface).

        Internally uses asyncio.run(); from async code use run_async() instead.
        """
        return asyncio.run(self.run_async(context, computation))

    async def run_async(
        self, context: Mapping[str, Any], computation: Computation[T]
    ) -> RunResult[T]:
        """
        Run a computation and capture its outcome.

        Returns a RunResult[T] containing:
        - result: Ok(value) or Err(error)
        - trace: the effects resolved along the way
        """
        trace = self._new_trace()
        try:
            value = await self._drive_checked(context, computation, trace)
        except Exception as exc:
            return RunResult(Err(exc), trace)
        return RunResult(Ok(value), trace)

    async def drive(self, context: Mapping[str, Any], computation: Computation[T]) -> T:
        """Drive ``computation`` and return its final value, raising on failure."""
        return await self._drive_checked(context, computation, None)

    async def _drive_checked(
        self,
        context: Mapping[str, Any],
        computation: Computation[T],
        trace: BoundedLog | None,
    ) -> T:
        if not is_computation(computation):
            raise TypeError(
                f"Computation {computation!r} is not a generator; "
                "call the generator function before running it"
            )
        return await self._drive(context, computation, trace)

    async def _drive(
        self,
        context: Mapping[str, Any],
        gen: Computation[T],
        trace: BoundedLog | None,
    ) -> T:
        send_value: Any = None
        error: Exception | None = None
        while True:
            try:
                if error is None:
                    item = gen.send(send_value)
                else:
                    logger.debug("throwing {!r} into computation", error)
                    item = gen.throw(error)
            except StopIteration as stop:
                return stop.value

            send_value, error = None, None
            try:
                send_value = await self._step(context, item, trace)
            except Exception as exc:
                error = exc

    async def _step(
        self, context: Mapping[str, Any], item: Any, trace: BoundedLog | None
    ) -> Any:
        if is_computation(item):
            logger.debug("driving nested computation {}", item)
            return await self._drive(context, item, trace)

        descriptor = EffectDescriptor.parse(item)
        logger.debug("effect: {}", descriptor)
        started = time.perf_counter()
        try:
            value = await resolve(context, descriptor)
        except Exception as exc:
            self._record(trace, descriptor, Err(exc), started)
            raise
        self._record(trace, descriptor, Ok(value), started)
        return value

    @staticmethod
    def _record(
        trace: BoundedLog | None,
        descriptor: EffectDescriptor,
        result: Result[Any],
        started: float,
    ) -> None:
        if trace is None:
            return
        trace.append(EffectRecord(descriptor, result, time.perf_counter() - started))


async def run(context: Mapping[str, Any], computation: Computation[T]) -> T:
    """Drive ``computation`` against ``context``; return its result or raise its failure."""
    return await EffectInterpreter().drive(context, computation)


def run_sync(context: Mapping[str, Any], computation: Computation[T]) -> T:
    """Blocking variant of :func:`run` for code outside an event loop."""
    return asyncio.run(run(context, computation))


__all__ = ["EffectInterpreter", "EffectRecord", "RunResult", "run", "run_sync"]
