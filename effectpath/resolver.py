"""
Descriptor resolver for effectpath.

Turns a single effect descriptor into its outcome by walking the context
along the descriptor path and, when the value found there is callable,
invoking it according to the descriptor mode.
"""

from __future__ import annotations

import asyncio
import inspect
import threading
from collections.abc import Callable, Mapping
from typing import Any

from loguru import logger as _logger

from effectpath.errors import EffectExecutionError, PathNotFoundError
from effectpath.types import EffectDescriptor, Invocation, Mode, Path

logger = _logger.bind(component="resolver")

# callback-style coroutines still running after their callback fired
_background_tasks: set[asyncio.Future[Any]] = set()


def lookup(context: Mapping[str, Any], path: Path) -> Any:
    """Return the value addressed by ``path`` inside ``context``."""

    current: Any = context
    for segment in path:
        if not isinstance(current, Mapping):
            raise PathNotFoundError(
                path, segment, reason=f"below a non-mapping {type(current).__name__}"
            )
        try:
            current = current[segment]
        except KeyError:
            raise PathNotFoundError(path, segment) from None
    return current


def classify(value: Any, mode: Mode) -> Invocation:
    """Decide how a resolved context value produces its outcome."""

    if not callable(value):
        return Invocation.VALUE
    if mode is Mode.CALLBACK:
        return Invocation.CALLBACK
    return Invocation.DIRECT


async def resolve(context: Mapping[str, Any], descriptor: Any) -> Any:
    """Resolve ``descriptor`` against ``context`` and return its outcome.

    Accepts either the wire shape ``[mode?, path, *args]`` or an
    :class:`~effectpath.types.EffectDescriptor`. Awaitable results are
    awaited; plain results are returned unchanged.
    """
    effect = EffectDescriptor.parse(descriptor)

    if effect.mode is Mode.PARALLEL:
        return await _resolve_parallel(context, effect)

    value = lookup(context, effect.path)
    kind = classify(value, effect.mode)
    logger.debug("resolving {} as {}", effect, kind.name)

    if kind is Invocation.VALUE:
        return value
    if kind is Invocation.CALLBACK:
        return await _invoke_callback_style(effect, value)

    outcome = value(*effect.args)
    if inspect.isawaitable(outcome):
        return await outcome
    return outcome


async def _resolve_parallel(
    context: Mapping[str, Any], effect: EffectDescriptor
) -> list[Any]:
    members = effect.members
    logger.debug("dispatching {} parallel effect(s)", len(members))
    # gather raises the first failure without waiting for (or cancelling) siblings
    results = await asyncio.gather(*(resolve(context, member) for member in members))
    return list(results)


async def _invoke_callback_style(effect: EffectDescriptor, func: Callable[..., Any]) -> Any:
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()
    claim_lock = threading.Lock()
    claimed = False

    def claim() -> bool:
        # the first completion (callback call or raise) wins
        nonlocal claimed
        with claim_lock:
            if claimed:
                return False
            claimed = True
            return True

    def settle(error: Any, value: Any) -> None:
        if future.done():
            return
        if error is None:
            future.set_result(value)
        elif isinstance(error, Exception):
            future.set_exception(error)
        else:
            future.set_exception(EffectExecutionError(effect, error))

    def done(error: Any = None, value: Any = None) -> None:
        if claim():
            loop.call_soon_threadsafe(settle, error, value)

    async def watch(awaitable: Any) -> None:
        try:
            await awaitable
        except Exception as exc:
            if claim():
                settle(exc, None)
            else:
                logger.debug("ignoring {!r} raised after {} completed", exc, effect)

    try:
        returned = func(*effect.args, done)
    except Exception as exc:
        if claim():
            raise
        logger.debug("ignoring {!r} raised after {} completed", exc, effect)
        returned = None

    if inspect.isawaitable(returned):
        task = asyncio.ensure_future(watch(returned))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
    return await future


__all__ = ["classify", "lookup", "resolve"]
