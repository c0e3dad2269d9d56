"""
effectpath - describe side effects as data, perform them elsewhere.

Business logic is written as plain generators that yield effect descriptors
(``[mode?, path, *args]``) instead of performing side effects. ``run``
resolves each descriptor against a context and sends the outcome back in;
``run_test`` does the same against canned expectations.

Example:
    >>> from effectpath import run_sync
    >>>
    >>> stored = []
    >>> context = {
    ...     "config": {"increment": 5},
    ...     "db": {"get_value": lambda: 2, "set_value": stored.append},
    ... }
    >>>
    >>> def increment():
    ...     step = yield [["config", "increment"]]
    ...     current = yield [["db", "get_value"]]
    ...     yield [["db", "set_value"], current + step]
    >>>
    >>> run_sync(context, increment())
    >>> stored
    [7]
"""

from loguru import logger

from effectpath._vendor import Err, Ok, Result
from effectpath.effects import call, callback, get, parallel
from effectpath.errors import (
    EffectError,
    EffectExecutionError,
    MalformedDescriptorError,
    PathNotFoundError,
    UnexpectedEffectError,
    UnusedExpectationsError,
)
from effectpath.interpreter import EffectInterpreter, EffectRecord, RunResult, run, run_sync
from effectpath.resolver import resolve
from effectpath.testing import Expectation, run_test
from effectpath.types import (
    CALLBACK,
    CALLBACK_STYLE,
    PARALLEL,
    Computation,
    EffectDescriptor,
    Invocation,
    Mode,
)
from effectpath.utils import DEBUG_EFFECTS

# Library logging stays silent unless EFFECTPATH_DEBUG is set or the
# application calls logger.enable("effectpath").
if DEBUG_EFFECTS:
    logger.enable("effectpath")
else:
    logger.disable("effectpath")

__version__ = "0.1.0"

__all__ = [
    "CALLBACK",
    "CALLBACK_STYLE",
    "Computation",
    "EffectDescriptor",
    "EffectError",
    "EffectExecutionError",
    "EffectInterpreter",
    "EffectRecord",
    "Err",
    "Expectation",
    "Invocation",
    "MalformedDescriptorError",
    "Mode",
    "Ok",
    "PARALLEL",
    "PathNotFoundError",
    "Result",
    "RunResult",
    "UnexpectedEffectError",
    "UnusedExpectationsError",
    "call",
    "callback",
    "get",
    "parallel",
    "resolve",
    "run",
    "run_sync",
    "run_test",
]
