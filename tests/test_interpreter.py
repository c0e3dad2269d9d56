"""Tests for the effect driver: resume values, error injection, nesting and run results."""

import pytest

from effectpath import (
    CALLBACK,
    EffectDescriptor,
    EffectInterpreter,
    MalformedDescriptorError,
    Mode,
    PathNotFoundError,
    call,
    get,
    run,
    run_sync,
)

# ============================================================================
# Resume values
# ============================================================================


class TestResume:
    @pytest.mark.asyncio
    async def test_returns_value_at_path(self, context) -> None:
        def program():
            return (yield ["value"])

        assert await run(context, program()) == "foo"

    @pytest.mark.asyncio
    async def test_string_path_matches_list_path(self, context) -> None:
        def bare():
            return (yield ["value"])

        def listed():
            return (yield [["value"]])

        assert await run(context, bare()) == await run(context, listed()) == "foo"

    @pytest.mark.asyncio
    async def test_results_are_sent_back_in_order(self, context) -> None:
        def program():
            increment = yield [["config", "increment"]]
            current = yield [["someDatabase", "getValue"]]
            deep = yield get(["config", "nested", "deep"])
            return increment, current, deep

        assert await run(context, program()) == (5, 2, True)

    @pytest.mark.asyncio
    async def test_computation_without_yields(self, context) -> None:
        def program():
            return "done"
            yield  # pragma: no cover

        assert await run(context, program()) == "done"

    @pytest.mark.asyncio
    async def test_descriptor_objects_can_be_yielded(self, context, database) -> None:
        def program():
            yield call(["someDatabase", "setValue"], 3)
            return (yield EffectDescriptor(Mode.DIRECT, ("someDatabase", "getValue")))

        assert await run(context, program()) == 3
        assert database.writes == [3]

    def test_run_sync(self, context) -> None:
        def program():
            return (yield ["value"])

        assert run_sync(context, program()) == "foo"

    @pytest.mark.asyncio
    async def test_non_generator_is_rejected(self, context) -> None:
        def program():
            yield ["value"]

        with pytest.raises(TypeError, match="not a generator"):
            await run(context, program)


# ============================================================================
# Failures
# ============================================================================


class TestFailures:
    @pytest.mark.asyncio
    async def test_uncaught_resolution_failure_propagates(self, context) -> None:
        def program():
            yield [["config", "missing"]]
            return "unreachable"

        with pytest.raises(PathNotFoundError):
            await run(context, program())

    @pytest.mark.asyncio
    async def test_failure_is_thrown_at_the_suspension_point(self, context) -> None:
        def program():
            try:
                yield [["config", "missing"]]
            except PathNotFoundError as exc:
                fallback = yield ["value"]
                return f"{exc.segment}->{fallback}"
            return "unreachable"

        assert await run(context, program()) == "missing->foo"

    @pytest.mark.asyncio
    async def test_callable_failure_can_be_caught(self) -> None:
        def explode():
            raise ValueError("boom")

        def program():
            try:
                yield ["explode"]
            except ValueError as exc:
                return str(exc)

        assert await run({"explode": explode}, program()) == "boom"

    @pytest.mark.asyncio
    async def test_callback_failure_can_be_caught(self) -> None:
        def read(done):
            done(OSError("nope"))

        def program():
            try:
                return (yield [CALLBACK, "read"])
            except OSError:
                return "recovered"

        assert await run({"read": read}, program()) == "recovered"

    @pytest.mark.asyncio
    async def test_malformed_yield_is_thrown_in(self, context) -> None:
        def program():
            try:
                yield 42
            except MalformedDescriptorError as exc:
                return exc.descriptor

        assert await run(context, program()) == 42

    @pytest.mark.asyncio
    async def test_computation_raising_fails_run(self, context) -> None:
        def program():
            yield ["value"]
            raise RuntimeError("business rule violated")

        with pytest.raises(RuntimeError, match="business rule violated"):
            await run(context, program())

    @pytest.mark.asyncio
    async def test_rethrown_failure_fails_run(self, context) -> None:
        def program():
            try:
                yield ["missing"]
            except PathNotFoundError as exc:
                raise LookupError("wrapped") from exc

        with pytest.raises(LookupError) as exc_info:
            await run(context, program())

        assert isinstance(exc_info.value.__cause__, PathNotFoundError)


# ============================================================================
# Nested computations
# ============================================================================


class TestNestedComputations:
    @pytest.mark.asyncio
    async def test_nested_result_is_sent_back(self, context) -> None:
        def inner():
            increment = yield [["config", "increment"]]
            return increment * 10

        def outer():
            value = yield inner()
            return value + 1

        assert await run(context, outer()) == 51

    @pytest.mark.asyncio
    async def test_nested_equals_flat(self, context) -> None:
        def inner():
            return (yield ["value"])

        def nested():
            return (yield inner())

        def flat():
            return (yield ["value"])

        assert await run(context, nested()) == await run(context, flat())

    @pytest.mark.asyncio
    async def test_deep_nesting(self, context) -> None:
        def level(depth):
            if depth == 0:
                return (yield [["config", "increment"]])
            return (yield level(depth - 1)) + 1

        assert await run(context, level(20)) == 25

    @pytest.mark.asyncio
    async def test_nested_failure_is_thrown_into_outer(self, context) -> None:
        def inner():
            yield ["missing"]

        def outer():
            try:
                yield inner()
            except PathNotFoundError:
                return "outer caught"

        assert await run(context, outer()) == "outer caught"

    @pytest.mark.asyncio
    async def test_inner_can_recover_on_its_own(self, context) -> None:
        def inner():
            try:
                yield ["missing"]
            except PathNotFoundError:
                return "inner caught"

        def outer():
            return (yield inner())

        assert await run(context, outer()) == "inner caught"


# ============================================================================
# EffectInterpreter / RunResult
# ============================================================================


class TestEffectInterpreter:
    def test_negative_trace_limit_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            EffectInterpreter(max_trace_entries=-1)

    def test_run_returns_ok_result_with_trace(self, interpreter, context) -> None:
        def program():
            yield ["value"]
            return (yield [["config", "increment"]])

        result = interpreter.run(context, program())

        assert result.is_ok()
        assert result.value == 5
        assert [record.descriptor.path for record in result.trace] == [
            ("value",),
            ("config", "increment"),
        ]
        assert result.trace[0].result.unwrap() == "foo"
        assert all(record.elapsed >= 0 for record in result.trace)

    def test_run_captures_failure(self, interpreter, context) -> None:
        def program():
            yield ["missing"]

        result = interpreter.run(context, program())

        assert result.is_err()
        assert isinstance(result.error, PathNotFoundError)
        assert result.trace[-1].result.is_err()
        with pytest.raises(PathNotFoundError):
            _ = result.value

    def test_trace_includes_nested_effects(self, interpreter, context) -> None:
        def inner():
            return (yield ["value"])

        def outer():
            yield inner()
            return (yield [["config", "increment"]])

        result = interpreter.run(context, outer())

        assert len(result.trace) == 2

    def test_trace_is_bounded(self, context) -> None:
        def program():
            for _ in range(5):
                yield ["value"]
            return (yield [["config", "increment"]])

        result = EffectInterpreter(max_trace_entries=2).run(context, program())

        assert len(result.trace) == 2
        assert result.trace[-1].descriptor.path == ("config", "increment")

    @pytest.mark.asyncio
    async def test_run_async(self, interpreter, context) -> None:
        def program():
            return (yield ["value"])

        result = await interpreter.run_async(context, program())

        assert result.value == "foo"

    @pytest.mark.asyncio
    async def test_drive_raises(self, interpreter, context) -> None:
        def program():
            yield ["missing"]

        with pytest.raises(PathNotFoundError):
            await interpreter.drive(context, program())
