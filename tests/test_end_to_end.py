"""End-to-end scenarios: the same business logic under the real driver and the harness."""

import pytest

from effectpath import run, run_sync, run_test


def increment_stored_value():
    increment = yield [["config", "increment"]]
    current = yield [["someDatabase", "getValue"]]
    yield [["someDatabase", "setValue"], current + increment]


@pytest.mark.asyncio
async def test_increment_against_real_context(context, database) -> None:
    await run(context, increment_stored_value())

    assert database.writes == [7]
    assert database.value == 7


def test_increment_against_plain_callables() -> None:
    stored: list[int] = []
    context = {
        "config": {"increment": 5},
        "someDatabase": {"getValue": lambda: 2, "setValue": stored.append},
    }

    run_sync(context, increment_stored_value())

    assert stored == [7]


def test_increment_against_expectations() -> None:
    stored: list[int] = []

    run_test(
        [
            ([["config", "increment"]], 5),
            ([["someDatabase", "getValue"]], 2),
            ([["someDatabase", "setValue"], 7], stored.append),
        ],
        increment_stored_value(),
    )

    assert stored == [7]


def test_repeated_runs_are_independent(context, database) -> None:
    run_sync(context, increment_stored_value())
    run_sync(context, increment_stored_value())

    assert database.writes == [7, 12]
