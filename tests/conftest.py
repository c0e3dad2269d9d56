"""
Pytest configuration for effectpath tests.

Provides an in-memory database double and a context wired to it, shared by
the driver, resolver and end-to-end tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from effectpath import EffectInterpreter


@dataclass
class InMemoryDatabase:
    """Tiny store whose methods are exposed through the test context."""

    value: int = 2
    writes: list[int] = field(default_factory=list)

    def get_value(self) -> int:
        return self.value

    def set_value(self, value: int) -> None:
        self.value = value
        self.writes.append(value)


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def context(database: InMemoryDatabase) -> dict[str, Any]:
    return {
        "value": "foo",
        "config": {"increment": 5, "nested": {"deep": True}},
        "someDatabase": {
            "getValue": database.get_value,
            "setValue": database.set_value,
        },
    }


@pytest.fixture
def interpreter() -> EffectInterpreter:
    return EffectInterpreter()
