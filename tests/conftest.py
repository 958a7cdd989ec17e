"""Root-level pytest fixtures for all tests.

This module provides fixtures that are available to all tests in the project.
"""

from datetime import UTC, datetime

import pytest
from test_helpers import reset_all_globals

from repositories.group_repository import GroupRepository
from repositories.reading_repository import ReadingRepository
from utils.readings import Group


@pytest.fixture(autouse=True)
def reset_global_state():
    """Automatically reset all global service and repository instances after each test.

    This fixture ensures test isolation by resetting all singleton instances
    to None after each test completes, preventing state leakage between tests.
    """
    yield
    reset_all_globals()


class FakeClock:
    """Deterministic clock that advances one minute per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 12, 31, 12, 0, tzinfo=UTC)
        self.calls = 0

    def __call__(self) -> datetime:
        value = self.current
        self.calls += 1
        self.current = self.current.replace(minute=(self.current.minute + 1) % 60)
        return value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def reading_repo(clock) -> ReadingRepository:
    return ReadingRepository(clock=clock)


@pytest.fixture
def group_repo() -> GroupRepository:
    ids = iter(f"g{i}" for i in range(1, 100))
    return GroupRepository(id_factory=lambda: next(ids))


@pytest.fixture
def groups(group_repo) -> tuple[Group, ...]:
    """Registry with group g1 ("Tuesday Tea") holding Ann and Ben, and group g2 ("Book Club")."""
    registry = group_repo.create_group((), "Tuesday Tea")
    registry = group_repo.add_member(registry, "g1", "Ann", 2025)
    registry = group_repo.add_member(registry, "g1", "Ben", 2025)
    registry = group_repo.create_group(registry, "Book Club")
    return group_repo.add_member(registry, "g2", "Cleo", 2024)
