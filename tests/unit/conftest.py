"""Pytest configuration and fixtures for unit tests."""

from datetime import datetime, timedelta

import pytest

from tasklist.services.task_service import TaskEngine
from tests.unit.mocks import DEFAULT_NOW, InMemoryTaskStore, make_context


class FrozenClock:
    """Controllable clock passed to the engine."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Clock frozen at DEFAULT_NOW."""
    return FrozenClock(DEFAULT_NOW)


@pytest.fixture
def store():
    """Provides a fresh InMemoryTaskStore for each test."""
    return InMemoryTaskStore()


@pytest.fixture
def engine(store, clock, test_settings):
    """TaskEngine over the in-memory store and frozen clock."""
    return TaskEngine(store, settings=test_settings, clock=clock)


@pytest.fixture
def alice():
    """Regular staff member at tenant-1/loc-1."""
    return make_context("alice")


@pytest.fixture
def bob():
    """Another regular staff member at the same location."""
    return make_context("bob")


@pytest.fixture
def manager():
    """Location manager."""
    return make_context("mgr", is_manager=True)


@pytest.fixture
def admin():
    """Tenant-wide administrator with every role flag."""
    return make_context("admin", is_manager=True, can_view_all=True, can_manage_all=True)
