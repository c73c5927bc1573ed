"""Pytest configuration and shared fixtures."""

import logfire
import pytest

from tasklist.core.config import Settings


# Keep spans local during tests
logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def test_settings() -> Settings:
    """Settings built from defaults only, ignoring any local .env file."""
    return Settings(_env_file=None)
