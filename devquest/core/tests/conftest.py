"""Shared fixtures for core tests."""

from collections.abc import Iterator

import pytest


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    """Reset the global settings cache before and after each test."""
    import devquest.core.config

    devquest.core.config._settings = None

    yield

    devquest.core.config._settings = None
