"""Root conftest.py for the categories service test suite.

This file contains project-wide fixtures and pytest configuration.
"""

from collections.abc import Generator

import pytest
from loguru import logger

from magazenn.core.config import get_settings
from magazenn.core.context import RequestContext
from magazenn.core.error_context import _get_sensitive_fields
from magazenn.core.logging import _state


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers and keep log sinks out of stdout."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )

    # Importing the application runs setup_logging(); keep it from adding sinks
    _state.configured = True
    logger.remove()


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear cached settings before and after each test."""
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Prevent correlation IDs from leaking between tests."""
    RequestContext.clear()
    yield
    RequestContext.clear()
