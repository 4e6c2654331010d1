"""Pytest configuration and shared fixtures."""

import pytest
import structlog


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def errors():
    """Collects (error, topic, is_wildcard) tuples from an error handler."""
    return []


@pytest.fixture
def bus(errors):
    from topicbus import create_pubsub

    return create_pubsub(on_error=lambda e, topic, wildcard: errors.append((e, topic, wildcard)))
