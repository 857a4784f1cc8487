"""Shared fixtures for embedkit tests."""

import pytest

from embedkit.testing.helpers import MockProvider, QueryMockProvider, RecordingHookEmitter


@pytest.fixture
def provider():
    """Mock backend producing 8-dimensional patterned vectors."""
    return MockProvider(dimensions=8)


@pytest.fixture
def deterministic_provider():
    """Mock backend whose vectors depend on the text."""
    return MockProvider(dimensions=16, deterministic=True)


@pytest.fixture
def query_provider():
    """Mock backend with a query mode."""
    return QueryMockProvider(dimensions=8, deterministic=True)


@pytest.fixture
def hooks():
    """Hook emitter that keeps every event."""
    return RecordingHookEmitter()
