"""
Pytest configuration for the Coup bot tests.
"""
import pytest

from src.coup_core.beliefs import BeliefTracker
from tests.factories import FakeProxy

# Configure pytest-asyncio
pytest_plugins = ('pytest_asyncio',)


@pytest.fixture
def proxy():
    return FakeProxy()


@pytest.fixture
def beliefs():
    return BeliefTracker(num_players=4)
