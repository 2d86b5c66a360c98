"""
Pytest Configuration and Shared Fixtures
=========================================

Common fixtures used across all test modules.

For Developers:
    - Import fixtures by name in test files (pytest auto-discovers conftest.py)
    - HTTP is mocked with the `responses` library; no test hits the network
    - Payload builders live in tests/fixtures/feed_responses.py
    - Add new shared fixtures here, test-specific fixtures in test files
"""

import os

import pytest

from src.lib.feed import ResponseCache
from src.tracker.config import TrackerConfig
from tests.fixtures.feed_responses import T0, make_sample

TEST_API_URL = "https://api.test.local/trends"

# Set default test environment variables at module load time
# This allows test files to import modules that read env vars at import time
os.environ.setdefault("API_URL", TEST_API_URL)


@pytest.fixture(autouse=True)
def reset_env_vars():
    """
    Reset environment variables after each test.

    Ensures tests don't pollute each other's environment.
    """
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def api_url() -> str:
    """Base URL used by fetcher tests."""
    return TEST_API_URL


@pytest.fixture
def cache() -> ResponseCache:
    """Fresh, unbounded response cache."""
    return ResponseCache()


@pytest.fixture
def tracker_config() -> TrackerConfig:
    """Tracker configuration pointing at the mocked API."""
    return TrackerConfig(api_url=TEST_API_URL, retry_attempts=1)


@pytest.fixture
def sample_payload() -> dict:
    """Single sample payload with three tweet ids."""
    return make_sample(T0, tweet_ids=("a", "b", "c"))
