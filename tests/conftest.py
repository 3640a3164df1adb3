"""
Shared fixtures for the stats pipeline tests.
"""
import pytest

from config.settings import Settings
from tests.fakes import FailingStore, FakeTime, FakeUpstreamClient, MutableClock


@pytest.fixture
def fake_client():
    return FakeUpstreamClient()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def clock():
    return MutableClock()


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def test_settings():
    return Settings(
        riot_api_key="test-key",
        stats_store_url="sqlite://",
        bulk_dispatch_delay_seconds=0,
        bulk_max_workers=4,
    )
