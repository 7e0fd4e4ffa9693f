"""Pytest fixtures: a fresh MoodMapService per test with a pinned clock and random source."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from moodmap.config import Settings
from moodmap.main import app
from moodmap.services.moodmap import MoodMapService, get_moodmap_service

START = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FixedRandom(random.Random):
    """random() always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__()
        self._value = value

    def random(self) -> float:
        return self._value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(seed_data_path=None)


@pytest.fixture
def make_service(settings, clock):
    """Factory for services whose random source always returns rng_value."""

    def _make(rng_value: float) -> MoodMapService:
        return MoodMapService(settings=settings, clock=clock, rng=FixedRandom(rng_value))

    return _make


@pytest.fixture
def service(make_service) -> MoodMapService:
    # 0.9 is above the 0.3 volunteer threshold, so requests are unverified.
    return make_service(0.9)


@pytest.fixture
def client(service):
    """Test client whose routes all share the per-test service."""
    app.dependency_overrides[get_moodmap_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
