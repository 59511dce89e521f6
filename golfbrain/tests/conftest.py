"""Shared pytest fixtures for golfbrain tests."""

from __future__ import annotations

from typing import Callable, Iterator, List

import pytest
from fastapi.testclient import TestClient

from golfbrain.app import app
from golfbrain.config import reset_settings_cache
from golfbrain.storage.kv import InMemoryStore
from golfbrain.telemetry.feedback import FeedbackKind
from golfbrain.tracker import GolfTrackerService, get_golf_tracker_service


class StepClock:
    """Deterministic epoch-ms clock that advances one second per call."""

    def __init__(self, start: int = 1_710_000_000_000, step: int = 1000) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        self.now += self.step
        return self.now


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def signals() -> List[FeedbackKind]:
    return []


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def make_service(
    store: InMemoryStore, clock: StepClock, signals: List[FeedbackKind]
) -> Callable[[], GolfTrackerService]:
    def _make() -> GolfTrackerService:
        return GolfTrackerService(
            store, notifier=signals.append, clock=clock, store_key="golf-brain"
        )

    return _make


@pytest.fixture
def service(make_service: Callable[[], GolfTrackerService]) -> GolfTrackerService:
    return make_service()


@pytest.fixture
def client(service: GolfTrackerService):
    app.dependency_overrides[get_golf_tracker_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.pop(get_golf_tracker_service, None)
