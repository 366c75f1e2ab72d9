"""Pytest configuration and fixtures."""

import os

import pytest

from screenflow.agents import FallbackGenerator
from screenflow.core.config import Settings
from screenflow.models import (
    AppFlow,
    Brief,
    ButtonElement,
    FeatureDocument,
    FlowStep,
    Screen,
    ScreenSet,
    TextElement,
)
from screenflow.monitoring import MetricsCollector
from screenflow.parsing import ScreenSetParser
from screenflow.storage import LocalCache, ScreenRepository, SqlScreenStore, create_store_engine


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ["SCREENFLOW_DATABASE_URL"] = "sqlite://"
    os.environ["SCREENFLOW_LOG_LEVEL"] = "DEBUG"
    os.environ["OPENAI_API_KEY"] = "test-api-key"


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Test settings backed by in-memory SQLite and no real delays."""
    return Settings(
        database_url="sqlite://",
        completion_api_key="test-api-key",
        board_api_key="board-key",
        generation_timeout=5.0,
        export_card_delay=0.0,
    )


@pytest.fixture
def metrics():
    """Fresh metrics collector with its own registry."""
    return MetricsCollector()


class FakeSleep:
    """Records requested delays and advances a fake clock instead of sleeping."""

    def __init__(self):
        self.delays: list[float] = []
        self.now = 0.0

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        self.now += delay

    def clock(self) -> float:
        return self.now


@pytest.fixture
def fake_sleep():
    return FakeSleep()


# ============================================================================
# Domain Fixtures
# ============================================================================

@pytest.fixture
def brief():
    return Brief(
        product_name="FitTrack",
        problem_statement="People lose track of their workouts",
        target_user="Gym-goers",
        proposed_solution="A simple workout log",
    )


@pytest.fixture
def document():
    return FeatureDocument(
        id="doc-1",
        title="FitTrack PRD",
        content={
            "title": "FitTrack",
            "features": [
                {"id": "workout_log", "name": "Workout Log"},
                {"id": "progress", "name": "Progress Charts"},
                {"id": "social", "name": "Sharing"},
            ],
        },
    )


@pytest.fixture
def screen_set():
    """Two linked screens and a three-step flow (last step screen-less)."""
    login = Screen(
        parent_document_id="doc-1",
        name="Login Screen",
        description="Sign in",
        feature_id="authentication",
        elements=[
            TextElement(content="Welcome"),
            ButtonElement(content="Login", action="Navigate to Home Screen"),
        ],
    )
    home = Screen(parent_document_id="doc-1", name="Home Screen", elements=[TextElement(content="Home")])
    flow = AppFlow(
        parent_document_id="doc-1",
        steps=[
            FlowStep(description="User logs in", screen_id=login.id, position=0),
            FlowStep(description="User sees home", screen_id=home.id, position=1),
            FlowStep(description="System syncs data", position=2),
        ],
    )
    return ScreenSet(screens=[login, home], app_flow=flow)


@pytest.fixture
def parser():
    return ScreenSetParser()


@pytest.fixture
def fallback_generator():
    return FallbackGenerator()


# ============================================================================
# Storage Fixtures
# ============================================================================

@pytest.fixture
def engine():
    engine = create_store_engine("sqlite://")
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return SqlScreenStore(engine)


@pytest.fixture
def local_cache():
    return LocalCache(max_size=50)


@pytest.fixture
def repository(store, local_cache, metrics):
    return ScreenRepository(store, local_cache, fail_max=3, reset_timeout=60, metrics=metrics)
