"""Shared fixtures."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from lingo_quest.config import Settings
from lingo_quest.main import create_app
from lingo_quest.models.profile import GameProfile
from lingo_quest.progression.engine import ProgressionEngine
from lingo_quest.progression.messages import first_option
from lingo_quest.storage.profile_store import InMemoryProfileStore

# A Wednesday, mid-morning
NOW = datetime(2024, 5, 15, 10, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def profile() -> GameProfile:
    return GameProfile(user_id="learner_1", username="Learner")


@pytest.fixture
def engine() -> ProgressionEngine:
    return ProgressionEngine(selector=first_option, clock=lambda: NOW)


@pytest.fixture
def app_settings(tmp_path) -> Settings:
    return Settings(
        project_root=tmp_path,
        mock_mode=True,
        openai_api_key=None,
        app_secret=None,
        storage_backend="memory",
        motivation_seed=7,
    )


@pytest.fixture
def client(app_settings):
    app = create_app(app_settings, store=InMemoryProfileStore())
    with TestClient(app) as c:
        yield c
