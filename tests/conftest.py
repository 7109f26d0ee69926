"""Shared fixtures."""

import pytest

from learn2go.config import Settings
from learn2go.models.profile import Identity
from learn2go.preload.fetcher import DataPreloader
from learn2go.store.memory import InMemoryStore


@pytest.fixture
def settings():
    return Settings(
        supabase_url=None,
        supabase_anon_key=None,
        openai_api_key=None,
        preload_timeout_seconds=1.0,
        lesson_generation_timeout_seconds=0.2,
        game_generation_timeout_seconds=0.2,
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def preloader(store, settings):
    return DataPreloader(store, settings)


@pytest.fixture
def alice():
    return Identity(username="alice", country="IN", language="te")
