"""Tests for the in-memory and Supabase store adapters."""

import json
from datetime import datetime

import httpx
import pytest

from learn2go.errors import StoreError
from learn2go.models.lesson import Lesson
from learn2go.models.profile import Identity, UserProfile
from learn2go.models.progress import UserProgress
from learn2go.store.base import locale_cascade
from learn2go.store.factory import create_store
from learn2go.store.memory import InMemoryStore
from learn2go.store.supabase import SupabaseStore


class TestLocaleCascade:
    def test_exact_then_english_then_us(self):
        assert locale_cascade("IN", "te") == [("IN", "te"), ("IN", "en"), ("US", "en")]

    def test_duplicates_removed(self):
        assert locale_cascade("US", "en") == [("US", "en")]


class TestInMemoryStore:
    async def test_lessons_fall_back_to_country_english(self, store):
        lessons = await store.fetch_lessons("IN", "te")

        assert [lesson.id for lesson in lessons] == ["in-en-two-wheelers"]

    async def test_lessons_fall_back_to_us_english(self, store):
        lessons = await store.fetch_lessons("JP", "ja")

        assert [lesson.id for lesson in lessons] == [
            "us-en-traffic-signals",
            "us-en-pedestrian-safety",
        ]

    async def test_lesson_limit(self, store):
        assert len(await store.fetch_lessons("US", "en", limit=1)) == 1

    async def test_exact_locale_preferred(self):
        store = InMemoryStore([
            Lesson(id="en", title="English", country="IN", language="en"),
            Lesson(id="te", title="Telugu", country="IN", language="te"),
        ])

        assert [lesson.id for lesson in await store.fetch_lessons("IN", "te")] == ["te"]

    async def test_upsert_replaces_by_lesson(self, store):
        await store.upsert_progress(UserProgress.for_lesson("alice", "l1", 50, True))
        await store.upsert_progress(UserProgress.for_lesson("alice", "l1", 90, True))
        await store.upsert_progress(UserProgress.for_lesson("bob", "l1", 10, True))

        progress = await store.fetch_progress("alice")

        assert len(progress) == 1
        assert progress[0].score == 90

    async def test_progress_newest_first(self, store):
        old = UserProgress(
            id="alice-a", username="alice", lesson_id="a", completed_at=datetime(2026, 1, 1)
        )
        new = UserProgress(
            id="alice-b", username="alice", lesson_id="b", completed_at=datetime(2026, 2, 1)
        )
        await store.upsert_progress(old)
        await store.upsert_progress(new)

        assert [p.lesson_id for p in await store.fetch_progress("alice")] == ["b", "a"]
        assert len(await store.fetch_progress("alice", limit=1)) == 1

    async def test_profile_round_trip(self, store):
        assert await store.fetch_profile("alice") is None

        await store.save_profile(UserProfile.from_identity(Identity(username="alice")))

        profile = await store.fetch_profile("Alice")
        assert profile.email == "alice@learn2go.demo"


def _supabase(handler) -> SupabaseStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SupabaseStore("https://project.supabase.co/", "anon-key", client=client)


class TestSupabaseStore:
    async def test_fetch_profile_sends_filters_and_key(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["username"] = request.url.params["username"]
            seen["apikey"] = request.headers["apikey"]
            return httpx.Response(200, json=[{
                "username": "alice",
                "email": "alice@example.com",
                "country": "IN",
                "language": "te",
                "session_start": None,
            }])

        profile = await _supabase(handler).fetch_profile("alice")

        assert seen == {"path": "/rest/v1/users", "username": "eq.alice", "apikey": "anon-key"}
        assert profile.country == "IN"
        assert profile.session_start is None

    async def test_missing_profile(self):
        profile = await _supabase(lambda request: httpx.Response(200, json=[])).fetch_profile("x")

        assert profile is None

    async def test_lessons_cascade(self):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            pair = (request.url.params["country"], request.url.params["language"])
            requested.append(pair)
            if pair == ("eq.IN", "eq.en"):
                return httpx.Response(200, json=[{
                    "id": "in-1",
                    "title": "Helmets",
                    "country": "IN",
                    "language": "en",
                    "quiz_questions": [
                        {"question": "Helmet?", "options": ["Yes", "No"], "correct_answer": 0}
                    ],
                }])
            return httpx.Response(200, json=[])

        lessons = await _supabase(handler).fetch_lessons("IN", "te")

        assert requested == [("eq.IN", "eq.te"), ("eq.IN", "eq.en")]
        assert lessons[0].id == "in-1"
        assert lessons[0].quiz_questions[0].correct_answer == 0

    async def test_progress_ordering_param(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["order"] == "completed_at.desc"
            assert request.url.params["limit"] == "50"
            return httpx.Response(200, json=[{
                "id": "p1",
                "username": "alice",
                "lesson_id": "in-1",
                "completed": True,
                "score": 80,
                "completed_at": "2026-03-01T10:00:00+00:00",
            }])

        progress = await _supabase(handler).fetch_progress("alice")

        assert progress[0].score == 80

    async def test_upsert_uses_conflict_target(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["on_conflict"] = request.url.params["on_conflict"]
            seen["prefer"] = request.headers["prefer"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(201)

        await _supabase(handler).upsert_progress(
            UserProgress.for_lesson("alice", "in-1", 100, True)
        )

        assert seen["on_conflict"] == "username,lesson_id"
        assert "merge-duplicates" in seen["prefer"]
        assert seen["body"]["score"] == 100
        assert "id" not in seen["body"]

    async def test_http_error_raises_store_error(self):
        store = _supabase(lambda request: httpx.Response(503))

        with pytest.raises(StoreError, match="select user_progress"):
            await store.fetch_progress("alice")

        with pytest.raises(StoreError):
            await store.upsert_progress(UserProgress.for_lesson("alice", "l1", 1, True))


class TestCreateStore:
    def test_memory_without_supabase(self, settings):
        assert isinstance(create_store(settings), InMemoryStore)

    def test_supabase_when_configured(self, settings):
        configured = settings.model_copy(update={
            "supabase_url": "https://project.supabase.co",
            "supabase_anon_key": "anon-key",
        })

        assert isinstance(create_store(configured), SupabaseStore)
