"""Smoke tests for domain models and settings."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from learn2go.config import Settings
from learn2go.models.lesson import Lesson, QuizQuestion
from learn2go.models.profile import Identity, UserProfile
from learn2go.models.progress import UserProgress
from learn2go.models.snapshot import CacheState, LoadProgress, PreloadedData


def _question(correct: int) -> QuizQuestion:
    return QuizQuestion(question="?", options=["a", "b", "c"], correct_answer=correct)


class TestLesson:
    def test_score_answers(self):
        lesson = Lesson(id="l1", title="Signals", quiz_questions=[_question(0), _question(2)])

        assert lesson.score_answers([0, 2]) == 100
        assert lesson.score_answers([0, 1]) == 50
        assert lesson.score_answers([0]) == 50

    def test_lesson_without_questions_scores_full(self):
        assert Lesson(id="l1", title="Reading only").score_answers([]) == 100

    def test_question_id_optional(self):
        assert _question(1).id == ""

    def test_negative_answer_index_rejected(self):
        with pytest.raises(ValidationError):
            QuizQuestion(question="?", options=["a"], correct_answer=-1)


class TestProfileAndProgress:
    def test_identity_cache_key(self):
        assert Identity(username="Alice").cache_key == "alice"

    def test_profile_from_identity(self):
        profile = UserProfile.from_identity(Identity(username="bob", country="DE", language="de"))

        assert profile.email == "bob@learn2go.demo"
        assert profile.country == "DE"
        assert profile.progress == 0
        assert profile.badges == []
        assert profile.session_start is not None

    def test_progress_for_lesson(self):
        record = UserProgress.for_lesson("alice", "l1", 90, True)

        assert record.id == "alice-l1"
        assert record.completed

    def test_timestamps_normalized_to_utc(self):
        naive = UserProgress(
            id="x", username="alice", lesson_id="l1", completed_at="2026-03-01T10:00:00"
        )
        offset = UserProgress(
            id="y", username="alice", lesson_id="l2", completed_at="2026-03-01T15:30:00+05:30"
        )

        assert naive.completed_at == datetime(2026, 3, 1, 10, tzinfo=UTC)
        assert offset.completed_at == naive.completed_at
        assert offset.completed_at.tzinfo is UTC
        assert UserProgress.for_lesson("alice", "l1", 90, True).completed_at.tzinfo is UTC
        assert UserProfile.from_identity(Identity(username="bob")).created_at.tzinfo is UTC

    def test_score_bounds(self):
        with pytest.raises(ValidationError):
            UserProgress(id="x", username="alice", lesson_id="l1", score=120)


class TestSnapshot:
    def test_empty_snapshot(self):
        snapshot = PreloadedData()

        assert snapshot.user_profile is None
        assert snapshot.analytics.completion_rate == 0
        assert snapshot.country_theme.emergency_number == "911"

    def test_progress_for(self):
        record = UserProgress.for_lesson("alice", "l1", 90, True)
        snapshot = PreloadedData(user_progress=[record])

        assert snapshot.progress_for("l1") is record
        assert snapshot.progress_for("l2") is None

    def test_load_progress_bounds(self):
        with pytest.raises(ValidationError):
            LoadProgress(current=1, total=1, message="x", percentage=101)

    def test_cache_state_values(self):
        assert [s.value for s in CacheState] == ["idle", "loading", "ready", "error"]


class TestSettings:
    def test_yaml_values_loaded(self):
        settings = Settings()

        assert settings.lesson_limit == 20
        assert settings.progress_limit == 50
        assert settings.snapshot_ttl_seconds == 300

    def test_init_args_override_yaml(self):
        assert Settings(preload_timeout_seconds=2.5).preload_timeout_seconds == 2.5

    def test_origins_parsed(self):
        settings = Settings(allowed_origins="http://a.test, http://b.test,")

        assert settings.origins == ["http://a.test", "http://b.test"]

    def test_supabase_configured(self):
        assert not Settings(supabase_url=None, supabase_anon_key=None).supabase_configured
        assert not Settings(supabase_url="not-a-url", supabase_anon_key="k").supabase_configured
        assert Settings(
            supabase_url="https://project.supabase.co", supabase_anon_key="k"
        ).supabase_configured
