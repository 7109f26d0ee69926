"""Tests for analytics derivation and badges."""

from datetime import UTC, date, datetime

import pytest

from learn2go.analytics.badges import earned_badge_ids, generate_badges
from learn2go.analytics.derivation import (
    RecencyMode,
    average_score,
    best_score,
    calculate_streak,
    completion_rate,
    compute_analytics,
    estimate_study_time,
    last_activity,
)
from learn2go.analytics.refresh import with_derived
from learn2go.models.lesson import Lesson
from learn2go.models.profile import Identity, UserProfile
from learn2go.models.progress import UserProgress
from learn2go.models.snapshot import PreloadedData


def _lesson(lesson_id: str, generated: bool = False) -> Lesson:
    return Lesson(id=lesson_id, title=lesson_id, generated=generated)


def _day(day: int, hour: int = 0) -> datetime:
    return datetime(2026, 3, day, hour, tzinfo=UTC)


def _record(lesson_id: str, score: int, when: datetime, completed: bool = True) -> UserProgress:
    return UserProgress(
        id=f"alice-{lesson_id}",
        username="alice",
        lesson_id=lesson_id,
        completed=completed,
        score=score,
        completed_at=when,
    )


class TestScores:
    def test_average_is_rounded_mean(self):
        progress = [
            _record("a", 80, _day(1)),
            _record("b", 85, _day(2)),
            _record("c", 90, _day(3)),
        ]
        assert average_score(progress) == 85

    def test_average_rounds(self):
        progress = [_record("a", 70, _day(1)), _record("b", 75, _day(2))]
        assert average_score(progress) == round(72.5)

    def test_empty_progress(self):
        assert average_score([]) == 0
        assert best_score([]) == 0

    def test_incomplete_records_ignored(self):
        progress = [
            _record("a", 40, _day(1)),
            _record("b", 100, _day(2), completed=False),
        ]
        assert best_score(progress) == 40
        assert average_score(progress) == 40


class TestCompletionRate:
    def test_zero_without_lessons(self):
        assert completion_rate([_record("a", 90, _day(1))], 0) == 0

    def test_all_completed(self):
        progress = [_record("a", 90, _day(1)), _record("b", 70, _day(2))]
        assert completion_rate(progress, 2) == 100

    def test_partial(self):
        assert completion_rate([_record("a", 90, _day(1))], 3) == 33

    def test_capped_at_100(self):
        progress = [_record("a", 90, _day(1)), _record("b", 70, _day(2))]
        assert completion_rate(progress, 1) == 100


class TestStudyTimeAndStreak:
    @pytest.mark.parametrize("count, expected", [(0, "0h 0m"), (1, "0h 15m"), (5, "1h 15m")])
    def test_study_time_estimate(self, count, expected):
        assert estimate_study_time(count) == expected

    def test_streak_counts_consecutive_days_ending_today(self):
        progress = [
            _record("a", 90, _day(10, 9)),
            _record("b", 90, _day(9, 18)),
            _record("c", 90, _day(7, 12)),
        ]
        assert calculate_streak(progress, today=date(2026, 3, 10)) == 2

    def test_streak_zero_without_activity_today(self):
        progress = [_record("a", 90, _day(9))]
        assert calculate_streak(progress, today=date(2026, 3, 10)) == 0


class TestLastActivity:
    def test_timestamp_mode_picks_latest(self):
        progress = [
            _record("a", 90, _day(1)),
            _record("b", 90, _day(5)),
        ]
        assert last_activity(progress, RecencyMode.TIMESTAMP) == _day(5)

    def test_list_position_mode_picks_first(self):
        progress = [
            _record("a", 90, _day(1)),
            _record("b", 90, _day(5)),
        ]
        assert last_activity(progress, RecencyMode.LIST_POSITION) == _day(1)

    def test_local_record_compares_with_stored_row(self):
        stored = UserProgress.model_validate({
            "id": "alice-a", "username": "alice", "lesson_id": "a",
            "completed_at": "2025-06-25T10:00:00.123+00:00",
        })
        local = UserProgress.for_lesson("alice", "b", 90, True)

        assert last_activity([stored, local]) == local.completed_at

    def test_none_without_progress(self):
        assert last_activity([]) is None


class TestComputeAnalytics:
    def test_single_perfect_quiz(self):
        analytics = compute_analytics(
            [_lesson("a")], [_record("a", 100, _day(1))], today=date(2026, 3, 1)
        )

        assert analytics.total_quizzes == 1
        assert analytics.average_score == 100
        assert analytics.best_score == 100
        assert analytics.completion_rate == 100
        assert analytics.lessons_completed == 1
        assert analytics.total_lessons == 1
        assert analytics.study_time == "0h 15m"
        assert analytics.streak == 1

    def test_empty(self):
        analytics = compute_analytics([], [])

        assert analytics.total_quizzes == 0
        assert analytics.completion_rate == 0
        assert analytics.last_activity is None


class TestBadges:
    def test_nothing_earned_without_progress(self):
        badges = generate_badges([_lesson("a")], [])

        assert len(badges) == 6
        assert earned_badge_ids(badges) == []

    def test_first_steps_and_quick_learner(self):
        when = _day(1, 10)
        badges = generate_badges([_lesson("a"), _lesson("b")], [_record("a", 95, when)])
        by_id = {b.id: b for b in badges}

        assert by_id["first_steps"].earned
        assert by_id["first_steps"].earned_at == when
        assert by_id["quick_learner"].earned
        assert not by_id["safety_expert"].earned

    def test_safety_expert_earned_at_last_completion(self):
        first, last = _day(1), _day(2)
        badges = generate_badges(
            [_lesson("a"), _lesson("b")],
            [_record("b", 50, last), _record("a", 60, first)],
        )
        expert = next(b for b in badges if b.id == "safety_expert")

        assert expert.earned
        assert expert.earned_at == last

    def test_perfectionist_needs_three_perfect_scores(self):
        lessons = [_lesson(x) for x in "abc"]
        two = [_record(x, 100, _day(i + 1)) for i, x in enumerate("ab")]
        three = [_record(x, 100, _day(i + 1)) for i, x in enumerate("abc")]

        assert "perfectionist" not in earned_badge_ids(generate_badges(lessons, two))
        assert "perfectionist" in earned_badge_ids(generate_badges(lessons, three))

    def test_consistent_learner_after_five_lessons(self):
        lessons = [_lesson(str(i)) for i in range(6)]
        progress = [_record(str(i), 60, _day(i + 1)) for i in range(5)]

        assert "consistent" in earned_badge_ids(generate_badges(lessons, progress))

    def test_ai_learner_for_generated_lesson(self):
        lessons = [_lesson("a"), _lesson("gen", generated=True)]
        progress = [_record("gen", 70, _day(1))]

        assert "ai_learner" in earned_badge_ids(generate_badges(lessons, progress))


class TestWithDerived:
    def test_profile_totals_follow_analytics(self):
        profile = UserProfile.from_identity(Identity(username="alice"))
        snapshot = PreloadedData(
            user_profile=profile,
            lessons=[_lesson("a"), _lesson("b")],
            user_progress=[_record("a", 100, _day(1))],
        )

        derived = with_derived(snapshot)

        assert derived.analytics.completion_rate == 50
        assert derived.user_profile.progress == 50
        assert derived.user_profile.badges == ["first_steps", "quick_learner"]
        assert snapshot.analytics.total_quizzes == 0
