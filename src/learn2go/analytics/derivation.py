"""Pure derivation of learner analytics from lessons and progress."""

from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta
from enum import StrEnum

from learn2go.models.lesson import Lesson
from learn2go.models.progress import Analytics, UserProgress

MINUTES_PER_LESSON = 15


class RecencyMode(StrEnum):
    """How ``last_activity`` picks the most recent progress record."""

    TIMESTAMP = "timestamp"  # latest completed_at
    LIST_POSITION = "list_position"  # first record in list order


def completed_records(progress: Sequence[UserProgress]) -> list[UserProgress]:
    return [p for p in progress if p.completed]


def average_score(progress: Sequence[UserProgress]) -> int:
    """Rounded mean score over completed records, 0 when there are none."""
    scores = [p.score for p in completed_records(progress)]
    if not scores:
        return 0
    return round(sum(scores) / len(scores))


def best_score(progress: Sequence[UserProgress]) -> int:
    scores = [p.score for p in completed_records(progress)]
    return max(scores) if scores else 0


def completion_rate(progress: Sequence[UserProgress], total_lessons: int) -> int:
    """Completed lessons as a rounded percentage of loaded lessons.

    Capped at 100: progress may reference lessons outside the loaded set.
    """
    if total_lessons <= 0:
        return 0
    return min(100, round(100 * len(completed_records(progress)) / total_lessons))


def estimate_study_time(completed_count: int) -> str:
    """Rough study time, assuming 15 minutes per completed lesson.

    This is an estimate for display, not a measurement.
    """
    minutes = completed_count * MINUTES_PER_LESSON
    return f"{minutes // 60}h {minutes % 60}m"


def calculate_streak(progress: Sequence[UserProgress], today: date | None = None) -> int:
    """Count consecutive UTC days, ending today, with at least one completion."""
    today = today or datetime.now(UTC).date()
    days = {p.completed_at.date() for p in completed_records(progress)}
    streak = 0
    while today - timedelta(days=streak) in days:
        streak += 1
    return streak


def last_activity(
    progress: Sequence[UserProgress],
    recency: RecencyMode = RecencyMode.TIMESTAMP,
):
    """Timestamp of the most recent progress record, or None."""
    if not progress:
        return None
    if recency == RecencyMode.LIST_POSITION:
        return progress[0].completed_at
    return max(p.completed_at for p in progress)


def compute_analytics(
    lessons: Sequence[Lesson],
    progress: Sequence[UserProgress],
    recency: RecencyMode = RecencyMode.TIMESTAMP,
    today: date | None = None,
) -> Analytics:
    """Derive the full analytics block.

    Args:
        lessons: Lessons currently loaded for the learner's locale.
        progress: The learner's progress records, at most one per lesson.
        recency: Semantics for ``last_activity``.
        today: Reference day for the streak (defaults to today).

    Returns:
        Analytics; callers must recompute after any change to either input.
    """
    completed = completed_records(progress)
    return Analytics(
        total_quizzes=len(completed),
        average_score=average_score(progress),
        best_score=best_score(progress),
        study_time=estimate_study_time(len(completed)),
        completion_rate=completion_rate(progress, len(lessons)),
        total_lessons=len(lessons),
        lessons_completed=len(completed),
        streak=calculate_streak(progress, today),
        last_activity=last_activity(progress, recency),
    )
