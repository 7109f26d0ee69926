"""Badge definitions and earned-state evaluation."""

from collections.abc import Sequence

from learn2go.analytics.derivation import completed_records
from learn2go.models.lesson import Lesson
from learn2go.models.progress import Badge, UserProgress

QUICK_LEARNER_SCORE = 90
CONSISTENT_LESSONS = 5
PERFECT_SCORE_COUNT = 3


def _badge(badge_id: str, name: str, description: str, icon: str, condition: str,
           earned_by: UserProgress | None) -> Badge:
    return Badge(
        id=badge_id,
        name=name,
        description=description,
        icon=icon,
        condition=condition,
        earned=earned_by is not None,
        earned_at=earned_by.completed_at if earned_by else None,
    )


def _nth(records: Sequence[UserProgress], n: int) -> UserProgress | None:
    return records[n - 1] if len(records) >= n else None


def generate_badges(lessons: Sequence[Lesson], progress: Sequence[UserProgress]) -> list[Badge]:
    """Evaluate every badge against the learner's progress.

    ``earned_at`` is the completion time of the record that satisfied the
    condition, in chronological order of completion.
    """
    completed = sorted(completed_records(progress), key=lambda p: p.completed_at)
    high_scores = [p for p in completed if p.score >= QUICK_LEARNER_SCORE]
    perfect = [p for p in completed if p.score == 100]
    generated_ids = {lesson.id for lesson in lessons if lesson.generated}
    ai_completed = [p for p in completed if p.lesson_id in generated_ids]

    all_done = None
    if lessons and len(completed) >= len(lessons):
        all_done = completed[-1]

    return [
        _badge("first_steps", "First Steps", "Complete your first lesson", "🎯",
               "complete_1_lesson", _nth(completed, 1)),
        _badge("quick_learner", "Quick Learner", "Score 90% or higher on a quiz", "⚡",
               "score_90_percent", _nth(high_scores, 1)),
        _badge("consistent", "Consistent Learner", "Complete 5 lessons", "🔥",
               "complete_5_lessons", _nth(completed, CONSISTENT_LESSONS)),
        _badge("safety_expert", "Safety Expert", "Complete all available lessons", "🛡️",
               "complete_all_lessons", all_done),
        _badge("perfectionist", "Perfectionist", "Score 100% on 3 quizzes", "💎",
               "score_100_percent_3_times", _nth(perfect, PERFECT_SCORE_COUNT)),
        _badge("ai_learner", "AI-Powered Learner", "Complete AI-generated content", "🤖",
               "complete_ai_content", _nth(ai_completed, 1)),
    ]


def earned_badge_ids(badges: Sequence[Badge]) -> list[str]:
    return [b.id for b in badges if b.earned]
