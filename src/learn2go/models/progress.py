"""Progress, badge and analytics models."""

from pydantic import BaseModel, Field

from learn2go.models.timestamps import UTCDateTime, utc_now


class UserProgress(BaseModel):
    """Quiz outcome for one (username, lesson_id) pair."""

    id: str
    username: str
    lesson_id: str
    completed: bool = False
    score: int = Field(default=0, ge=0, le=100)
    completed_at: UTCDateTime = Field(default_factory=utc_now)

    @classmethod
    def for_lesson(
        cls, username: str, lesson_id: str, score: int, completed: bool
    ) -> "UserProgress":
        return cls(
            id=f"{username}-{lesson_id}",
            username=username,
            lesson_id=lesson_id,
            completed=completed,
            score=score,
            completed_at=utc_now(),
        )


class Badge(BaseModel):
    """Badge definition joined with the current user's earned state."""

    id: str
    name: str
    description: str
    icon: str
    condition: str
    earned: bool = False
    earned_at: UTCDateTime | None = None


class Analytics(BaseModel):
    """Aggregates derived from lessons and progress; never persisted."""

    total_quizzes: int = 0
    average_score: int = 0
    best_score: int = 0
    # Estimate from completed-lesson count, not measured time
    study_time: str = "0h 0m"
    completion_rate: int = 0
    total_lessons: int = 0
    lessons_completed: int = 0
    streak: int = 0
    last_activity: UTCDateTime | None = None
