"""In-process store used in demo mode (no Supabase configured)."""

import asyncio

import structlog

from learn2go.models.lesson import Lesson, QuizQuestion
from learn2go.models.profile import UserProfile
from learn2go.models.progress import UserProgress
from learn2go.store.base import lesson_sort_key, locale_cascade

logger = structlog.get_logger()


def seed_lessons() -> list[Lesson]:
    """Starter lessons available in demo mode."""
    return [
        Lesson(
            id="us-en-traffic-signals",
            title="Traffic Signals",
            description="What each light means and how to respond",
            content="Red means stop. Yellow means prepare to stop. Green means go when safe.",
            level=1,
            order=1,
            category="signals",
            country="US",
            language="en",
            quiz_questions=[
                QuizQuestion(
                    id="q1",
                    question="What does a red light mean?",
                    options=["Go", "Stop", "Speed up", "Honk"],
                    correct_answer=1,
                    explanation="A red light always means come to a complete stop.",
                ),
                QuizQuestion(
                    id="q2",
                    question="What should you do at a yellow light?",
                    options=["Accelerate", "Prepare to stop", "Ignore it", "Reverse"],
                    correct_answer=1,
                    explanation="Yellow warns that the light is about to turn red.",
                ),
            ],
        ),
        Lesson(
            id="us-en-pedestrian-safety",
            title="Pedestrian Safety",
            description="Sharing the road with people on foot",
            content="Always yield to pedestrians in crosswalks.",
            level=1,
            order=2,
            category="pedestrians",
            country="US",
            language="en",
            quiz_questions=[
                QuizQuestion(
                    id="q1",
                    question="Who has right of way in a marked crosswalk?",
                    options=["Cars", "Pedestrians", "Cyclists", "Nobody"],
                    correct_answer=1,
                    explanation="Drivers must yield to pedestrians in crosswalks.",
                ),
            ],
        ),
        Lesson(
            id="in-en-two-wheelers",
            title="Two-Wheeler Safety",
            description="Helmets and lane discipline",
            content="Helmets are mandatory for riders and pillion passengers.",
            level=1,
            order=1,
            category="two_wheelers",
            country="IN",
            language="en",
            quiz_questions=[
                QuizQuestion(
                    id="q1",
                    question="Who must wear a helmet on a two-wheeler?",
                    options=["Only the rider", "Rider and pillion", "Nobody", "Only children"],
                    correct_answer=1,
                    explanation="Both rider and pillion must wear helmets.",
                ),
            ],
        ),
    ]


class InMemoryStore:
    """Dict-backed store keyed like the hosted tables.

    Args:
        lessons: Initial lesson set (defaults to the demo seed).
    """

    def __init__(self, lessons: list[Lesson] | None = None):
        self._profiles: dict[str, UserProfile] = {}
        self._progress: dict[tuple[str, str], UserProgress] = {}
        self._lessons: list[Lesson] = list(lessons) if lessons is not None else seed_lessons()
        self._lock = asyncio.Lock()

    def add_lessons(self, lessons: list[Lesson]) -> None:
        self._lessons.extend(lessons)

    async def save_profile(self, profile: UserProfile) -> None:
        async with self._lock:
            self._profiles[profile.username.lower()] = profile

    async def fetch_profile(self, username: str) -> UserProfile | None:
        profile = self._profiles.get(username.lower())
        return profile.model_copy(deep=True) if profile else None

    async def fetch_progress(self, username: str, limit: int = 50) -> list[UserProgress]:
        records = [
            p.model_copy() for (user, _), p in self._progress.items()
            if user == username.lower()
        ]
        records.sort(key=lambda p: p.completed_at, reverse=True)
        return records[:limit]

    async def fetch_lessons(self, country: str, language: str, limit: int = 20) -> list[Lesson]:
        for c, lang in locale_cascade(country, language):
            matched = [
                lesson for lesson in self._lessons
                if lesson.country == c and lesson.language == lang
            ]
            if matched:
                matched.sort(key=lesson_sort_key)
                return [lesson.model_copy(deep=True) for lesson in matched[:limit]]
        return []

    async def upsert_progress(self, record: UserProgress) -> None:
        async with self._lock:
            self._progress[(record.username.lower(), record.lesson_id)] = record.model_copy()
        logger.debug("progress_upserted", username=record.username, lesson_id=record.lesson_id)
