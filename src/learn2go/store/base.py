"""Remote store capability consumed by the preloader and data cache."""

from typing import Protocol

from learn2go.localization.countries import DEFAULT_COUNTRY, DEFAULT_LANGUAGE
from learn2go.models.lesson import Lesson
from learn2go.models.profile import UserProfile
from learn2go.models.progress import UserProgress


class RemoteStore(Protocol):
    """Reads and writes against the backing store.

    Any call may raise; adapters do not retry.
    """

    async def fetch_profile(self, username: str) -> UserProfile | None: ...

    async def fetch_progress(self, username: str, limit: int = 50) -> list[UserProgress]: ...

    async def fetch_lessons(
        self, country: str, language: str, limit: int = 20
    ) -> list[Lesson]: ...

    async def upsert_progress(self, record: UserProgress) -> None: ...

    async def save_profile(self, profile: UserProfile) -> None: ...


def locale_cascade(country: str, language: str) -> list[tuple[str, str]]:
    """Locale pairs to try for lessons, most specific first.

    Exact pair, then the country in English, then US English.
    """
    pairs = [(country, language), (country, DEFAULT_LANGUAGE), (DEFAULT_COUNTRY, DEFAULT_LANGUAGE)]
    seen: list[tuple[str, str]] = []
    for pair in pairs:
        if pair not in seen:
            seen.append(pair)
    return seen


def lesson_sort_key(lesson: Lesson) -> tuple[int, int]:
    return lesson.level, lesson.order
