"""Remote data fetcher that assembles a full learner snapshot."""

import asyncio

import structlog

from learn2go.analytics.derivation import RecencyMode
from learn2go.analytics.refresh import with_derived
from learn2go.config import Settings
from learn2go.content.generator import ContentGenerator
from learn2go.localization.themes import get_country_theme
from learn2go.models.lesson import DEFAULT_GAME, Game, Lesson
from learn2go.models.profile import Identity, UserProfile
from learn2go.models.progress import UserProgress
from learn2go.models.snapshot import PreloadedData
from learn2go.preload.reporter import ProgressCallback, ProgressReporter
from learn2go.preload.ttl_cache import TTLCache
from learn2go.store.base import RemoteStore

logger = structlog.get_logger()

PRELOAD_STEPS = 6
GENERATED_LESSON_TOPIC = "Pedestrian Safety"


class DataPreloader:
    """Loads profile, progress, lessons and extras for one learner.

    Core reads (profile, progress, lessons) propagate any error so the
    caller can substitute fallback data. Optional enrichment (generated
    lessons and games) runs under its own short timeouts and never fails
    the preload.

    Args:
        store: Remote store adapter.
        settings: Limits, TTLs and timeouts.
        generator: Optional LLM content generator.
        recency: Semantics for ``analytics.last_activity``.
    """

    def __init__(
        self,
        store: RemoteStore,
        settings: Settings | None = None,
        generator: ContentGenerator | None = None,
        recency: RecencyMode = RecencyMode.TIMESTAMP,
    ):
        self.store = store
        self.settings = settings or Settings()
        self.generator = generator
        self.recency = recency
        self.cache = TTLCache(default_ttl=self.settings.cache_default_ttl_seconds)
        self._progress_callback: ProgressCallback | None = None

    def set_progress_callback(self, callback: ProgressCallback | None) -> None:
        self._progress_callback = callback

    async def preload(
        self, identity: Identity, reporter: ProgressReporter | None = None
    ) -> PreloadedData:
        """Fetch and assemble a snapshot.

        Args:
            identity: Authenticated learner.
            reporter: Progress reporter owned by the caller. When omitted a
                reporter bound to the registered callback is created and
                completed here.

        Returns:
            Fully populated snapshot.
        """
        owns_reporter = reporter is None
        if reporter is None:
            reporter = ProgressReporter(PRELOAD_STEPS, self._progress_callback)

        logger.info("preload_started", username=identity.username)

        reporter.step("Loading your profile...")
        profile, progress = await asyncio.gather(
            self._load_profile(identity),
            self._load_progress(identity.username),
        )

        reporter.step("Loading lessons...")
        lessons = await self._load_lessons(profile.country, profile.language)

        reporter.step("Loading interactive content...")
        games = await self._load_games(profile.country, profile.language)

        reporter.step("Enhancing content...")
        lessons = lessons + await self._load_generated_lessons(profile.country, profile.language)

        reporter.step("Calculating progress...")
        snapshot = with_derived(
            PreloadedData(
                user_profile=profile,
                lessons=lessons,
                user_progress=progress,
                games=games,
                country_theme=get_country_theme(profile.country),
            ),
            self.recency,
        )

        reporter.step("Almost ready...")
        if owns_reporter:
            reporter.complete()

        logger.info(
            "preload_completed",
            username=identity.username,
            lessons=len(snapshot.lessons),
            progress_records=len(snapshot.user_progress),
        )
        return snapshot

    def invalidate_user(self, username: str) -> int:
        """Drop cached per-user reads so the next preload hits the store."""
        key = username.lower()
        return sum(
            self.cache.delete(TTLCache.make_key(name, key)) for name in ("profile", "progress")
        )

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("preload_cache_cleared")

    def get_cache_stats(self) -> dict:
        return self.cache.stats()

    async def _load_profile(self, identity: Identity) -> UserProfile:
        key = TTLCache.make_key("profile", identity.cache_key)
        cached = self.cache.get(key)
        if cached is not None:
            return cached.model_copy(deep=True)

        profile = await self.store.fetch_profile(identity.username)
        if profile is None:
            logger.info("profile_not_found", username=identity.username)
            profile = UserProfile.from_identity(identity)
        self.cache.set(key, profile, self.settings.cache_quick_ttl_seconds)
        return profile.model_copy(deep=True)

    async def _load_progress(self, username: str) -> list[UserProgress]:
        key = TTLCache.make_key("progress", username.lower())
        cached = self.cache.get(key)
        if cached is not None:
            return [p.model_copy() for p in cached]

        progress = await self.store.fetch_progress(username, limit=self.settings.progress_limit)
        self.cache.set(key, progress, self.settings.cache_quick_ttl_seconds)
        return [p.model_copy() for p in progress]

    async def _load_lessons(self, country: str, language: str) -> list[Lesson]:
        key = TTLCache.make_key("lessons", country, language)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        lessons = await self.store.fetch_lessons(
            country, language, limit=self.settings.lesson_limit
        )
        self.cache.set(key, lessons)
        return list(lessons)

    async def _load_games(self, country: str, language: str) -> list[Game]:
        key = TTLCache.make_key("games", country, language)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        games: list[Game] = []
        if self.generator is not None and self.generator.available:
            try:
                game = await asyncio.wait_for(
                    self.generator.generate_game(country, language),
                    timeout=self.settings.game_generation_timeout_seconds,
                )
                games.append(game)
            except Exception as e:
                logger.warning("game_generation_failed", error=str(e) or type(e).__name__)

        if not games:
            games.append(DEFAULT_GAME.model_copy(deep=True))

        self.cache.set(key, games)
        return list(games)

    async def _load_generated_lessons(self, country: str, language: str) -> list[Lesson]:
        if self.generator is None or not self.generator.available:
            return []

        key = TTLCache.make_key("generated_lessons", country, language)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        generated: list[Lesson] = []
        try:
            lesson = await asyncio.wait_for(
                self.generator.generate_lesson(country, language, GENERATED_LESSON_TOPIC, 1),
                timeout=self.settings.lesson_generation_timeout_seconds,
            )
            generated.append(lesson)
        except Exception as e:
            logger.warning("lesson_generation_failed", error=str(e) or type(e).__name__)

        self.cache.set(key, generated, self.settings.cache_generated_ttl_seconds)
        return list(generated)
