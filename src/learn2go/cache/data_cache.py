"""Learner data cache: preload lifecycle, fallback data and optimistic progress updates."""

import asyncio
import time
from collections.abc import Callable

import structlog

from learn2go.analytics.derivation import RecencyMode
from learn2go.analytics.refresh import with_derived
from learn2go.auth.identity import IdentityProvider
from learn2go.localization.themes import get_country_theme
from learn2go.models.lesson import DEFAULT_GAME, Lesson, QuizQuestion
from learn2go.models.profile import Identity, UserProfile
from learn2go.models.progress import UserProgress
from learn2go.models.snapshot import CacheState, LoadProgress, PreloadedData
from learn2go.preload.fetcher import PRELOAD_STEPS, DataPreloader
from learn2go.preload.reporter import ProgressCallback, ProgressReporter
from learn2go.store.base import RemoteStore

logger = structlog.get_logger()

FALLBACK_LESSON_ID = "fallback-road-safety-basics"


def build_fallback_snapshot(
    identity: Identity, recency: RecencyMode = RecencyMode.TIMESTAMP
) -> PreloadedData:
    """Minimal usable snapshot for when the remote fetch fails."""
    profile = UserProfile.from_identity(identity)
    lesson = Lesson(
        id=FALLBACK_LESSON_ID,
        title="Road Safety Basics",
        description="Core rules every road user should know",
        content=(
            "Always wear your seat belt, obey traffic signals and "
            "give way to pedestrians at crossings."
        ),
        level=1,
        order=1,
        category="basics",
        country=profile.country,
        language=profile.language,
        quiz_questions=[
            QuizQuestion(
                id="q1",
                question="What does a red traffic light mean?",
                options=["Go", "Stop", "Slow down", "Sound the horn"],
                correct_answer=1,
                explanation="A red light means come to a complete stop.",
            ),
        ],
    )
    return with_derived(
        PreloadedData(
            user_profile=profile,
            lessons=[lesson],
            games=[DEFAULT_GAME.model_copy(deep=True)],
            country_theme=get_country_theme(profile.country),
        ),
        recency,
    )


class DataCache:
    """Owns the learner snapshot and every mutation of it.

    States: IDLE (no identity) -> LOADING -> READY, with ERROR as a
    transient state on the way to READY with fallback data. Each load
    gets a generation token; results from an older generation (after a
    logout, refresh or timeout fallback) are discarded.

    Progress updates are optimistic: the local snapshot is always
    updated and the remote write runs detached, its failure only logged.

    Args:
        preloader: Fetcher used to build snapshots.
        store: Store for progress write-back (defaults to the preloader's).
        timeout: Seconds before a fetch is abandoned for fallback data.
        snapshot_ttl: Seconds a committed snapshot may be reused on re-init.
        recency: Semantics for ``analytics.last_activity``.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        preloader: DataPreloader,
        store: RemoteStore | None = None,
        timeout: float = 10.0,
        snapshot_ttl: float = 300.0,
        recency: RecencyMode = RecencyMode.TIMESTAMP,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.preloader = preloader
        self.store = store or preloader.store
        self.timeout = timeout
        self.snapshot_ttl = snapshot_ttl
        self.recency = recency
        self._clock = clock

        self._state = CacheState.IDLE
        self._snapshot = PreloadedData()
        self._progress = 0
        self._error: str | None = None
        self._identity: Identity | None = None
        self._generation = 0
        self._load_task: asyncio.Task | None = None
        self._pending_writes: set[asyncio.Task] = set()
        self._session_snapshots: dict[str, tuple[float, PreloadedData]] = {}
        self._progress_listeners: list[ProgressCallback] = []

    # -- read side -----------------------------------------------------

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def data(self) -> PreloadedData:
        return self._snapshot

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def loading(self) -> bool:
        return self._state == CacheState.LOADING

    @property
    def is_data_ready(self) -> bool:
        return self._state == CacheState.READY

    def add_progress_listener(self, callback: ProgressCallback) -> None:
        """Observe load-phase signals of every subsequent load."""
        self._progress_listeners.append(callback)

    def remove_progress_listener(self, callback: ProgressCallback) -> None:
        if callback in self._progress_listeners:
            self._progress_listeners.remove(callback)

    # -- lifecycle -----------------------------------------------------

    def bind(self, provider: IdentityProvider) -> None:
        """Follow the provider's sign-in/sign-out transitions."""
        provider.subscribe(self._on_auth_change)

    async def _on_auth_change(self, identity: Identity | None) -> None:
        if identity is None:
            self.reset()
        else:
            await self.init(identity)

    async def init(self, identity: Identity) -> PreloadedData:
        """Load data for ``identity`` unless it is already loaded or loading."""
        if self._identity is not None and self._identity.username != identity.username:
            # Direct switch without logout: the previous user's memo stays valid
            self._clear_live_state()

        if self._identity is not None:
            if self._state == CacheState.READY:
                return self._snapshot
            if self._state == CacheState.LOADING and self._load_task is not None:
                return await asyncio.shield(self._load_task)

        self._identity = identity
        return await self._start_load(use_memo=True)

    async def refresh(self) -> PreloadedData:
        """Force a reload from the store even when already READY.

        Pending progress writes are awaited first so the reload sees them.
        """
        await self.flush_writes()
        if self._identity is None:
            logger.debug("refresh_ignored_no_identity")
            return self._snapshot
        logger.info("data_refresh_requested", username=self._identity.username)
        self._session_snapshots.pop(self._identity.cache_key, None)
        self.preloader.invalidate_user(self._identity.username)
        return await self._start_load(use_memo=False)

    def reset(self) -> None:
        """Return to IDLE (logout), discarding the user's snapshot and memo."""
        if self._identity is not None:
            self._session_snapshots.pop(self._identity.cache_key, None)
            self.preloader.invalidate_user(self._identity.username)
            logger.info("data_cache_reset", username=self._identity.username)
        self._clear_live_state()

    def _clear_live_state(self) -> None:
        """Drop the live snapshot and orphan any in-flight load."""
        self._generation += 1
        self._identity = None
        self._state = CacheState.IDLE
        self._snapshot = PreloadedData()
        self._progress = 0
        self._error = None
        self._load_task = None

    async def aclose(self) -> None:
        """Cancel in-flight work; used at shutdown."""
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
        await self.flush_writes()

    async def _start_load(self, use_memo: bool) -> PreloadedData:
        self._generation += 1
        token = self._generation
        self._state = CacheState.LOADING
        self._progress = 0
        self._error = None
        self._load_task = asyncio.create_task(self._run_load(token, self._identity, use_memo))
        return await asyncio.shield(self._load_task)

    async def _run_load(self, token: int, identity: Identity, use_memo: bool) -> PreloadedData:
        reporter = ProgressReporter(PRELOAD_STEPS, lambda signal: self._on_progress(token, signal))

        if use_memo:
            memo = self._session_snapshots.get(identity.cache_key)
            if memo is not None and self._clock() - memo[0] < self.snapshot_ttl:
                logger.info("using_session_snapshot", username=identity.username)
                self._commit(token, memo[1], reporter)
                return self._snapshot

        logger.info("data_load_started", username=identity.username, generation=token)
        try:
            snapshot = await asyncio.wait_for(
                self.preloader.preload(identity, reporter), timeout=self.timeout
            )
        except Exception as e:
            if token != self._generation:
                logger.info("stale_load_failure_ignored", generation=token)
                return self._snapshot
            reason = "timed out" if isinstance(e, TimeoutError) else (str(e) or type(e).__name__)
            logger.warning("data_load_failed", username=identity.username, reason=reason)
            self._state = CacheState.ERROR
            self._error = f"Failed to load data: {reason}"
            self._commit(token, build_fallback_snapshot(identity, self.recency), reporter)
            return self._snapshot

        if token != self._generation:
            logger.info("stale_load_result_discarded", generation=token)
            return self._snapshot

        self._commit(token, snapshot, reporter)
        self._remember(identity, snapshot)
        logger.info("data_load_completed", username=identity.username, generation=token)
        return self._snapshot

    def _commit(self, token: int, snapshot: PreloadedData, reporter: ProgressReporter) -> None:
        if token != self._generation:
            return
        self._snapshot = snapshot
        self._state = CacheState.READY
        reporter.complete()
        self._progress = 100

    def _on_progress(self, token: int, signal: LoadProgress) -> None:
        if token != self._generation:
            return
        self._progress = signal.percentage
        for listener in list(self._progress_listeners):
            try:
                listener(signal)
            except Exception:
                logger.exception("progress_listener_error")

    def _remember(self, identity: Identity, snapshot: PreloadedData) -> None:
        self._session_snapshots[identity.cache_key] = (self._clock(), snapshot)

    # -- progress reconciliation ---------------------------------------

    async def update_user_progress(self, lesson_id: str, score: int, completed: bool) -> None:
        """Record a quiz result locally and sync it to the store in the background.

        Only accepted in READY state with an identity; otherwise a no-op.
        Never raises: the learner's flow must not be blocked by a failed
        update.
        """
        if self._state != CacheState.READY or self._identity is None:
            logger.debug("progress_update_ignored", state=self._state.value, lesson_id=lesson_id)
            return

        identity = self._identity
        try:
            score = max(0, min(100, int(score)))
            record = UserProgress.for_lesson(identity.username, lesson_id, score, completed)

            progress = list(self._snapshot.user_progress)
            for i, existing in enumerate(progress):
                if existing.lesson_id == lesson_id:
                    progress[i] = record
                    break
            else:
                progress.append(record)

            self._snapshot = with_derived(
                self._snapshot.model_copy(update={"user_progress": progress}), self.recency
            )
            if identity.cache_key in self._session_snapshots:
                self._remember(identity, self._snapshot)
            self.preloader.invalidate_user(identity.username)
            logger.info(
                "progress_updated",
                username=identity.username,
                lesson_id=lesson_id,
                score=score,
                completed=completed,
            )
        except Exception:
            logger.exception("progress_update_failed", lesson_id=lesson_id)
            return

        task = asyncio.create_task(self._write_progress(record))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write_progress(self, record: UserProgress) -> None:
        try:
            await self.store.upsert_progress(record)
        except Exception as e:
            logger.warning(
                "progress_write_failed",
                username=record.username,
                lesson_id=record.lesson_id,
                error=str(e),
            )

    async def flush_writes(self) -> None:
        """Wait for detached progress writes to settle."""
        if self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    # -- introspection -------------------------------------------------

    def get_cache_stats(self) -> dict:
        return {
            "state": self._state.value,
            "progress": self._progress,
            "session_snapshots": sorted(self._session_snapshots),
            "pending_writes": len(self._pending_writes),
            "preloader": self.preloader.get_cache_stats(),
        }

    def clear_cache(self) -> None:
        """Drop stored snapshots and read caches; the live snapshot stays."""
        self._session_snapshots.clear()
        self.preloader.clear_cache()
        logger.info("data_cache_cleared")
