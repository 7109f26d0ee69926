"""Per-learner sessions: one identity provider and one data cache each."""

import functools

import structlog

from learn2go.auth.identity import IdentityProvider, UserDirectory, validate_username
from learn2go.cache.data_cache import DataCache
from learn2go.config import Settings, get_settings
from learn2go.content.generator import ContentGenerator
from learn2go.errors import AuthenticationError
from learn2go.models.profile import Identity, UserProfile
from learn2go.preload.fetcher import DataPreloader
from learn2go.store.base import RemoteStore
from learn2go.store.factory import create_store

logger = structlog.get_logger()


class LearnerSession:
    """Identity provider wired to its data cache."""

    def __init__(self, provider: IdentityProvider, cache: DataCache):
        self.provider = provider
        self.cache = cache
        cache.bind(provider)

    @property
    def identity(self) -> Identity | None:
        return self.provider.identity


class SessionRegistry:
    """Creates and tracks learner sessions keyed by username.

    The preloader (and its read cache) is shared; snapshots are not.

    Args:
        settings: Application settings.
        store: Remote store (defaults to one chosen from settings).
        generator: Optional content generator.
        directory: Known-user registry.
    """

    def __init__(
        self,
        settings: Settings,
        store: RemoteStore | None = None,
        generator: ContentGenerator | None = None,
        directory: UserDirectory | None = None,
    ):
        self.settings = settings
        self.store = store or create_store(settings)
        self.directory = directory or UserDirectory()
        self.preloader = DataPreloader(self.store, settings, generator)
        self._sessions: dict[str, LearnerSession] = {}

    def session_for(self, username: str) -> LearnerSession:
        """Existing session for a username, or a new signed-out one."""
        name = validate_username(username)
        session = self._sessions.get(name)
        if session is None:
            cache = DataCache(
                self.preloader,
                store=self.store,
                timeout=self.settings.preload_timeout_seconds,
                snapshot_ttl=self.settings.snapshot_ttl_seconds,
            )
            session = LearnerSession(IdentityProvider(self.directory), cache)
            self._sessions[name] = session
        return session

    def get(self, username: str) -> LearnerSession | None:
        """Signed-in session for a username, if any."""
        session = self._sessions.get(username.strip().lower())
        if session is None or not session.provider.is_authenticated:
            return None
        return session

    def ensure_available(self, username: str) -> str:
        """Normalized username, provided nobody has signed up with it yet.

        Raises:
            InvalidUsernameError: If the name is malformed.
            AuthenticationError: If the name is already taken.
        """
        name = validate_username(username)
        available, message = self.directory.check_availability(name)
        if not available:
            raise AuthenticationError(message)
        return name

    async def sign_up(self, username: str, country: str, language: str) -> LearnerSession:
        name = self.ensure_available(username)
        session = self.session_for(name)
        identity = await session.provider.sign_up(username, country, language)
        try:
            await self.store.save_profile(UserProfile.from_identity(identity))
        except Exception as e:
            logger.warning("profile_save_failed", username=identity.username, error=str(e))
        return session

    async def sign_in(self, username: str) -> LearnerSession:
        name = validate_username(username)
        if name not in self.directory:
            await self._adopt_remote_user(name)
        session = self.session_for(name)
        try:
            await session.provider.sign_in(name)
        except AuthenticationError:
            self._sessions.pop(name, None)
            raise
        return session

    async def sign_out(self, username: str) -> None:
        session = self._sessions.pop(username.strip().lower(), None)
        if session is None:
            return
        await session.provider.sign_out()
        await session.cache.flush_writes()

    async def aclose(self) -> None:
        for session in list(self._sessions.values()):
            await session.cache.aclose()
        self._sessions.clear()

    async def _adopt_remote_user(self, username: str) -> None:
        """Register a user known to the store but not to this process."""
        try:
            profile = await self.store.fetch_profile(username)
        except Exception as e:
            logger.warning("remote_user_lookup_failed", username=username, error=str(e))
            return
        if profile is not None:
            self.directory.add(Identity(
                username=username,
                email=profile.email,
                country=profile.country,
                language=profile.language,
            ))


@functools.lru_cache
def get_registry() -> SessionRegistry:
    """Process-wide session registry."""
    settings = get_settings()
    generator = ContentGenerator(settings.openai_api_key, settings.generation_model)
    return SessionRegistry(settings, generator=generator)
