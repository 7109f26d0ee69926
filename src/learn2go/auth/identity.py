"""Username-only, session-scoped identity."""

import re
from collections.abc import Awaitable, Callable

import structlog

from learn2go.errors import AuthenticationError, InvalidUsernameError
from learn2go.localization.countries import DEFAULT_COUNTRY, DEFAULT_LANGUAGE, get_country
from learn2go.localization.resolver import select_language
from learn2go.models.profile import Identity

logger = structlog.get_logger()

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
_USERNAME_RE = re.compile(r"^[a-z0-9_]+$")

AuthCallback = Callable[[Identity | None], Awaitable[None]]


def normalize_username(username: str) -> str:
    return username.strip().lower()


def validate_username(username: str) -> str:
    """Normalize and validate a username.

    Raises:
        InvalidUsernameError: With a user-facing message.
    """
    name = normalize_username(username)
    if len(name) < USERNAME_MIN_LENGTH:
        raise InvalidUsernameError("Username must be at least 3 characters long")
    if len(name) > USERNAME_MAX_LENGTH:
        raise InvalidUsernameError("Username must be less than 20 characters")
    if not _USERNAME_RE.match(name):
        raise InvalidUsernameError("Username can only contain letters, numbers, and underscores")
    return name


class UserDirectory:
    """Registry of known usernames and their sign-up claims."""

    def __init__(self) -> None:
        self._users: dict[str, Identity] = {}

    def get(self, username: str) -> Identity | None:
        return self._users.get(normalize_username(username))

    def add(self, identity: Identity) -> None:
        self._users[identity.username] = identity

    def __contains__(self, username: str) -> bool:
        return normalize_username(username) in self._users

    def check_availability(self, username: str) -> tuple[bool, str]:
        try:
            name = validate_username(username)
        except InvalidUsernameError as e:
            return False, str(e)
        if name in self._users:
            return False, "Username is already taken"
        return True, "Username is available!"


class IdentityProvider:
    """Holds the current session's identity and announces auth transitions.

    Subscribers are awaited with the new identity on sign-in and with
    None on sign-out.

    Args:
        directory: Shared user registry.
    """

    def __init__(self, directory: UserDirectory | None = None):
        self.directory = directory or UserDirectory()
        self._identity: Identity | None = None
        self._subscribers: list[AuthCallback] = []

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    def subscribe(self, callback: AuthCallback) -> None:
        self._subscribers.append(callback)

    async def sign_up(
        self, username: str, country: str = DEFAULT_COUNTRY, language: str = DEFAULT_LANGUAGE
    ) -> Identity:
        """Register a new username and start a session for it."""
        name = validate_username(username)
        if name in self.directory:
            raise AuthenticationError("Username already exists. Try signing in instead.")

        country_def = get_country(country) or get_country(DEFAULT_COUNTRY)
        identity = Identity(
            username=name,
            email=f"{name}@learn2go.demo",
            country=country_def.code,
            language=select_language(country_def, language),
        )
        self.directory.add(identity)
        logger.info("user_signed_up", username=name, country=identity.country)
        await self._set_identity(identity)
        return identity

    async def sign_in(self, username: str) -> Identity:
        """Start a session for an existing username."""
        name = validate_username(username)
        identity = self.directory.get(name)
        if identity is None:
            raise AuthenticationError("User not found. Please sign up first.")
        logger.info("user_signed_in", username=name)
        await self._set_identity(identity)
        return identity

    async def sign_out(self) -> None:
        if self._identity is None:
            return
        logger.info("user_signed_out", username=self._identity.username)
        await self._set_identity(None)

    async def _set_identity(self, identity: Identity | None) -> None:
        if self._identity is not None and identity is not None:
            if self._identity.username == identity.username:
                return
            # Switching users: announce the sign-out first
            self._identity = None
            await self._notify(None)
        self._identity = identity
        await self._notify(identity)

    async def _notify(self, identity: Identity | None) -> None:
        for callback in self._subscribers:
            try:
                await callback(identity)
            except Exception:
                logger.exception("auth_subscriber_error")
