"""User identity and profile models."""

from pydantic import BaseModel, Field

from learn2go.models.timestamps import UTCDateTime, utc_now


class Identity(BaseModel):
    """Claims of an authenticated session.

    The username is the primary key everywhere; email and locale are
    optional claims supplied at sign-up.
    """

    username: str
    email: str | None = None
    country: str | None = None
    language: str | None = None

    @property
    def cache_key(self) -> str:
        return self.username.lower()


class UserProfile(BaseModel):
    username: str
    email: str
    country: str = "US"
    language: str = "en"
    progress: int = Field(default=0, ge=0, le=100)
    current_level: int = Field(default=1, ge=1)
    badges: list[str] = Field(default_factory=list)
    created_at: UTCDateTime = Field(default_factory=utc_now)
    last_active: UTCDateTime = Field(default_factory=utc_now)
    session_start: UTCDateTime | None = None
    session_end: UTCDateTime | None = None

    @classmethod
    def from_identity(cls, identity: Identity) -> "UserProfile":
        """Build a zero-progress profile from identity claims."""
        now = utc_now()
        return cls(
            username=identity.username,
            email=identity.email or f"{identity.username}@learn2go.demo",
            country=identity.country or "US",
            language=identity.language or "en",
            created_at=now,
            last_active=now,
            session_start=now,
        )
