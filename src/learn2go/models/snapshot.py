"""Snapshot, theme and load-state models."""

from enum import StrEnum

from pydantic import BaseModel, Field

from learn2go.models.lesson import Game, Lesson
from learn2go.models.profile import UserProfile
from learn2go.models.progress import Analytics, Badge, UserProgress


class CacheState(StrEnum):
    """Data cache lifecycle states."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class CountryTheme(BaseModel):
    primary_color: str = "#3B82F6"
    secondary_color: str = "#8B5CF6"
    accent_color: str = "#FFFFFF"
    road_signs: list[str] = Field(default_factory=list)
    traffic_rules: list[str] = Field(default_factory=list)
    cultural_elements: list[str] = Field(default_factory=list)
    emergency_number: str = "911"
    currency: str = "$"


class PreloadedData(BaseModel):
    """Everything the learner views need, committed as one unit."""

    user_profile: UserProfile | None = None
    lessons: list[Lesson] = Field(default_factory=list)
    user_progress: list[UserProgress] = Field(default_factory=list)
    badges: list[Badge] = Field(default_factory=list)
    games: list[Game] = Field(default_factory=list)
    analytics: Analytics = Field(default_factory=Analytics)
    country_theme: CountryTheme = Field(default_factory=CountryTheme)

    def progress_for(self, lesson_id: str) -> UserProgress | None:
        for record in self.user_progress:
            if record.lesson_id == lesson_id:
                return record
        return None


class LoadProgress(BaseModel):
    """One coarse load-phase signal."""

    current: int
    total: int
    message: str
    percentage: int = Field(ge=0, le=100)
