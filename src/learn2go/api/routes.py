"""REST API routes for sessions, learner data, locale and cache control."""

import functools

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, Field

from learn2go.api.sessions import LearnerSession, SessionRegistry, get_registry
from learn2go.errors import AuthenticationError, InvalidUsernameError, Learn2GoError
from learn2go.localization.countries import (
    COUNTRIES,
    get_all_supported_languages,
    get_total_language_count,
)
from learn2go.localization.geolocation import lookup_country
from learn2go.localization.resolver import resolve_locale
from learn2go.localization.translations import get_table

logger = structlog.get_logger()
router = APIRouter(prefix="/api")


class LocaleRequest(BaseModel):
    country: str | None = None
    language: str | None = None
    browser_locale: str | None = None
    use_geolocation: bool = False


class SessionRequest(BaseModel):
    username: str
    sign_up: bool = False
    country: str = "US"
    language: str = "en"


class ProgressRequest(BaseModel):
    lesson_id: str
    score: int | None = Field(default=None, ge=0, le=100)
    answers: list[int] | None = None
    completed: bool = True


def to_http_error(error: Learn2GoError) -> HTTPException:
    """Map an application error onto an HTTP status."""
    if isinstance(error, InvalidUsernameError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, AuthenticationError):
        return HTTPException(status_code=401, detail=str(error))
    return HTTPException(status_code=502, detail=str(error))


def current_session(
    x_username: str | None = Header(default=None),
    registry: SessionRegistry = Depends(get_registry),
) -> LearnerSession:
    """Signed-in session named by the ``X-Username`` header."""
    if not x_username:
        raise HTTPException(status_code=401, detail="X-Username header required")
    session = registry.get(x_username)
    if session is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return session


def session_payload(session: LearnerSession) -> dict:
    cache = session.cache
    return {
        "username": session.identity.username if session.identity else None,
        "state": cache.state.value,
        "progress": cache.progress,
        "error": cache.error,
    }


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/countries")
async def list_countries() -> dict:
    return {
        "countries": [country.model_dump() for country in COUNTRIES],
        "languages": [lang.model_dump() for lang in get_all_supported_languages()],
        "total_languages": get_total_language_count(),
    }


@router.post("/locale/resolve")
async def resolve(
    request: LocaleRequest, registry: SessionRegistry = Depends(get_registry)
) -> dict:
    """Resolve a (country, language) pair the country actually offers."""
    geolocate = None
    if request.use_geolocation:
        settings = registry.settings
        geolocate = functools.partial(
            lookup_country, settings.geolocation_url, settings.geolocation_timeout_seconds
        )
    country, language = await resolve_locale(
        request.country,
        request.language,
        browser_locale=request.browser_locale,
        geolocate=geolocate,
    )
    return {"country": country, "language": language}


@router.get("/translations/{language}")
async def translations(language: str) -> dict:
    return {"language": language, "strings": get_table(language)}


@router.post("/session")
async def start_session(
    request: SessionRequest, registry: SessionRegistry = Depends(get_registry)
) -> dict:
    """Sign in (or sign up) and preload the learner's data."""
    try:
        if request.sign_up:
            session = await registry.sign_up(request.username, request.country, request.language)
        else:
            session = await registry.sign_in(request.username)
    except Learn2GoError as e:
        logger.info("session_rejected", username=request.username, reason=str(e))
        raise to_http_error(e) from e
    return session_payload(session)


@router.delete("/session")
async def end_session(
    session: LearnerSession = Depends(current_session),
    registry: SessionRegistry = Depends(get_registry),
) -> dict:
    await registry.sign_out(session.identity.username)
    return {"status": "signed_out"}


@router.get("/data")
async def get_data(session: LearnerSession = Depends(current_session)) -> dict:
    """Current snapshot plus load state."""
    payload = session_payload(session)
    payload["data"] = session.cache.data.model_dump(mode="json")
    return payload


@router.post("/data/refresh")
async def refresh_data(session: LearnerSession = Depends(current_session)) -> dict:
    await session.cache.refresh()
    payload = session_payload(session)
    payload["data"] = session.cache.data.model_dump(mode="json")
    return payload


@router.post("/progress")
async def submit_progress(
    request: ProgressRequest, session: LearnerSession = Depends(current_session)
) -> dict:
    """Record a quiz result; the score is computed from answers when given."""
    cache = session.cache
    score = request.score
    if request.answers is not None:
        lesson = next((item for item in cache.data.lessons if item.id == request.lesson_id), None)
        if lesson is None:
            raise HTTPException(status_code=404, detail="Lesson not found")
        score = lesson.score_answers(request.answers)
    if score is None:
        raise HTTPException(status_code=400, detail="Either score or answers is required")

    await cache.update_user_progress(request.lesson_id, score, request.completed)
    return {
        "lesson_id": request.lesson_id,
        "score": score,
        "analytics": cache.data.analytics.model_dump(mode="json"),
        "badges": [badge.model_dump(mode="json") for badge in cache.data.badges],
    }


@router.get("/cache/stats")
async def cache_stats(session: LearnerSession = Depends(current_session)) -> dict:
    return session.cache.get_cache_stats()


@router.delete("/cache")
async def clear_cache(session: LearnerSession = Depends(current_session)) -> dict:
    session.cache.clear_cache()
    return {"status": "cleared"}
