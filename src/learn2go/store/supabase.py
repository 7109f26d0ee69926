"""Supabase (PostgREST) store adapter."""

from typing import Any

import httpx
import structlog

from learn2go.errors import StoreError
from learn2go.models.lesson import Lesson
from learn2go.models.profile import UserProfile
from learn2go.models.progress import UserProgress
from learn2go.store.base import locale_cascade

logger = structlog.get_logger()


def _clean(row: dict[str, Any]) -> dict[str, Any]:
    """Drop NULL columns so model defaults apply."""
    return {k: v for k, v in row.items() if v is not None}


class SupabaseStore:
    """Reads and writes the hosted ``users``, ``lessons`` and ``user_progress`` tables.

    Args:
        url: Supabase project URL.
        anon_key: Anonymous API key.
        client: Optional pre-built HTTP client (tests inject a mock transport).
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        headers = {
            "apikey": anon_key,
            "Authorization": f"Bearer {anon_key}",
        }
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._client.headers.update(headers)

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        try:
            response = await self._client.get(f"{self.base_url}/{table}", params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError(f"select {table}", str(e)) from e
        return response.json() or []

    async def fetch_profile(self, username: str) -> UserProfile | None:
        rows = await self._get("users", {"select": "*", "username": f"eq.{username}"})
        if not rows:
            return None
        return UserProfile.model_validate(_clean(rows[0]))

    async def fetch_progress(self, username: str, limit: int = 50) -> list[UserProgress]:
        rows = await self._get("user_progress", {
            "select": "*",
            "username": f"eq.{username}",
            "order": "completed_at.desc",
            "limit": str(limit),
        })
        return [UserProgress.model_validate(_clean(row)) for row in rows]

    async def fetch_lessons(self, country: str, language: str, limit: int = 20) -> list[Lesson]:
        for c, lang in locale_cascade(country, language):
            rows = await self._get("lessons", {
                "select": "*",
                "country": f"eq.{c}",
                "language": f"eq.{lang}",
                "order": "level.asc,order.asc",
                "limit": str(limit),
            })
            if rows:
                logger.debug("lessons_loaded", country=c, language=lang, count=len(rows))
                return [Lesson.model_validate(_clean(row)) for row in rows]
        return []

    async def upsert_progress(self, record: UserProgress) -> None:
        payload = record.model_dump(mode="json", exclude={"id"})
        try:
            response = await self._client.post(
                f"{self.base_url}/user_progress",
                params={"on_conflict": "username,lesson_id"},
                json=payload,
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError("upsert user_progress", str(e)) from e

    async def save_profile(self, profile: UserProfile) -> None:
        payload = profile.model_dump(mode="json")
        try:
            response = await self._client.post(
                f"{self.base_url}/users",
                params={"on_conflict": "username"},
                json=payload,
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError("upsert users", str(e)) from e
