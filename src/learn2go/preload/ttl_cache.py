"""Keyed read cache with per-entry expiry."""

import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic_core import to_jsonable_python


@dataclass
class _Entry:
    data: Any
    stored_at: float
    ttl: float


class TTLCache:
    """In-memory cache whose entries expire after their own TTL.

    Args:
        default_ttl: Seconds an entry lives when no TTL is given.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(self, default_ttl: float = 1800.0, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    @staticmethod
    def make_key(name: str, *params: Any) -> str:
        if not params:
            return name
        return "_".join([name, *(str(p) for p in params)])

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at > entry.ttl:
            del self._entries[key]
            return None
        return entry.data

    def set(self, key: str, data: Any, ttl: float | None = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        self._entries[key] = _Entry(data=data, stored_at=self._clock(), ttl=ttl)

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Size, keys and approximate serialized footprint."""
        payload = [to_jsonable_python(e.data) for e in self._entries.values()]
        return {
            "size": len(self._entries),
            "keys": list(self._entries),
            "total_memory": len(json.dumps(payload, default=str)),
        }
