"""Store selection from settings."""

import structlog

from learn2go.config import Settings
from learn2go.store.base import RemoteStore
from learn2go.store.memory import InMemoryStore
from learn2go.store.supabase import SupabaseStore

logger = structlog.get_logger()


def create_store(settings: Settings) -> RemoteStore:
    """Supabase when configured, otherwise the in-memory demo store."""
    if settings.supabase_configured:
        logger.info("store_selected", backend="supabase")
        return SupabaseStore(settings.supabase_url, settings.supabase_anon_key)
    logger.warning("store_selected", backend="memory", reason="supabase not configured")
    return InMemoryStore()
