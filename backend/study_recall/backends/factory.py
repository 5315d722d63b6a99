"""Backend selection."""

from __future__ import annotations

import logging

from study_recall.backends.base import PersistenceBackend
from study_recall.backends.memory import MemoryBackend
from study_recall.backends.supabase import SupabaseBackend
from study_recall.core.config import Settings
from study_recall.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


def create_backend(settings: Settings) -> PersistenceBackend:
    """Return the remote backend when credentials are configured, else the in-memory one.

    A missing remote configuration is logged, never raised: callers get a
    backend with the same interface either way.
    """
    try:
        return _remote_backend(settings)
    except ConfigurationError as exc:
        logger.warning("Falling back to in-memory store: %s", exc)
        return MemoryBackend()


def _remote_backend(settings: Settings) -> SupabaseBackend:
    if not settings.remote_configured:
        raise ConfigurationError("supabase_url and supabase_key are not configured")
    logger.info("Using Supabase backend at %s", settings.supabase_url)
    return SupabaseBackend(
        url=settings.supabase_url or "",
        api_key=settings.supabase_key or "",
        timeout=settings.request_timeout,
    )


__all__ = ["create_backend"]
