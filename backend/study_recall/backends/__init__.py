"""Persistence backends for documents and chunks."""

from .base import PersistenceBackend
from .factory import create_backend
from .memory import MemoryBackend
from .supabase import SupabaseBackend

__all__ = [
    "PersistenceBackend",
    "MemoryBackend",
    "SupabaseBackend",
    "create_backend",
]
