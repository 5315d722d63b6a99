"""Retrieval orchestration components."""

from .locks import CollectionLocks, ReadWriteLock
from .ranker import rank, score
from .store import RetrievalStore, collection_key, format_context

__all__ = [
    "CollectionLocks",
    "ReadWriteLock",
    "RetrievalStore",
    "collection_key",
    "format_context",
    "rank",
    "score",
]
