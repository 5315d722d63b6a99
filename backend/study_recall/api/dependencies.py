"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

from study_recall.backends import create_backend
from study_recall.core.config import Settings, get_settings
from study_recall.ingest.embeddings import EmbeddingModel
from study_recall.retrieval import RetrievalStore

_STORE: RetrievalStore | None = None


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_embedding_model() -> EmbeddingModel:
    settings = get_app_settings()
    return EmbeddingModel.get(dim=settings.embedding_dim)


def get_store() -> RetrievalStore:
    global _STORE
    if _STORE is None:
        settings = get_app_settings()
        _STORE = RetrievalStore(
            backend=create_backend(settings),
            settings=settings,
            embedding_model=get_embedding_model(),
        )
    return _STORE


async def close_store() -> None:
    global _STORE
    if _STORE is not None:
        await _STORE.aclose()
        _STORE = None


__all__ = [
    "get_app_settings",
    "get_embedding_model",
    "get_store",
    "close_store",
]
