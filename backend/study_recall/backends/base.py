"""Persistence backend interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from study_recall.models.entities import ChunkRecord, Document, NewChunk, ScoredChunk


class PersistenceBackend(ABC):
    """Storage for documents and their embedded chunks, partitioned by collection key.

    Implementations raise :class:`~study_recall.core.errors.PersistenceError`
    on read/write failures. Deleting a document must cascade to its chunks.
    """

    name: str = "abstract"
    supports_vector_search: bool = False

    @abstractmethod
    async def save_document(self, collection_key: str, document: Document) -> str:
        """Persist ``document`` under ``collection_key`` and return its id."""

    @abstractmethod
    async def save_chunks(self, document_id: str, chunks: Sequence[NewChunk]) -> bool:
        """Persist a chunk batch for an already saved document."""

    @abstractmethod
    async def list_chunks(self, collection_key: str) -> list[ChunkRecord]:
        """Return every chunk stored under ``collection_key``."""

    async def vector_search(
        self,
        collection_key: str,
        query_embedding: Sequence[float],
        threshold: float,
        k: int,
    ) -> list[ScoredChunk]:
        raise NotImplementedError(f"{self.name} backend has no native vector search")

    @abstractmethod
    async def delete_document(self, document_id: str) -> bool:
        """Delete a document and all of its chunks; False when it did not exist."""

    @abstractmethod
    async def get_document(self, document_id: str) -> Document | None:
        ...

    @abstractmethod
    async def list_documents(self, collection_key: str) -> list[Document]:
        """Documents in ``collection_key``, newest first."""

    async def aclose(self) -> None:
        return None


__all__ = ["PersistenceBackend"]
