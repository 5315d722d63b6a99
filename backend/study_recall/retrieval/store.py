"""Retrieval store orchestration."""

from __future__ import annotations

import asyncio
import time
from dataclasses import replace
from typing import Any, Sequence

from study_recall.backends.base import PersistenceBackend
from study_recall.core.config import Settings
from study_recall.core.errors import PersistenceError
from study_recall.core.logging import bind, get_logger
from study_recall.core.metrics import (
    CHUNKS_INGESTED,
    DOCUMENTS_INGESTED,
    PERSISTENCE_FAILURES,
    QUERY_LATENCY,
    QUERY_RESULTS,
)
from study_recall.ingest.chunker import ChunkingPolicy
from study_recall.ingest.embeddings import EmbeddingModel
from study_recall.models.entities import ChunkRecord, Document, NewChunk, RetrievedChunk, ScoredChunk
from study_recall.retrieval.locks import CollectionLocks
from study_recall.retrieval.ranker import rank

logger = get_logger(__name__)


class RetrievalStore:
    """Ingests documents into collections and answers similarity queries.

    Every operation is scoped to one collection key. Ingest holds the writer
    side of that collection's lock until the document and all of its chunks
    are persisted; queries hold the reader side, so they see either the whole
    chunk set of a document or none of it.
    """

    def __init__(
        self,
        backend: PersistenceBackend,
        settings: Settings | None = None,
        embedding_model: EmbeddingModel | None = None,
    ) -> None:
        self.backend = backend
        self.settings = settings or Settings()
        self.embedding_model = embedding_model or EmbeddingModel.get(dim=self.settings.embedding_dim)
        self.chunking = ChunkingPolicy(chunk_size=self.settings.chunk_size, overlap=self.settings.overlap)
        self._locks = CollectionLocks()

    async def __aenter__(self) -> "RetrievalStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.backend.aclose()

    async def ingest(
        self,
        collection_key: str,
        document: Document,
        chunking: ChunkingPolicy | None = None,
    ) -> Document:
        """Persist ``document`` and its embedded chunks under ``collection_key``.

        If any chunk batch fails to persist, or the caller cancels midway, the
        document row is deleted again before the error propagates.
        """
        policy = chunking or self.chunking
        windows = policy.windows(document.text)
        batch_size = self.settings.ingest_batch_size
        async with self._locks.write(collection_key):
            document_id = await self._save_document(collection_key, document)
            try:
                for offset in range(0, len(windows), batch_size):
                    batch = [
                        NewChunk(
                            content=window.text,
                            embedding=self.embedding_model.embed(window.text),
                            position=window.ordinal,
                            start_char=window.start_char,
                        )
                        for window in windows[offset : offset + batch_size]
                    ]
                    saved = await self._guarded("save_chunks", self.backend.save_chunks(document_id, batch))
                    if not saved:
                        raise PersistenceError("save_chunks", f"backend rejected chunks for {document_id}")
            except BaseException:
                await self._discard_orphan(document_id)
                raise
        log = bind(logger, collection=collection_key, document_id=document_id)
        if not windows:
            log.warning("Document %s produced no chunks", document.name)
        DOCUMENTS_INGESTED.labels(backend=self.backend.name).inc()
        CHUNKS_INGESTED.labels(backend=self.backend.name).inc(len(windows))
        log.info("Ingested %s (%d chunks)", document.name, len(windows))
        return replace(document, id=document_id, collection_key=collection_key, size_bytes=document.byte_size)

    async def query(
        self,
        collection_key: str,
        text: str,
        k: int | None = None,
        threshold: float | None = None,
    ) -> list[RetrievedChunk]:
        """Rank the chunks of ``collection_key`` against ``text``.

        Uses the backend's native vector search when it has one, otherwise a
        local scan. An empty list means nothing cleared the threshold.
        """
        top_k = self.settings.top_k if k is None else k
        min_score = self.settings.match_threshold if threshold is None else threshold
        if top_k <= 0:
            return []
        query_vector = self.embedding_model.embed(text)
        path = "native" if self.backend.supports_vector_search else "scan"
        start_time = time.perf_counter()
        async with self._locks.read(collection_key):
            if self.backend.supports_vector_search:
                scored = await self._guarded(
                    "vector_search",
                    self.backend.vector_search(collection_key, query_vector, min_score, top_k),
                )
            else:
                chunks = await self._guarded("list_chunks", self.backend.list_chunks(collection_key))
                scored = _scan(query_vector, chunks, min_score, top_k)
        results = [
            _to_result(item)
            for item in scored
            if item.chunk.collection_key == collection_key and item.score > min_score
        ][:top_k]
        QUERY_LATENCY.labels(path=path).observe(time.perf_counter() - start_time)
        QUERY_RESULTS.observe(len(results))
        logger.debug("Query on %s returned %d results via %s", collection_key, len(results), path)
        return results

    async def retrieve(self, collection_key: str, query_text: str) -> list[dict[str, Any]]:
        """Chat-facing lookup: ``documentName``/``content``/``score`` dicts, possibly empty."""
        results = await self.query(collection_key, query_text)
        return [result.to_context() for result in results]

    async def delete(self, document_id: str) -> bool:
        """Delete a document and its chunks; False when the document is unknown."""
        document = await self._guarded("get_document", self.backend.get_document(document_id))
        if document is None:
            return False
        async with self._locks.write(document.collection_key or ""):
            deleted = await self._guarded("delete_document", self.backend.delete_document(document_id))
        if deleted:
            logger.info("Deleted document %s from %s", document_id, document.collection_key)
        return deleted

    async def list_documents(self, collection_key: str) -> list[Document]:
        async with self._locks.read(collection_key):
            return await self._guarded("list_documents", self.backend.list_documents(collection_key))

    async def _save_document(self, collection_key: str, document: Document) -> str:
        # A cancelled caller must not leave behind a row the backend committed anyway.
        save = asyncio.ensure_future(
            self._guarded("save_document", self.backend.save_document(collection_key, document))
        )
        try:
            return await asyncio.shield(save)
        except asyncio.CancelledError:
            document_id = await _settled(save)
            if document_id is not None:
                await self._discard_orphan(document_id)
            raise

    async def _guarded(self, operation: str, call):
        try:
            return await call
        except PersistenceError:
            PERSISTENCE_FAILURES.labels(operation=operation).inc()
            raise

    async def _discard_orphan(self, document_id: str) -> None:
        try:
            await self.backend.delete_document(document_id)
        except PersistenceError:
            logger.exception("Could not remove orphaned document %s", document_id)
        else:
            logger.warning("Rolled back document %s after failed or cancelled ingest", document_id)


def collection_key(exam_type: str, board: str, subject: str) -> str:
    """Build a collection key such as ``class10-cbse-math``."""
    parts = [_slug(part) for part in (exam_type, board, subject)]
    return "-".join(parts)


def format_context(results: Sequence[dict[str, Any]] | Sequence[RetrievedChunk], snippet_chars: int = 500) -> str:
    """Render retrieved chunks as the context block of a chat prompt; empty string when none."""
    if not results:
        return ""
    lines = []
    for result in results:
        if isinstance(result, RetrievedChunk):
            name, content = result.document_name, result.chunk_text
        else:
            name, content = result["documentName"], result["content"]
        lines.append(f"{name}: {content[:snippet_chars]}...")
    body = "\n\n".join(lines)
    return f"\nContext from documents:\n{body}\n\n"


async def _settled(save: "asyncio.Future[str]") -> str | None:
    try:
        return await save
    except PersistenceError:
        logger.warning("save_document failed after the ingest was cancelled", exc_info=True)
        return None


def _slug(value: str) -> str:
    return "_".join(value.strip().lower().split())


def _scan(query_vector: list[float], chunks: list[ChunkRecord], threshold: float, k: int) -> list[ScoredChunk]:
    ranked = rank(query_vector, ((idx, chunk.embedding) for idx, chunk in enumerate(chunks)), threshold, k)
    return [ScoredChunk(chunk=chunks[idx], score=value) for idx, value in ranked]


def _to_result(item: ScoredChunk) -> RetrievedChunk:
    return RetrievedChunk(
        document_id=item.chunk.document_id,
        document_name=item.chunk.document_name,
        chunk_id=item.chunk.id,
        chunk_text=item.chunk.content,
        position=item.chunk.position,
        score=item.score,
    )


__all__ = ["RetrievalStore", "collection_key", "format_context"]
