"""In-process volatile backend."""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from study_recall.backends.base import PersistenceBackend
from study_recall.core.errors import PersistenceError
from study_recall.models.entities import ChunkRecord, Document, NewChunk
from study_recall.utils.ids import new_id


class MemoryBackend(PersistenceBackend):
    """Dictionary-backed store used when no remote backend is configured.

    State lives only as long as the process. No native vector search, so the
    retrieval store ranks ``list_chunks`` results itself.
    """

    name = "memory"
    supports_vector_search = False

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._chunks: dict[str, list[ChunkRecord]] = {}

    async def save_document(self, collection_key: str, document: Document) -> str:
        document_id = new_id("doc")
        self._documents[document_id] = replace(document, id=document_id, collection_key=collection_key)
        self._chunks[document_id] = []
        return document_id

    async def save_chunks(self, document_id: str, chunks: Sequence[NewChunk]) -> bool:
        document = self._documents.get(document_id)
        if document is None:
            raise PersistenceError("save_chunks", f"unknown document {document_id}", retryable=False)
        records = [
            ChunkRecord(
                id=new_id("chk"),
                document_id=document_id,
                position=chunk.position,
                content=chunk.content,
                embedding=list(chunk.embedding),
                collection_key=document.collection_key or "",
                document_name=document.name,
            )
            for chunk in chunks
        ]
        # Swap in a new list so concurrent readers never see a partial batch.
        self._chunks[document_id] = self._chunks[document_id] + records
        return True

    async def list_chunks(self, collection_key: str) -> list[ChunkRecord]:
        records: list[ChunkRecord] = []
        for document_id, document in list(self._documents.items()):
            if document.collection_key != collection_key:
                continue
            records.extend(self._chunks.get(document_id, []))
        return records

    async def delete_document(self, document_id: str) -> bool:
        existed = self._documents.pop(document_id, None) is not None
        self._chunks.pop(document_id, None)
        return existed

    async def get_document(self, document_id: str) -> Document | None:
        return self._documents.get(document_id)

    async def list_documents(self, collection_key: str) -> list[Document]:
        documents = [doc for doc in self._documents.values() if doc.collection_key == collection_key]
        return sorted(documents, key=lambda doc: doc.uploaded_at, reverse=True)


__all__ = ["MemoryBackend"]
