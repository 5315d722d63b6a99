"""Internal dataclasses representing persisted entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from study_recall.utils.time import utc_now


@dataclass(slots=True, frozen=True)
class Document:
    """An uploaded piece of study material.

    ``id`` stays ``None`` until a backend assigns one in ``save_document``.
    """

    name: str
    text: str
    collection_key: str | None = None
    id: str | None = None
    size_bytes: int | None = None
    mime: str = "text/plain"
    uploaded_at: datetime = field(default_factory=utc_now)

    @property
    def byte_size(self) -> int:
        if self.size_bytes is not None:
            return self.size_bytes
        return len(self.text.encode("utf-8"))


@dataclass(slots=True, frozen=True)
class NewChunk:
    """Chunk content handed to a backend for persistence."""

    content: str
    embedding: list[float]
    position: int
    start_char: int = 0


@dataclass(slots=True, frozen=True)
class ChunkRecord:
    """Persisted chunk with denormalised attribution metadata."""

    id: str
    document_id: str
    position: int
    content: str
    embedding: list[float]
    collection_key: str
    document_name: str


@dataclass(slots=True, frozen=True)
class ScoredChunk:
    chunk: ChunkRecord
    score: float


@dataclass(slots=True, frozen=True)
class RetrievedChunk:
    """Query result handed back to callers."""

    document_id: str
    document_name: str
    chunk_id: str
    chunk_text: str
    position: int
    score: float

    def to_context(self) -> dict[str, object]:
        return {"documentName": self.document_name, "content": self.chunk_text, "score": self.score}


__all__ = ["Document", "NewChunk", "ChunkRecord", "ScoredChunk", "RetrievedChunk"]
