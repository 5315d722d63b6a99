"""Pydantic DTOs exposed via API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class DocumentCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    text: str
    mime: str = "text/plain"
    size_bytes: int | None = Field(default=None, ge=0)
    chunk_size: int | None = Field(default=None, ge=1, description="Override the configured window size")
    overlap: int | None = Field(default=None, ge=0, description="Override the configured window overlap")


class DocumentResponse(BaseModel):
    id: str
    name: str
    collection_key: str
    size_bytes: int
    mime: str
    uploaded_at: datetime


class QueryRequest(BaseModel):
    query: str
    k: int | None = Field(default=None, ge=1, le=50)
    threshold: float | None = Field(default=None, ge=-1.0, le=1.0)


class ChunkResult(BaseModel):
    document_id: str
    document_name: str
    chunk_id: str
    chunk_text: str
    position: int
    score: float


class QueryResponse(BaseModel):
    collection_key: str
    results: list[ChunkResult]


class RetrieveRequest(BaseModel):
    query: str


class RetrievedItem(BaseModel):
    documentName: str
    content: str
    score: float


class RetrieveResponse(BaseModel):
    results: list[RetrievedItem]
    context: str


class DeleteResponse(BaseModel):
    status: str
    document_id: str


__all__ = [
    "DocumentCreateRequest",
    "DocumentResponse",
    "QueryRequest",
    "QueryResponse",
    "ChunkResult",
    "RetrieveRequest",
    "RetrievedItem",
    "RetrieveResponse",
    "DeleteResponse",
]
