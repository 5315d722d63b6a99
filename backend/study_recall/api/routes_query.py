"""Query API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from study_recall.api.dependencies import get_store
from study_recall.models.dto import (
    ChunkResult,
    QueryRequest,
    QueryResponse,
    RetrievedItem,
    RetrieveRequest,
    RetrieveResponse,
)
from study_recall.retrieval.store import RetrievalStore, format_context

router = APIRouter()


@router.post(
    "/collections/{collection_key}/query",
    response_model=QueryResponse,
    summary="Rank a collection's chunks against a query",
)
async def run_query(
    collection_key: str,
    request: QueryRequest,
    store: RetrievalStore = Depends(get_store),
) -> QueryResponse:
    results = await store.query(collection_key, request.query, k=request.k, threshold=request.threshold)
    return QueryResponse(
        collection_key=collection_key,
        results=[
            ChunkResult(
                document_id=result.document_id,
                document_name=result.document_name,
                chunk_id=result.chunk_id,
                chunk_text=result.chunk_text,
                position=result.position,
                score=result.score,
            )
            for result in results
        ],
    )


@router.post(
    "/collections/{collection_key}/retrieve",
    response_model=RetrieveResponse,
    summary="Retrieve grounding context for a chat turn",
)
async def retrieve_context(
    collection_key: str,
    request: RetrieveRequest,
    store: RetrievalStore = Depends(get_store),
) -> RetrieveResponse:
    items = await store.retrieve(collection_key, request.query)
    return RetrieveResponse(
        results=[RetrievedItem(**item) for item in items],
        context=format_context(items, snippet_chars=store.settings.snippet_chars),
    )
