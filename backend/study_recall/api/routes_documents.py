"""Document ingest and deletion routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from study_recall.api.dependencies import get_store
from study_recall.ingest.chunker import ChunkingPolicy
from study_recall.models.dto import DeleteResponse, DocumentCreateRequest, DocumentResponse
from study_recall.models.entities import Document
from study_recall.retrieval.store import RetrievalStore

router = APIRouter()


@router.post(
    "/collections/{collection_key}/documents",
    response_model=DocumentResponse,
    status_code=201,
    summary="Ingest a document into a collection",
)
async def ingest_document(
    collection_key: str,
    request: DocumentCreateRequest,
    store: RetrievalStore = Depends(get_store),
) -> DocumentResponse:
    chunking = None
    if request.chunk_size is not None or request.overlap is not None:
        chunking = ChunkingPolicy(
            chunk_size=request.chunk_size or store.chunking.chunk_size,
            overlap=store.chunking.overlap if request.overlap is None else request.overlap,
        )
    document = Document(
        name=request.name,
        text=request.text,
        mime=request.mime,
        size_bytes=request.size_bytes,
    )
    stored = await store.ingest(collection_key, document, chunking=chunking)
    return _to_response(stored)


@router.get(
    "/collections/{collection_key}/documents",
    response_model=list[DocumentResponse],
    summary="List documents in a collection",
)
async def list_documents(collection_key: str, store: RetrievalStore = Depends(get_store)) -> list[DocumentResponse]:
    documents = await store.list_documents(collection_key)
    return [_to_response(document) for document in documents]


@router.delete("/documents/{document_id}", response_model=DeleteResponse, summary="Delete a document and its chunks")
async def delete_document(document_id: str, store: RetrievalStore = Depends(get_store)) -> DeleteResponse:
    if not await store.delete(document_id):
        raise HTTPException(status_code=404, detail="Document not found")
    return DeleteResponse(status="ok", document_id=document_id)


def _to_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        id=document.id or "",
        name=document.name,
        collection_key=document.collection_key or "",
        size_bytes=document.byte_size,
        mime=document.mime,
        uploaded_at=document.uploaded_at,
    )
