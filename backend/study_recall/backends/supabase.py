"""Remote backend speaking the Supabase PostgREST API."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx
import orjson

from study_recall.backends.base import PersistenceBackend
from study_recall.core.errors import PersistenceError
from study_recall.models.entities import ChunkRecord, Document, NewChunk, ScoredChunk
from study_recall.utils.time import parse_timestamp

logger = logging.getLogger(__name__)

DOCUMENTS_TABLE = "documents"
CHUNKS_TABLE = "document_chunks"
SEARCH_RPC = "search_documents"


class SupabaseBackend(PersistenceBackend):
    """Documents and chunks stored in Postgres behind PostgREST.

    Expects a ``documents`` table keyed by ``chat_key``, a ``document_chunks``
    table with a pgvector ``embedding`` column, and a ``search_documents``
    function that ranks chunks of one chat key by cosine similarity.
    """

    name = "supabase"
    supports_vector_search = True

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = url.rstrip("/") + "/rest/v1"
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = headers

    async def save_document(self, collection_key: str, document: Document) -> str:
        payload = {
            "chat_key": collection_key,
            "name": document.name,
            "content": document.text,
            "size": document.byte_size,
            "type": document.mime,
        }
        rows = await self._request(
            "save_document",
            "POST",
            DOCUMENTS_TABLE,
            body=payload,
            prefer="return=representation",
        )
        if not rows:
            raise PersistenceError("save_document", "backend returned no document row", retryable=False)
        return str(rows[0]["id"])

    async def save_chunks(self, document_id: str, chunks: Sequence[NewChunk]) -> bool:
        if not chunks:
            return True
        payload = [
            {
                "document_id": document_id,
                "chunk_index": chunk.position,
                "content": chunk.content,
                "embedding": list(chunk.embedding),
            }
            for chunk in chunks
        ]
        await self._request("save_chunks", "POST", CHUNKS_TABLE, body=payload, prefer="return=minimal")
        return True

    async def list_chunks(self, collection_key: str) -> list[ChunkRecord]:
        params = {
            "select": "id,document_id,chunk_index,content,embedding,documents!inner(name,chat_key)",
            "documents.chat_key": f"eq.{collection_key}",
            "order": "document_id.asc,chunk_index.asc",
        }
        rows = await self._request("list_chunks", "GET", CHUNKS_TABLE, params=params)
        records = []
        for row in rows or []:
            parent = row.get("documents") or {}
            # Joined rows are filtered server side; re-check so a misconfigured
            # view can never leak another collection's chunks.
            if parent.get("chat_key", collection_key) != collection_key:
                continue
            records.append(
                ChunkRecord(
                    id=str(row["id"]),
                    document_id=str(row["document_id"]),
                    position=int(row.get("chunk_index") or 0),
                    content=row["content"],
                    embedding=_parse_vector(row.get("embedding")),
                    collection_key=collection_key,
                    document_name=parent.get("name", ""),
                )
            )
        return records

    async def vector_search(
        self,
        collection_key: str,
        query_embedding: Sequence[float],
        threshold: float,
        k: int,
    ) -> list[ScoredChunk]:
        payload = {
            "query_embedding": list(query_embedding),
            "chat_key_filter": collection_key,
            "match_threshold": threshold,
            "match_count": k,
        }
        rows = await self._request("vector_search", "POST", f"rpc/{SEARCH_RPC}", body=payload)
        results = []
        for row in rows or []:
            row_key = row.get("chat_key", collection_key)
            if row_key != collection_key:
                logger.warning("search_documents returned a row for %s while querying %s", row_key, collection_key)
                continue
            score = float(row.get("similarity", row.get("score", 0.0)))
            chunk = ChunkRecord(
                id=str(row.get("id", "")),
                document_id=str(row.get("document_id", "")),
                position=int(row.get("chunk_index") or 0),
                content=row.get("content", ""),
                embedding=_parse_vector(row.get("embedding")),
                collection_key=row_key,
                document_name=row.get("document_name", ""),
            )
            results.append(ScoredChunk(chunk=chunk, score=score))
        return results

    async def delete_document(self, document_id: str) -> bool:
        await self._request(
            "delete_document",
            "DELETE",
            CHUNKS_TABLE,
            params={"document_id": f"eq.{document_id}"},
            prefer="return=minimal",
        )
        rows = await self._request(
            "delete_document",
            "DELETE",
            DOCUMENTS_TABLE,
            params={"id": f"eq.{document_id}"},
            prefer="return=representation",
        )
        return bool(rows)

    async def get_document(self, document_id: str) -> Document | None:
        rows = await self._request(
            "get_document",
            "GET",
            DOCUMENTS_TABLE,
            params={"select": "*", "id": f"eq.{document_id}"},
        )
        return _row_to_document(rows[0]) if rows else None

    async def list_documents(self, collection_key: str) -> list[Document]:
        rows = await self._request(
            "list_documents",
            "GET",
            DOCUMENTS_TABLE,
            params={"select": "*", "chat_key": f"eq.{collection_key}", "order": "created_at.desc"},
        )
        return [_row_to_document(row) for row in rows or []]

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        body: Any = None,
        params: dict[str, str] | None = None,
        prefer: str | None = None,
    ) -> Any:
        headers = dict(self._headers)
        if prefer:
            headers["Prefer"] = prefer
        content = orjson.dumps(body) if body is not None else None
        url = f"{self.base_url}/{path}"
        try:
            response = await self._client.request(method, url, params=params, content=content, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Supabase %s returned %s", operation, status)
            raise PersistenceError(
                operation,
                f"HTTP {status}: {exc.response.text}",
                retryable=status >= 500 or status == 429,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Supabase %s transport error: %s", operation, exc)
            raise PersistenceError(operation, str(exc)) from exc
        if not response.content:
            return None
        try:
            return orjson.loads(response.content)
        except orjson.JSONDecodeError as exc:
            logger.warning("Supabase %s returned a malformed body", operation)
            raise PersistenceError(operation, f"malformed response body: {exc}") from exc


def _parse_vector(raw: Any) -> list[float]:
    """pgvector columns come back as ``"[0.1,0.2]"`` strings through PostgREST."""
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = orjson.loads(raw)
    return [float(value) for value in raw]


def _row_to_document(row: dict[str, Any]) -> Document:
    return Document(
        id=str(row["id"]),
        name=row.get("name", ""),
        text=row.get("content", ""),
        collection_key=row.get("chat_key"),
        size_bytes=row.get("size"),
        mime=row.get("type") or "text/plain",
        uploaded_at=parse_timestamp(row.get("created_at")),
    )


__all__ = ["SupabaseBackend"]
