"""Prometheus metrics instrumentation."""

from __future__ import annotations

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

DOCUMENTS_INGESTED = Counter(
    "srec_documents_ingested_total",
    "Documents ingested",
    labelnames=("backend",),
    registry=REGISTRY,
)

CHUNKS_INGESTED = Counter(
    "srec_chunks_ingested_total",
    "Chunks embedded and persisted",
    labelnames=("backend",),
    registry=REGISTRY,
)

QUERY_LATENCY = Histogram(
    "srec_query_latency_seconds",
    "Latency of retrieval queries",
    labelnames=("path",),
    registry=REGISTRY,
)

QUERY_RESULTS = Histogram(
    "srec_query_results",
    "Number of results returned per query",
    buckets=(0, 1, 2, 3, 5, 8, 13, 21),
    registry=REGISTRY,
)

PERSISTENCE_FAILURES = Counter(
    "srec_persistence_failures_total",
    "Backend operations that raised a persistence error",
    labelnames=("operation",),
    registry=REGISTRY,
)


def metrics_response() -> Response:
    """Return Prometheus metrics as an HTTP response."""
    payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "DOCUMENTS_INGESTED",
    "CHUNKS_INGESTED",
    "QUERY_LATENCY",
    "QUERY_RESULTS",
    "PERSISTENCE_FAILURES",
    "metrics_response",
]
