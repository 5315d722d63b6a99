"""FastAPI application setup for Study Recall."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from study_recall.api.dependencies import close_store, get_app_settings, get_store
from study_recall.api.routes_documents import router as documents_router
from study_recall.api.routes_query import router as query_router
from study_recall.core.errors import ConfigurationError, PersistenceError
from study_recall.core.logging import configure_logging, get_logger
from study_recall.core.metrics import metrics_response

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Build the retrieval store on startup and release the backend on shutdown."""
    get_app_settings()
    get_store()
    yield
    await close_store()


app = FastAPI(
    title="Study Recall",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

app.include_router(documents_router, prefix="", tags=["documents"])
app.include_router(query_router, prefix="", tags=["query"])


@app.exception_handler(PersistenceError)
async def persistence_error_handler(_request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error("Backend failure during %s: %s", exc.operation, exc.detail)
    return JSONResponse(
        status_code=503,
        content={"detail": str(exc), "operation": exc.operation, "retryable": exc.retryable},
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(_request: Request, exc: ConfigurationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/health", tags=["admin"])
def health() -> dict[str, object]:
    """Simple liveness check that also reports which backend is serving."""
    return {"ok": True, "backend": get_store().backend.name}


@app.get("/metrics", tags=["admin"])
def metrics() -> Response:
    return metrics_response()
