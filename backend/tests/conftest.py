"""Test fixtures for Study Recall."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture(autouse=True)
def reset_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset cached settings, singletons, and SREC_ environment between tests."""
    for key in list(os.environ):
        if key.startswith("SREC_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("SREC_CONFIG", str(tmp_path / "missing.yaml"))

    from study_recall.api import dependencies as deps
    from study_recall.core.config import get_settings
    from study_recall.ingest.embeddings import EmbeddingModel

    EmbeddingModel._instances.clear()
    get_settings.cache_clear()
    deps.get_app_settings.cache_clear()
    deps._STORE = None
    yield
    EmbeddingModel._instances.clear()
    get_settings.cache_clear()
    deps.get_app_settings.cache_clear()
    deps._STORE = None


@pytest.fixture
def settings():
    from study_recall.core.config import Settings

    return Settings()


@pytest.fixture
def memory_store(settings):
    from study_recall.backends import MemoryBackend
    from study_recall.retrieval import RetrievalStore

    return RetrievalStore(backend=MemoryBackend(), settings=settings)


@pytest.fixture(scope="session")
def sample_text() -> str:
    return "The quadratic formula solves equations."
