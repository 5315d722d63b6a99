"""Tests for the command-line client."""

from pathlib import Path

import pytest
import requests
from typer.testing import CliRunner

from study_recall.cli.main import app

runner = CliRunner()


class _FakeResponse:
    def __init__(self, payload, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code
        self.ok = status_code < 400
        self.text = str(payload)

    def json(self):
        return self._payload


@pytest.fixture
def calls(monkeypatch: pytest.MonkeyPatch) -> list:
    recorded: list = []

    def fake_request(method, url, timeout=None, **kwargs):
        recorded.append((method, url, kwargs))
        if url.endswith("/documents/missing"):
            return _FakeResponse({"detail": "Document not found"}, status_code=404)
        return _FakeResponse({"ok": True})

    monkeypatch.setattr(requests, "request", fake_request)
    return recorded


def test_ingest_posts_file(tmp_path: Path, calls: list) -> None:
    notes = tmp_path / "notes.txt"
    notes.write_text("Laws of motion")
    result = runner.invoke(app, ["ingest", str(notes), "--collection", "class9-cbse-physics"])
    assert result.exit_code == 0, result.output
    method, url, kwargs = calls[0]
    assert method == "POST"
    assert url == "http://127.0.0.1:8000/collections/class9-cbse-physics/documents"
    assert kwargs["json"] == {"name": "notes.txt", "text": "Laws of motion", "size_bytes": 14}


def test_query_passes_options(calls: list) -> None:
    result = runner.invoke(app, ["query", "inertia", "-c", "c1", "--k", "3", "--threshold", "0.2", "--host", "http://x:1/"])
    assert result.exit_code == 0, result.output
    method, url, kwargs = calls[0]
    assert url == "http://x:1/collections/c1/query"
    assert kwargs["json"] == {"query": "inertia", "k": 3, "threshold": 0.2}


def test_failed_request_exits_nonzero(calls: list) -> None:
    result = runner.invoke(app, ["delete", "missing"])
    assert result.exit_code == 1
