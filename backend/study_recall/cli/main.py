"""CLI entrypoint for Study Recall."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

import requests
import typer

app = typer.Typer(name="srec", help="Study Recall command-line interface")

DEFAULT_HOST = "http://127.0.0.1:8000"


def _resolve_host(override: Optional[str]) -> str:
    if override:
        return override.rstrip('/')
    env_host = os.environ.get("SREC_HOST")
    if env_host:
        return env_host.rstrip('/')
    return DEFAULT_HOST


def _request(method: str, path: str, host: Optional[str] = None, **kwargs) -> requests.Response:
    base = _resolve_host(host)
    url = f"{base}{path}"
    resp = requests.request(method, url, timeout=60, **kwargs)
    if not resp.ok:
        try:
            detail = resp.json()
        except ValueError:
            detail = resp.text
        typer.echo(f"Request failed ({resp.status_code}): {detail}", err=True)
        raise typer.Exit(code=1)
    return resp


@app.command()
def ingest(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Text file to upload"),
    collection: str = typer.Option(..., "--collection", "-c", help="Collection key, e.g. class10-cbse-math"),
    name: Optional[str] = typer.Option(None, "--name", help="Display name (defaults to the file name)"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Upload a text document into a collection."""
    raw = path.expanduser().read_bytes()
    body = {
        "name": name or path.name,
        "text": raw.decode("utf-8", errors="replace"),
        "size_bytes": len(raw),
    }
    resp = _request("POST", f"/collections/{collection}/documents", host=host, json=body)
    typer.echo(json.dumps(resp.json(), indent=2))


@app.command()
def query(
    q: str = typer.Argument(..., help="Query text"),
    collection: str = typer.Option(..., "--collection", "-c", help="Collection key to search"),
    k: Optional[int] = typer.Option(None, "--k", help="Number of results to return"),
    threshold: Optional[float] = typer.Option(None, "--threshold", help="Minimum similarity score"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Query a collection."""
    payload: dict[str, object] = {"query": q}
    if k is not None:
        payload["k"] = k
    if threshold is not None:
        payload["threshold"] = threshold
    resp = _request("POST", f"/collections/{collection}/query", host=host, json=payload)
    typer.echo(json.dumps(resp.json(), indent=2))


@app.command()
def documents(
    collection: str = typer.Option(..., "--collection", "-c", help="Collection key to list"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """List documents in a collection."""
    resp = _request("GET", f"/collections/{collection}/documents", host=host)
    typer.echo(json.dumps(resp.json(), indent=2))


@app.command()
def delete(
    document_id: str = typer.Argument(..., help="Document identifier"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Delete a document and its chunks."""
    resp = _request("DELETE", f"/documents/{document_id}", host=host)
    typer.echo(json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    app()
