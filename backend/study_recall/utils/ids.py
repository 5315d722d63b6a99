"""Identifier helpers."""

from __future__ import annotations

import uuid


def new_id(prefix: str | None = None) -> str:
    """Random UUID4 hex, optionally prefixed as ``<prefix>_<hex>``."""
    base = uuid.uuid4().hex
    return f"{prefix}_{base}" if prefix else base
