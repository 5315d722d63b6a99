"""Application configuration handling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, model_validator

ENV_PREFIX = "SREC_"
DEFAULT_CONFIG_PATH = Path("~/.config/study-recall/config.yaml")

_YAML_KEY_MAP: Mapping[tuple[str, ...], str] = {
    ("backend", "supabase_url"): "supabase_url",
    ("backend", "supabase_key"): "supabase_key",
    ("backend", "timeout"): "request_timeout",
    ("embeddings", "dim"): "embedding_dim",
    ("chunking", "chunk_size"): "chunk_size",
    ("chunking", "overlap"): "overlap",
    ("retrieval", "top_k"): "top_k",
    ("retrieval", "match_threshold"): "match_threshold",
    ("retrieval", "snippet_chars"): "snippet_chars",
    ("chunking", "batch_size"): "ingest_batch_size",
}


class Settings(BaseModel):
    """Runtime configuration loaded from YAML file and environment variables."""

    supabase_url: str | None = None
    supabase_key: str | None = None
    request_timeout: float = Field(default=30.0, gt=0)
    embedding_dim: int = Field(default=384, ge=1)
    chunk_size: int = Field(default=1000, ge=1)
    overlap: int = Field(default=200, ge=0)
    top_k: int = Field(default=5, ge=1)
    match_threshold: float = 0.3
    snippet_chars: int = Field(default=500, ge=1)
    ingest_batch_size: int = Field(default=100, ge=1)

    model_config = {
        "validate_assignment": True,
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def _check_window(self) -> "Settings":
        if self.chunk_size <= self.overlap:
            raise ValueError("chunk_size must be greater than overlap")
        return self

    @property
    def remote_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> "Settings":
        """Load YAML config and overlay env vars; fall back to defaults."""
        config_path = cls._resolve_config_path(path)
        data: dict[str, Any] = {}
        if config_path and config_path.exists():
            with config_path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
            data.update(_flatten_yaml(raw))
        data.update(_load_env_overrides())
        return cls(**data)

    @staticmethod
    def _resolve_config_path(path: Path | None) -> Path | None:
        if path is not None:
            return path.expanduser()
        env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
        if env_path:
            return Path(env_path).expanduser()
        resolved_default = DEFAULT_CONFIG_PATH.expanduser()
        return resolved_default if resolved_default.exists() else None


def _flatten_yaml(raw: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> dict[str, Any]:
    """Flatten nested YAML configuration to Settings field names."""
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        next_prefix = prefix + (key,)
        if isinstance(value, Mapping):
            flat.update(_flatten_yaml(value, prefix=next_prefix))
        else:
            mapped_key = _YAML_KEY_MAP.get(next_prefix)
            if mapped_key:
                flat[mapped_key] = value
            elif key in Settings.model_fields:
                flat[key] = value
    return flat


def _load_env_overrides() -> dict[str, Any]:
    """Map environment variables with SREC_ prefix into Settings fields."""
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            overrides[field_name] = value
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor for dependency injection."""
    return Settings.from_yaml()


__all__ = ["Settings", "get_settings"]
