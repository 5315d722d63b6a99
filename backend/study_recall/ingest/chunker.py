"""Chunking utilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from study_recall.core.errors import ConfigurationError

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_OVERLAP = 200


@dataclass(slots=True, frozen=True)
class ChunkWindow:
    ordinal: int
    start_char: int
    end_char: int
    text: str


@dataclass(slots=True, frozen=True)
class ChunkingPolicy:
    """Character-based sliding window.

    Window ``i`` starts at ``i * (chunk_size - overlap)`` and holds at most
    ``chunk_size`` characters. The last window is truncated to the end of the
    text, and no window starts after one has already reached the end.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    overlap: int = DEFAULT_OVERLAP

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ConfigurationError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.overlap < 0:
            raise ConfigurationError(f"overlap must not be negative, got {self.overlap}")
        if self.chunk_size <= self.overlap:
            raise ConfigurationError(
                f"chunk_size ({self.chunk_size}) must be greater than overlap ({self.overlap})"
            )

    @property
    def step(self) -> int:
        return self.chunk_size - self.overlap

    def windows(self, text: str) -> list[ChunkWindow]:
        return list(self._iter_windows(text))

    def split(self, text: str) -> list[str]:
        return [window.text for window in self._iter_windows(text)]

    def _iter_windows(self, text: str) -> Iterator[ChunkWindow]:
        length = len(text)
        ordinal = 0
        start = 0
        while start < length:
            end = min(start + self.chunk_size, length)
            yield ChunkWindow(ordinal=ordinal, start_char=start, end_char=end, text=text[start:end])
            if end == length:
                break
            ordinal += 1
            start = ordinal * self.step


def split(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE, overlap: int = DEFAULT_OVERLAP) -> list[str]:
    """Split ``text`` into overlapping windows; raises ConfigurationError on a non-advancing window."""
    return ChunkingPolicy(chunk_size=chunk_size, overlap=overlap).split(text)


__all__ = ["ChunkingPolicy", "ChunkWindow", "split", "DEFAULT_CHUNK_SIZE", "DEFAULT_OVERLAP"]
