"""Embedding utilities.

Embeddings are deterministic lexical fingerprints: every distinct word is
hashed into three slots of a fixed-length vector, weighted by its frequency,
and the result is L2-normalised. Vectors produced here are compared against
ones stored by the browser client, so the tokenizer and hash follow its
arithmetic exactly (32-bit signed wrap-around included).
"""

from __future__ import annotations

import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from study_recall.core.errors import ConfigurationError

DEFAULT_DIM = 384
BOOST_INDEX = 50
BOOST_WEIGHT = 2.0
SLOT_STRIDE = 13
SLOT_COUNT = 3
MIN_WORD_LENGTH = 3
BOOST_TERMS = frozenset({"equation", "formula", "theorem", "solve", "calculate", "proof"})

# Whitespace as the browser client sees it (ECMAScript \s), not Python's str.isspace().
_SPACE_CHARS = "\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
_STRIP_RE = re.compile(f"[^A-Za-z0-9_{_SPACE_CHARS}]")
_SPLIT_RE = re.compile(f"[{_SPACE_CHARS}]+")


@dataclass(slots=True)
class EmbeddingBatch:
    vectors: list[list[float]]
    model: str
    dim: int


class EmbeddingModel:
    """Hashed embedding model with deterministic output."""

    _instances: dict[tuple[str, int], "EmbeddingModel"] = {}

    def __init__(self, model_name: str = "lexical-hash", dim: int = DEFAULT_DIM) -> None:
        if dim < 1:
            raise ConfigurationError(f"embedding dimension must be positive, got {dim}")
        self.model_name = model_name
        self._dim = dim

    @classmethod
    def get(cls, model_name: str = "lexical-hash", dim: int = DEFAULT_DIM) -> "EmbeddingModel":
        key = (model_name, dim)
        if key not in cls._instances:
            cls._instances[key] = EmbeddingModel(model_name=model_name, dim=dim)
        return cls._instances[key]

    @property
    def dim(self) -> int:
        return self._dim

    def embed(self, text: str) -> list[float]:
        return embed(text, self._dim)

    def encode(self, texts: Iterable[str]) -> EmbeddingBatch:
        vectors = [embed(text, self._dim) for text in texts]
        return EmbeddingBatch(vectors=vectors, model=self.model_name, dim=self._dim)


def embed(text: str, dimension: int = DEFAULT_DIM) -> list[float]:
    """Return the normalised fingerprint of ``text``.

    Returns the all-zero vector when no word survives tokenization.
    """
    if dimension < 1:
        raise ConfigurationError(f"embedding dimension must be positive, got {dimension}")
    vector = [0.0] * dimension
    frequencies = Counter(tokenize(text))
    for word, freq in frequencies.items():
        base = hash_word(word) % dimension
        for rank in range(SLOT_COUNT):
            vector[(base + rank * SLOT_STRIDE) % dimension] += freq * (1 / (rank + 1))
        if word in BOOST_TERMS:
            vector[BOOST_INDEX % dimension] += BOOST_WEIGHT * freq
    _normalize(vector)
    return vector


def tokenize(text: str) -> list[str]:
    """Lowercase, drop punctuation, split on whitespace, keep words longer than two chars."""
    cleaned = _STRIP_RE.sub("", text.lower())
    return [word for word in _SPLIT_RE.split(cleaned) if len(word) >= MIN_WORD_LENGTH]


def hash_word(word: str) -> int:
    """31-multiplier rolling hash in 32-bit signed arithmetic, made non-negative."""
    value = 0
    for char in word:
        value = _to_int32((value << 5) - value + ord(char))
    return abs(value)


def norm(vector: Iterable[float]) -> float:
    return math.sqrt(sum(value * value for value in vector))


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _normalize(vector: list[float]) -> None:
    magnitude = norm(vector)
    if magnitude == 0:
        return
    for idx, value in enumerate(vector):
        vector[idx] = value / magnitude


__all__ = ["EmbeddingModel", "EmbeddingBatch", "embed", "tokenize", "hash_word", "norm"]
