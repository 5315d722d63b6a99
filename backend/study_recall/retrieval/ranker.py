"""Similarity scoring over pre-normalised embeddings."""

from __future__ import annotations

from typing import Hashable, Iterable, Sequence, TypeVar

CandidateId = TypeVar("CandidateId", bound=Hashable)


def score(a: Sequence[float], b: Sequence[float]) -> float:
    """Dot product of two embeddings.

    Inputs are already unit length, so this is their cosine similarity. No
    re-normalisation happens here: a zero vector scores 0 against anything.
    """
    if len(a) != len(b):
        raise ValueError(f"Vector dimension mismatch: {len(a)} != {len(b)}")
    return sum(x * y for x, y in zip(a, b))


def rank(
    query: Sequence[float],
    candidates: Iterable[tuple[CandidateId, Sequence[float]]],
    threshold: float,
    k: int,
) -> list[tuple[CandidateId, float]]:
    """Return up to ``k`` ``(id, score)`` pairs scoring strictly above ``threshold``.

    Ordered by descending score; equal scores keep their candidate order.
    """
    if k <= 0:
        return []
    scored = [(candidate_id, score(query, vector)) for candidate_id, vector in candidates]
    kept = [item for item in scored if item[1] > threshold]
    kept.sort(key=lambda item: item[1], reverse=True)
    return kept[:k]


__all__ = ["score", "rank"]
