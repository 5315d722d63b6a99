"""Tests for similarity ranking."""

import pytest

from study_recall.ingest.embeddings import embed
from study_recall.retrieval.ranker import rank, score


def test_score_is_dot_product() -> None:
    assert score([1.0, 0.0, 0.0], [0.6, 0.8, 0.0]) == pytest.approx(0.6)


def test_zero_vector_scores_zero() -> None:
    assert score([0.0, 0.0], [0.6, 0.8]) == 0.0


def test_score_rejects_dimension_mismatch() -> None:
    with pytest.raises(ValueError):
        score([1.0], [1.0, 0.0])


def test_self_similarity_is_maximal() -> None:
    vector = embed("The derivative of a constant is zero")
    assert score(vector, vector) == pytest.approx(1.0)


def test_rank_orders_filters_and_limits() -> None:
    query = [1.0, 0.0]
    candidates = [
        ("low", [0.2, 0.98]),
        ("top", [1.0, 0.0]),
        ("mid", [0.8, 0.6]),
        ("below", [0.0, 1.0]),
    ]
    ranked = rank(query, candidates, threshold=0.1, k=2)
    assert [item[0] for item in ranked] == ["top", "mid"]
    assert all(value > 0.1 for _, value in ranked)


def test_rank_is_stable_on_ties() -> None:
    query = [1.0, 0.0]
    candidates = [("first", [0.5, 0.5]), ("second", [0.5, 0.1]), ("third", [0.5, 0.9])]
    assert [item[0] for item in rank(query, candidates, threshold=0.0, k=5)] == ["first", "second", "third"]


def test_rank_threshold_is_strict() -> None:
    assert rank([1.0, 0.0], [("a", [0.5, 0.0])], threshold=0.5, k=5) == []


def test_rank_empty_and_non_positive_k() -> None:
    assert rank([1.0, 0.0], [], threshold=0.0, k=5) == []
    assert rank([1.0, 0.0], [("a", [1.0, 0.0])], threshold=0.0, k=0) == []


def test_rank_does_not_mutate_candidates() -> None:
    candidates = [("a", [0.6, 0.8]), ("b", [1.0, 0.0])]
    snapshot = [(cid, list(vec)) for cid, vec in candidates]
    rank([1.0, 0.0], candidates, threshold=0.0, k=1)
    assert candidates == snapshot
