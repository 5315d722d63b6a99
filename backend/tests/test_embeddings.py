"""Tests for embedding utilities."""

import math

import pytest

from study_recall.core.errors import ConfigurationError
from study_recall.ingest.embeddings import EmbeddingModel, embed, hash_word, norm, tokenize


def test_hash_matches_31_multiplier_rolling_hash() -> None:
    assert hash_word("abc") == 96354
    assert hash_word("hello") == 99162322


def test_hash_wraps_like_int32() -> None:
    # Rolls over to exactly -2**31 in 32-bit arithmetic.
    assert hash_word("polygenelubricants") == 2**31


def test_tokenize_drops_short_words_and_punctuation() -> None:
    assert tokenize("The Quadratic formula, solves x = 2!") == ["the", "quadratic", "formula", "solves"]
    assert tokenize("snake_case stays") == ["snake_case", "stays"]


def test_tokenize_uses_browser_whitespace() -> None:
    # Control separators are punctuation to the browser client, BOM is a space.
    assert tokenize("alpha\x1cbeta") == ["alphabeta"]
    assert tokenize("alpha\x85beta") == ["alphabeta"]
    assert tokenize("alpha\ufeffbeta") == ["alpha", "beta"]
    assert tokenize("alpha\u3000beta\u00a0gamma") == ["alpha", "beta", "gamma"]


def test_single_word_slots() -> None:
    vector = embed("hello")
    assert len(vector) == 384
    assert vector[82] == pytest.approx(6 / 7)
    assert vector[95] == pytest.approx(3 / 7)
    assert vector[108] == pytest.approx(2 / 7)
    assert sum(1 for value in vector if value) == 3


@pytest.mark.parametrize(
    "text",
    [
        "The quadratic formula solves equations.",
        "Newton's second law relates force, mass and acceleration.",
        "proof proof proof theorem",
        "x" * 5000,
    ],
)
def test_embedding_is_unit_length(text: str) -> None:
    assert norm(embed(text)) == pytest.approx(1.0, abs=1e-9)


def test_no_weight_yields_zero_vector() -> None:
    vector = embed("a an to ?? !!")
    assert vector == [0.0] * 384
    assert norm(vector) == 0.0
    assert embed("") == [0.0] * 384


def test_embedding_is_deterministic() -> None:
    text = "Photosynthesis converts light energy into chemical energy."
    assert embed(text) == embed(text)
    assert embed(text, 64) == embed(text, 64)


def test_punctuation_and_case_do_not_matter() -> None:
    assert embed("Hello, WORLD!!!") == embed("hello world")


def test_domain_terms_are_boosted() -> None:
    assert embed("hello")[50] == 0.0
    assert embed("proof")[50] > 0.0


def test_boost_counts_every_occurrence() -> None:
    vector = embed("proof proof")
    base = hash_word("proof") % 384
    # 2.0 per occurrence against a first-slot weight equal to the frequency.
    assert vector[50] / vector[base] == pytest.approx(2.0)
    assert vector[50] == pytest.approx(0.8637789008984335)


def test_matches_browser_client_vector() -> None:
    expected = {
        11: 0.10140402531267878,
        26: 0.30421207593803634,
        39: 0.15210603796901817,
        50: 0.6084241518760727,
        52: 0.10140402531267878,
        232: 0.30421207593803634,
        236: 0.30421207593803634,
        245: 0.15210603796901817,
        249: 0.15210603796901817,
        258: 0.10140402531267878,
        262: 0.10140402531267878,
        295: 0.30421207593803634,
        308: 0.15210603796901817,
        321: 0.10140402531267878,
        369: 0.30421207593803634,
        382: 0.15210603796901817,
    }
    vector = embed("The quadratic formula solves equations.")
    assert {idx: value for idx, value in enumerate(vector) if value} == pytest.approx(expected, abs=1e-12)


def test_self_similarity_is_one() -> None:
    vector = embed("Calculate the area of a circle")
    assert math.fsum(x * x for x in vector) == pytest.approx(1.0)


def test_custom_dimension() -> None:
    vector = embed("mitochondria powerhouse cell", dimension=16)
    assert len(vector) == 16
    assert norm(vector) == pytest.approx(1.0)


def test_invalid_dimension_raises() -> None:
    with pytest.raises(ConfigurationError):
        embed("hello", dimension=0)


def test_embedding_model_batch() -> None:
    model = EmbeddingModel.get(dim=128)
    batch = model.encode(["hello", "world"])
    assert len(batch.vectors) == 2
    assert batch.dim == 128
    assert all(len(vec) == model.dim for vec in batch.vectors)
    assert EmbeddingModel.get(dim=128) is model
