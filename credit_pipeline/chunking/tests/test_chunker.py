"""split(): bounds, content preservation and determinism."""
import re

import pytest

from credit_pipeline.chunking.chunker import split


def _squash(text: str) -> str:
    return re.sub(r"\s+", "", text)


def test_short_text_is_single_chunk() -> None:
    chunks = split("hello world", 100)
    assert len(chunks) == 1
    assert chunks[0].index == 0
    assert chunks[0].text == "hello world"


def test_empty_text_is_single_chunk() -> None:
    assert [c.text for c in split("", 10)] == [""]


def test_non_positive_limit_rejected() -> None:
    with pytest.raises(ValueError):
        split("abc", 0)


def test_250k_document_packs_into_three_chunks() -> None:
    paragraphs = ["a" * 49_998] * 4 + ["b" * 50_000]
    text = "\n\n".join(paragraphs)
    assert len(text) == 250_000
    chunks = split(text, 100_000)
    assert len(chunks) == 3
    assert [c.index for c in chunks] == [0, 1, 2]
    assert all(len(c.text) <= 100_000 for c in chunks)
    assert chunks[2].text == "b" * 50_000


def test_oversized_paragraph_splits_on_sentences() -> None:
    sentence = "The account was reported late. "
    text = "Intro paragraph.\n\n" + sentence * 20
    chunks = split(text, 100)
    assert len(chunks) > 1
    assert all(len(c.text) <= 100 for c in chunks)
    assert _squash("".join(c.text for c in chunks)) == _squash(text)


def test_single_long_sentence_is_its_own_chunk() -> None:
    long_sentence = "x" * 150 + "."
    text = f"Short one. {long_sentence} Another short one."
    chunks = split(text, 50)
    assert long_sentence in [c.text for c in chunks]
    assert all(len(c.text) <= 50 or c.text == long_sentence for c in chunks)


def test_content_is_preserved_modulo_boundary_whitespace() -> None:
    text = "\n\n".join(f"Paragraph {i}. It has two sentences! Really?" for i in range(40))
    chunks = split(text, 120)
    assert _squash("".join(c.text for c in chunks)) == _squash(text)
    assert all(len(c.text) <= 120 for c in chunks)


def test_split_is_deterministic() -> None:
    text = "\n\n".join(f"Line {i}. More text here." * 3 for i in range(30))
    assert split(text, 200) == split(text, 200)
