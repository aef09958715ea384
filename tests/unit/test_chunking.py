"""Tests for fixed-size document chunking."""

import pytest

from huddle_engine.ingestion.chunker import FixedSizeChunker


def test_chunk_short_text_is_single_chunk():
    chunks = FixedSizeChunker(chunk_size=1000).chunk("o1", "notes.txt", "Short note.", {})
    assert len(chunks) == 1
    assert chunks[0].text == "Short note."
    assert chunks[0].chunk_index == 0
    assert chunks[0].metadata == {"total_chunks": 1, "chunk_size": 11}


def test_chunk_splits_at_fixed_size():
    text = "a" * 2500
    chunks = FixedSizeChunker(chunk_size=1000).chunk("o1", "big.txt", text, {"source": "upload"})
    assert [len(c.text) for c in chunks] == [1000, 1000, 500]
    assert [c.chunk_index for c in chunks] == [0, 1, 2]
    assert all(c.metadata["total_chunks"] == 3 for c in chunks)
    assert all(c.metadata["source"] == "upload" for c in chunks)


def test_chunk_strips_nul_characters():
    chunks = FixedSizeChunker(chunk_size=10).chunk("o1", "x.txt", "ab\x00cd", {})
    assert chunks[0].text == "abcd"


def test_chunk_indices_stay_contiguous_after_blank_pieces():
    text = "x" * 4 + " " * 4 + "y" * 4
    chunks = FixedSizeChunker(chunk_size=4).chunk("o1", "x.txt", text, {})
    assert [c.text for c in chunks] == ["xxxx", "yyyy"]
    assert [c.chunk_index for c in chunks] == [0, 1]


def test_chunk_empty_text():
    assert FixedSizeChunker().chunk("o1", "x.txt", "", {}) == []


def test_chunk_ids_unique():
    chunks = FixedSizeChunker(chunk_size=2).chunk("o1", "x.txt", "abcdefgh", {})
    assert len({c.chunk_id for c in chunks}) == len(chunks)


def test_invalid_chunk_size():
    with pytest.raises(ValueError):
        FixedSizeChunker(chunk_size=0)
