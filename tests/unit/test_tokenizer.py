"""Tests for the keyword fallback tokenizer."""

from huddle_engine.keyword_search.tokenizer import query_terms, tokenize


def test_tokenize_basic():
    tokens = tokenize("The quick brown fox jumps over the lazy dog")
    assert "quick" in tokens
    assert "brown" in tokens
    assert "fox" in tokens
    # Stopwords removed
    assert "the" not in tokens
    assert "over" not in tokens


def test_tokenize_drops_short_words():
    assert tokenize("go to NY on it") == []


def test_tokenize_punctuation():
    tokens = tokenize("Coffee, tomorrow? Sounds great!")
    assert tokens == ["coffee", "tomorrow", "sounds", "great"]


def test_tokenize_empty():
    assert tokenize("") == []
    assert tokenize("   ") == []


def test_query_terms_first_three_distinct():
    terms = query_terms("coffee coffee tomorrow morning downtown please")
    assert terms == ["coffee", "tomorrow", "morning"]


def test_query_terms_custom_limit():
    assert query_terms("alpha beta gamma delta", max_terms=2) == ["alpha", "beta"]


def test_query_terms_all_stopwords():
    assert query_terms("hey are you there") == []
