"""Tests for style analysis of past drafts."""

from huddle_engine.style.analyzer import analyze_style


def test_average_sentence_length():
    analysis = analyze_style(["One two three. Four five six.", "Seven eight!"])
    assert analysis.huddle_count == 2
    assert analysis.avg_sentence_length == 3


def test_common_topics_exclude_stopwords_and_address_terms():
    drafts = ["coffee soon bro?", "coffee tomorrow, bro.", "gym later mate."]
    analysis = analyze_style(drafts)
    assert analysis.common_topics[0] == "coffee"
    assert "bro" not in analysis.common_topics
    assert analysis.address_terms == ["bro", "mate"]


def test_max_topics():
    drafts = [" ".join(chr(97 + i) * 4 for i in range(20)) + "."]
    assert len(analyze_style(drafts).common_topics) == 10
    assert len(analyze_style(drafts, max_topics=3).common_topics) == 3


def test_no_drafts():
    analysis = analyze_style([])
    assert analysis.huddle_count == 0
    assert analysis.avg_sentence_length == 0
    assert analysis.common_topics == []
    assert analysis.address_terms == []
