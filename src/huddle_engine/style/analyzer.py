"""Derive a writing-style profile from a user's past drafts."""

from __future__ import annotations

import re
from collections import Counter

from huddle_engine.config.constants import DEFAULT_ADDRESS_TERMS, STOPWORDS
from huddle_engine.models.schemas import StyleAnalysis

_SENTENCE = re.compile(r"[^.!?]+[.!?]+")


def analyze_style(drafts: list[str], max_topics: int = 10) -> StyleAnalysis:
    text = " ".join(d for d in drafts if d)
    sentences = _SENTENCE.findall(text)
    words = text.split()
    avg_sentence_length = round(len(words) / len(sentences)) if sentences else 0

    frequencies: Counter[str] = Counter()
    address_counts: Counter[str] = Counter()
    for word in words:
        cleaned = re.sub(r"[^a-z]", "", word.lower())
        if not cleaned:
            continue
        if cleaned in DEFAULT_ADDRESS_TERMS:
            address_counts[cleaned] += 1
        elif cleaned not in STOPWORDS:
            frequencies[cleaned] += 1

    return StyleAnalysis(
        huddle_count=len(drafts),
        avg_sentence_length=avg_sentence_length,
        common_topics=[w for w, _ in frequencies.most_common(max_topics)],
        address_terms=[w for w, _ in address_counts.most_common()],
    )
