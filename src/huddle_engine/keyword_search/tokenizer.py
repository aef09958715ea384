"""Text preprocessing for the keyword fallback search."""

from __future__ import annotations

import re

from huddle_engine.config.constants import STOPWORDS


def tokenize(text: str) -> list[str]:
    """Lowercase, strip punctuation, remove stopwords and words of two characters or fewer."""
    text = text.lower()
    text = re.sub(r"[^\w\s]", " ", text)
    tokens = text.split()
    return [t for t in tokens if t not in STOPWORDS and len(t) > 2]


def query_terms(query: str, max_terms: int = 3) -> list[str]:
    """The first ``max_terms`` distinct tokens of ``query``, in order of appearance."""
    terms: list[str] = []
    for token in tokenize(query):
        if token not in terms:
            terms.append(token)
        if len(terms) == max_terms:
            break
    return terms
