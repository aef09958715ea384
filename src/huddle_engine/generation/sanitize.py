"""Normalise model output so it reads like a message a person typed."""

from __future__ import annotations

import re

from huddle_engine.config.constants import DEFAULT_ADDRESS_TERMS

_REPLACEMENTS: list[tuple[re.Pattern, str]] = [
    (re.compile("[\u201c\u201d]"), '"'),
    (re.compile("[\u2018\u2019]"), "'"),
    (re.compile("\\s*[\u2014\u2013]\\s*"), " "),
    (re.compile("\u2026"), "..."),
    (re.compile("[\u2022\u2023\u25e6\u2219]"), "-"),
    (re.compile("[\u2192\u21d2]"), "->"),
    (re.compile("\u2713"), ""),
    # zero-width and bidi formatting characters
    (re.compile("[\u200b-\u200f\u202a-\u202e\u2066-\u2069]"), ""),
    # control characters except tab and newline
    (re.compile("[\x00-\x08\x0b-\x1f\x7f]"), ""),
    (re.compile("[\u00a7\u00b6\u2020\u2021\u203b]"), ""),
]


def _vocative_comma(terms: list[str]) -> re.Pattern:
    alternatives = "|".join(re.escape(t) for t in sorted(terms, key=len, reverse=True))
    return re.compile(rf",\s+({alternatives})\b(?=\s*[.!?]|\s*$)", re.IGNORECASE)


def sanitize_human_reply(text: str, slang_address_terms: list[str] | None = None) -> str:
    if not text:
        return text

    for pattern, replacement in _REPLACEMENTS:
        text = pattern.sub(replacement, text)

    terms = list(DEFAULT_ADDRESS_TERMS) + [t for t in slang_address_terms or [] if t.strip()]
    text = _vocative_comma(terms).sub(r" \1", text)

    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n[ \t]+", "\n", text)
    text = re.sub(r"[ \t]{2,}", " ", text)
    return text.strip()
