"""Static vocabularies shared across retrieval, generation, and style analysis."""

STOPWORDS = frozenset(
    """
    a about above after again against all am an and any are as at be because been
    before being below between both but by can could did do does doing down during
    each few for from further had has have having he her here hers herself him
    himself his how i if in into is it its itself just me more most my myself no nor
    not now of off on once only or other our ours ourselves out over own same she
    should so some such than that the their theirs them themselves then there these
    they this those through to too under until up very was we were what when where
    which while who whom why will with would you your yours yourself yourselves
    im ive dont cant wont yeah yes ok okay hey hi hello thanks thank get got like
    """.split()
)

TONE_INSTRUCTIONS: dict[str, str] = {
    "casual": "Make this more casual and relaxed in tone",
    "professional": "Make this more professional and formal",
    "friendly": "Make this warmer and more friendly",
    "direct": "Make this more direct and to the point",
    "warm": "Make this warmer and more empathetic",
    "confident": "Make this more confident and assertive",
    "curious": "Make this more curious and inquisitive",
}

NO_TONE = "none"

# Casual terms of address recognised in drafts and replies.
DEFAULT_ADDRESS_TERMS = (
    "bro",
    "bruh",
    "dude",
    "man",
    "mate",
    "fam",
    "sis",
    "buddy",
)

# Placeholder text written by upstream extractors that failed.
EXTRACTION_FAILURE_MARKERS = (
    "Unable to extract text",
    "PDF processing failed",
)

EMPTY_SCREENSHOT_PLACEHOLDER = "(no screenshot text was provided)"
