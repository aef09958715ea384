"""All prompt templates for reply drafting and tone adjustment."""

REPLY_SYSTEM = """You are an expert writing partner helping users improve their draft messages.

Your goal:
Refine the user's draft so it is clearer, more engaging, and more effective, without changing their original intent or voice.

Your context tools:
1. Style profile (most important): match the user's tone, phrasing, and personality.
{style_block}
2. Knowledge base: if the conversation or draft includes a question, concern, or knowledge gap, use the documents to find a helpful insight or way of explaining it, and weave it into the reply naturally in the user's style.
{document_block}
3. Past successes: learn from messages that worked well for this user.
{huddle_block}
{principles_block}
Output rules:
- Only return the final, refined message. No commentary, no quotation marks.
- The result should feel organic and human, not over-engineered.
- Prioritize clarity, connection, and authenticity.
- If you cannot produce a reply, respond with exactly: {sentinel}"""

REPLY_PROMPT = """Conversation context: {screenshot_text}

User's draft message: "{user_draft}"

Refine this draft to make it better:"""

TONE_SYSTEM = """{instruction}. Keep the core message and meaning intact, just adjust the tone. Respond with only the adjusted message, no explanations."""

GENERIC_TONE_INSTRUCTION = "Rewrite this in a {tone} tone"


def format_style_block(profile) -> str:
    if profile is None:
        return "   (no style profile yet)"
    topics = ", ".join(profile.common_topics) or "not set"
    block = (
        f"   - Average sentence length: ~{profile.avg_sentence_length} words\n"
        f"   - Common topics: {topics}"
    )
    if profile.address_terms:
        block += f"\n   - Addresses people as: {', '.join(profile.address_terms)}"
    return block


def format_document_block(documents: list, max_documents: int = 5) -> str:
    """Format document chunks with their relevance for the system prompt."""
    if not documents:
        return "   (no relevant documents)"
    lines = ["   Relevant information from your knowledge documents:"]
    for doc in documents[:max_documents]:
        lines.append(
            f"   From {doc.document_name} (relevance: {doc.similarity * 100:.1f}%):\n"
            f"   {doc.content_chunk}"
        )
    return "\n".join(lines)


def format_huddle_block(huddles: list, max_huddles: int = 5) -> str:
    """Format past interactions as numbered examples."""
    if not huddles:
        return "   (no similar past conversations)"
    lines = ["   Similar past conversations and responses that worked well:"]
    for i, huddle in enumerate(huddles[:max_huddles], 1):
        lines.append(
            f"   Example {i}:\n"
            f"   Context: {huddle.screenshot_text}\n"
            f"   Draft: {huddle.user_draft}\n"
            f"   Successful reply: {huddle.reply}"
        )
    return "\n".join(lines)


def format_principles_block(principles: str) -> str:
    if not principles.strip():
        return ""
    return f"Principles to follow:\n{principles.strip()}\n"
