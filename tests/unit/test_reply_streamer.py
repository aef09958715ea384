"""Tests for the server half of the reply stream."""

import asyncio

import pytest

from huddle_engine.exceptions import GenerationError
from huddle_engine.generation.frames import FrameDecoder, MetaFrame, TokenFrame
from huddle_engine.generation.reply_streamer import ReplyStreamer
from huddle_engine.models.domain import RetrievalBundle, RetrievalMatch, StyleProfile
from huddle_engine.models.schemas import ReplyRequest

from fakes import FakeLLM

SENTINEL = "generation failed, please regenerate"


class StubRetriever:
    def __init__(self, bundle=None):
        self.bundle = bundle or RetrievalBundle()
        self.calls = []

    async def retrieve(self, query, owner_id, limit):
        self.calls.append((query, owner_id, limit))
        return self.bundle


class SlowLLM(FakeLLM):
    async def generate_stream(self, prompt, system=None, temperature=0.7, max_tokens=500):
        await asyncio.sleep(5)
        yield "too late"


async def collect(streamer, request, owner_id="owner-1"):
    decoder = FrameDecoder(strict=True)
    frames = []
    async for chunk in streamer.stream(request, owner_id):
        frames.extend(decoder.feed(chunk))
    frames.extend(decoder.flush())
    return frames


def reply_text(frames) -> str:
    return "".join(f.text for f in frames if isinstance(f, TokenFrame))


async def test_empty_screenshot_uses_placeholder(settings, style_store):
    llm = FakeLLM()
    streamer = ReplyStreamer(llm, StubRetriever(), style_store, settings)

    frames = await collect(streamer, ReplyRequest(screenshot_text="", user_draft="Hey, want to grab coffee?"))

    assert isinstance(frames[0], MetaFrame)
    assert frames[0].document_knowledge == []
    assert reply_text(frames).strip()
    prompt, _ = llm.stream_calls[0]
    assert "(no screenshot text was provided)" in prompt
    assert "Hey, want to grab coffee?" in prompt


async def test_first_generation_retrieves_and_reports_context(settings, style_store, make_interaction):
    interaction = make_interaction(interaction_id="i-1")
    retriever = StubRetriever(RetrievalBundle(interactions=[RetrievalMatch(interaction, 0.77, "vector")]))
    llm = FakeLLM()
    streamer = ReplyStreamer(llm, retriever, style_store, settings)

    frames = await collect(streamer, ReplyRequest(screenshot_text="Coffee?", user_draft="sure"))

    assert retriever.calls == [("Coffee? sure", "owner-1", 3)]
    meta = frames[0]
    assert [h.id for h in meta.past_huddles] == ["i-1"]
    assert meta.past_huddles[0].similarity == 0.77
    _, system = llm.stream_calls[0]
    assert "Friday works for me, coffee it is!" in system


async def test_supplied_context_skips_retrieval(settings, style_store, sample_huddles):
    retriever = StubRetriever()
    streamer = ReplyStreamer(FakeLLM(), retriever, style_store, settings)

    frames = await collect(
        streamer,
        ReplyRequest(user_draft="d", is_regeneration=True, past_huddles=sample_huddles),
    )

    assert retriever.calls == []
    assert frames[0].past_huddles == sample_huddles


async def test_resolved_empty_context_skips_retrieval(settings, style_store):
    retriever = StubRetriever()
    streamer = ReplyStreamer(FakeLLM(), retriever, style_store, settings)

    frames = await collect(streamer, ReplyRequest(user_draft="d", context_resolved=True))

    assert retriever.calls == []
    assert frames[0].past_huddles == []
    assert frames[0].document_knowledge == []


async def test_style_profile_address_terms_in_meta(settings, style_store):
    await style_store.upsert(
        StyleProfile(
            owner_id="owner-1",
            huddle_count=4,
            avg_sentence_length=6,
            common_topics=["coffee"],
            address_terms=["bro"],
        )
    )
    llm = FakeLLM()
    streamer = ReplyStreamer(llm, StubRetriever(), style_store, settings)

    frames = await collect(streamer, ReplyRequest(user_draft="d"))

    assert frames[0].slang_address_terms == ["bro"]
    _, system = llm.stream_calls[0]
    assert "Addresses people as: bro" in system


async def test_failure_before_any_token_emits_sentinel(settings, style_store):
    streamer = ReplyStreamer(FakeLLM(fail_after=0), StubRetriever(), style_store, settings)

    frames = await collect(streamer, ReplyRequest(user_draft="d"))

    assert reply_text(frames) == SENTINEL


async def test_empty_model_output_emits_sentinel(settings, style_store):
    streamer = ReplyStreamer(FakeLLM(tokens=[]), StubRetriever(), style_store, settings)

    frames = await collect(streamer, ReplyRequest(user_draft="d"))

    assert reply_text(frames) == SENTINEL


async def test_failure_after_tokens_aborts_stream(settings, style_store):
    streamer = ReplyStreamer(FakeLLM(fail_after=1), StubRetriever(), style_store, settings)

    with pytest.raises(GenerationError):
        await collect(streamer, ReplyRequest(user_draft="d"))


async def test_time_budget_exhausted_before_tokens_emits_sentinel(settings, style_store):
    settings.generation_stream_timeout_seconds = 0.05
    streamer = ReplyStreamer(SlowLLM(), StubRetriever(), style_store, settings)

    frames = await collect(streamer, ReplyRequest(user_draft="d"))

    assert reply_text(frames) == SENTINEL
