"""Newline-delimited JSON frames carried by the reply stream.

A stream is a sequence of lines, each one JSON object tagged by ``type``:

* ``meta``  - the context the server actually used, plus address-term hints
* ``token`` - an incremental text fragment to append to the reply

The decoder tolerates a final frame that is not newline-terminated. Lines
that are not JSON are always protocol errors. Objects of an unknown shape
raise in strict mode and are skipped (with a warning) otherwise.
"""

from __future__ import annotations

import json
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from huddle_engine.exceptions import StreamProtocolError
from huddle_engine.models.schemas import DocumentKnowledge, PastHuddle
from huddle_engine.observability.logger import get_logger

logger = get_logger("frames")


class MetaFrame(BaseModel):
    type: Literal["meta"] = "meta"
    past_huddles: list[PastHuddle] = Field(default_factory=list)
    document_knowledge: list[DocumentKnowledge] = Field(default_factory=list)
    slang_address_terms: list[str] | None = None


class TokenFrame(BaseModel):
    type: Literal["token"] = "token"
    text: str


Frame = Annotated[Union[MetaFrame, TokenFrame], Field(discriminator="type")]

_frame_adapter: TypeAdapter[Frame] = TypeAdapter(Frame)


def encode_frame(frame: MetaFrame | TokenFrame) -> bytes:
    return frame.model_dump_json().encode("utf-8") + b"\n"


class FrameDecoder:
    """Incremental decoder fed with raw response chunks."""

    def __init__(self, strict: bool = False) -> None:
        self._strict = strict
        self._buffer = b""
        self.skipped = 0

    def feed(self, data: bytes) -> list[MetaFrame | TokenFrame]:
        self._buffer += data
        *lines, self._buffer = self._buffer.split(b"\n")
        frames = []
        for line in lines:
            frame = self._decode_line(line)
            if frame is not None:
                frames.append(frame)
        return frames

    def flush(self) -> list[MetaFrame | TokenFrame]:
        """Decode whatever remains after the last newline."""
        remainder, self._buffer = self._buffer, b""
        frame = self._decode_line(remainder)
        return [frame] if frame is not None else []

    def _decode_line(self, line: bytes) -> MetaFrame | TokenFrame | None:
        if not line.strip():
            return None
        try:
            payload = json.loads(line.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StreamProtocolError(f"Malformed frame: {e}") from e

        try:
            return _frame_adapter.validate_python(payload)
        except ValidationError as e:
            if self._strict:
                raise StreamProtocolError(f"Unrecognised frame shape: {e}") from e
            self.skipped += 1
            logger.warning(
                "frame_skipped",
                frame_type=payload.get("type") if isinstance(payload, dict) else None,
            )
            return None
