"""Best-effort tone rewriting of a finished reply."""

from __future__ import annotations

from collections.abc import Callable

from huddle_engine.config.constants import NO_TONE, TONE_INSTRUCTIONS
from huddle_engine.generation.prompt_templates import GENERIC_TONE_INSTRUCTION, TONE_SYSTEM
from huddle_engine.observability.logger import get_logger
from huddle_engine.protocols.llm import LLMProvider

logger = get_logger("tone")

ToneFailureObserver = Callable[[str, str, Exception], None]


def is_no_tone(tone: str | None) -> bool:
    return not tone or not tone.strip() or tone.strip().lower() == NO_TONE


def tone_instruction(tone: str) -> str:
    key = tone.strip().lower()
    return TONE_INSTRUCTIONS.get(key) or GENERIC_TONE_INSTRUCTION.format(tone=key)


class ToneAdjuster:
    """Single attempt, fail-soft. A failed rewrite returns the input text."""

    def __init__(
        self,
        llm: LLMProvider,
        temperature: float = 0.7,
        max_tokens: int = 500,
        on_failure: ToneFailureObserver | None = None,
    ) -> None:
        self._llm = llm
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._on_failure = on_failure

    async def adjust(self, text: str, tone: str) -> str:
        if is_no_tone(tone) or not text.strip():
            return text

        system = TONE_SYSTEM.format(instruction=tone_instruction(tone))
        try:
            adjusted = await self._llm.generate(
                text,
                system=system,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except Exception as e:
            logger.warning("tone_adjustment_failed", tone=tone, error=str(e))
            if self._on_failure is not None:
                self._on_failure(text, tone, e)
            return text

        adjusted = adjusted.strip()
        if not adjusted:
            logger.warning("tone_adjustment_empty", tone=tone)
            return text
        logger.info("tone_adjusted", tone=tone, original_len=len(text), adjusted_len=len(adjusted))
        return adjusted
