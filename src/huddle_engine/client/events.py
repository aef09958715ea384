"""Explicit subscription interface for "an interaction was saved" notifications."""

from __future__ import annotations

from collections.abc import Callable

from huddle_engine.models.schemas import InteractionOut
from huddle_engine.observability.logger import get_logger

logger = get_logger("interaction_events")

InteractionListener = Callable[[InteractionOut], None]


class InteractionEvents:
    def __init__(self) -> None:
        self._listeners: list[InteractionListener] = []

    def subscribe(self, listener: InteractionListener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, interaction: InteractionOut) -> None:
        for listener in list(self._listeners):
            try:
                listener(interaction)
            except Exception as e:
                logger.warning("interaction_listener_failed", interaction_id=interaction.id, error=str(e))

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
