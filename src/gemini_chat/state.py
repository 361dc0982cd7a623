"""Single-generation guard for the conversation."""

from __future__ import annotations

import asyncio
from enum import Enum
import logging

LOGGER = logging.getLogger(__name__)


class ConversationState(str, Enum):
    """Whether an assistant turn is currently being generated."""

    IDLE = "IDLE"
    GENERATING = "GENERATING"


class StateManager:
    """Allow at most one generation at a time.

    ``begin`` and ``finish`` are the only transitions. Both run under one
    ``asyncio.Lock`` so concurrent submissions race for a single slot.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._state = ConversationState.IDLE

    @property
    def current(self) -> ConversationState:
        """Return the state without waiting for the lock (for rendering)."""
        return self._state

    async def is_idle(self) -> bool:
        async with self._lock:
            return self._state is ConversationState.IDLE

    async def begin(self) -> bool:
        """Claim the generation slot. Returns ``False`` when it is taken."""
        async with self._lock:
            if self._state is not ConversationState.IDLE:
                return False
            self._set(ConversationState.GENERATING)
            return True

    async def finish(self) -> None:
        """Release the generation slot. Releasing an idle slot is a no-op."""
        async with self._lock:
            if self._state is ConversationState.GENERATING:
                self._set(ConversationState.IDLE)

    def _set(self, new_state: ConversationState) -> None:
        LOGGER.info(
            "conversation.state.transition",
            extra={
                "event": "conversation.state.transition",
                "from_state": self._state.value,
                "to_state": new_state.value,
            },
        )
        self._state = new_state
