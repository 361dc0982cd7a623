"""Append-only turn storage with a single in-flight assistant turn."""

from __future__ import annotations

from .models import Speaker, Turn


class TurnLog:
    """Own the ordered conversation turns.

    Turns are only ever appended. The one exception is the open assistant
    turn, whose text grows by appended fragments until it is closed.
    """

    def __init__(self) -> None:
        self._turns: list[Turn] = []
        self._index: dict[str, Turn] = {}
        self._open_id: str | None = None

    @property
    def turns(self) -> list[Turn]:
        """Return a shallow copy of the ordered turns."""
        return list(self._turns)

    @property
    def open_turn(self) -> Turn | None:
        """Return the in-flight assistant turn, if any."""
        if self._open_id is None:
            return None
        return self._index[self._open_id]

    def __len__(self) -> int:
        return len(self._turns)

    def _append(self, turn: Turn) -> Turn:
        self._turns.append(turn)
        self._index[turn.id] = turn
        return turn

    def append_user(self, text: str) -> Turn:
        """Append a finalized user turn with the literal text."""
        return self._append(Turn(speaker=Speaker.USER, text=text))

    def open_assistant(self) -> Turn:
        """Append an empty assistant placeholder and mark it in flight."""
        if self._open_id is not None:
            raise RuntimeError("An assistant turn is already in flight.")
        turn = self._append(Turn(speaker=Speaker.ASSISTANT, text=""))
        self._open_id = turn.id
        return turn

    def append_text(self, turn_id: str, fragment: str) -> None:
        """Append a streamed fragment to the in-flight turn."""
        if turn_id != self._open_id:
            raise ValueError(f"Turn {turn_id!r} is not in flight.")
        self._index[turn_id].text += fragment

    def close(self, turn_id: str) -> Turn:
        """Finalize the in-flight turn with whatever text it has."""
        if turn_id != self._open_id:
            raise ValueError(f"Turn {turn_id!r} is not in flight.")
        self._open_id = None
        return self._index[turn_id]

    def fail(self, turn_id: str, message: str) -> Turn:
        """Close the in-flight turn, replacing its text with ``message``."""
        turn = self.close(turn_id)
        turn.text = message
        turn.failed = True
        return turn

    def clear(self) -> None:
        """Remove all turns. Not allowed while a turn is in flight."""
        if self._open_id is not None:
            raise RuntimeError("Cannot clear while an assistant turn is in flight.")
        self._turns.clear()
        self._index.clear()
