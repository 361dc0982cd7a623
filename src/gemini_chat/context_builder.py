"""Serialize conversation turns and selected files into a generation request."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .models import FileRecord, Speaker, Turn

Part = dict[str, Any]
Message = dict[str, Any]

_ROLE_BY_SPEAKER: dict[Speaker, str] = {
    Speaker.USER: "user",
    Speaker.ASSISTANT: "model",
}


@dataclass
class RequestPayload:
    """Ordered request messages, newest user message last."""

    contents: list[Message] = field(default_factory=list)

    @property
    def newest(self) -> Message:
        return self.contents[-1]


def file_part(record: FileRecord) -> Part:
    """Return the attachment part referencing a stored file."""
    return {"fileData": {"mimeType": record.mime_type, "fileUri": record.uri}}


def turn_to_message(turn: Turn) -> Message:
    """Project a prior turn into a text-only request message."""
    return {"role": _ROLE_BY_SPEAKER[turn.speaker], "parts": [{"text": turn.text}]}


def build_request(
    history: Sequence[Turn],
    new_user_text: str,
    attached_files: Iterable[FileRecord] = (),
) -> RequestPayload:
    """Build the request for the next user turn.

    The full history is resent verbatim. Attachments go on the newest user
    message only, ahead of its text part, in the order given.
    """
    contents = [turn_to_message(turn) for turn in history]
    parts: list[Part] = [file_part(record) for record in attached_files]
    parts.append({"text": new_user_text})
    contents.append({"role": "user", "parts": parts})
    return RequestPayload(contents=contents)
