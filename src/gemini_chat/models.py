"""Remote file records and local conversation turns."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import itertools
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
_TURN_COUNTER = itertools.count(1)


class FileState(str, Enum):
    """Server-side processing state of an uploaded file."""

    PROCESSING = "PROCESSING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"


class FileRecord(BaseModel):
    """A document held by the remote file store.

    Parsed from the camelCase JSON the service returns. ``uri`` is the only
    field usable as a generation attachment.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    resource_id: str = Field(alias="name")
    display_name: str | None = None
    mime_type: str = "application/octet-stream"
    size_bytes: int = Field(default=0, ge=0)
    uri: str
    state: FileState = FileState.PROCESSING
    create_time: str | None = None
    update_time: str | None = None
    expiration_time: str | None = None

    @field_validator("resource_id", "uri", mode="before")
    @classmethod
    def _validate_required_string(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Expected a string value.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("String value must not be empty.")
        return normalized

    @field_validator("state", mode="before")
    @classmethod
    def _parse_state(cls, value: Any) -> FileState:
        # STATE_UNSPECIFIED and any future states are treated as not ready yet.
        if isinstance(value, FileState):
            return value
        try:
            return FileState(str(value).strip().upper())
        except ValueError:
            return FileState.PROCESSING

    @field_validator("size_bytes", mode="before")
    @classmethod
    def _parse_size(cls, value: Any) -> int:
        # The service encodes int64 values as decimal strings.
        if value is None or value == "":
            return 0
        if isinstance(value, bool):
            raise ValueError("sizeBytes must be numeric.")
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        raise ValueError("sizeBytes must be a non-negative integer.")

    @property
    def label(self) -> str:
        """Return the user-facing name, falling back to the resource id."""
        return self.display_name or self.resource_id


def format_bytes(size: int) -> str:
    """Render a byte count with a binary unit suffix, e.g. ``1.5 KB``."""
    if size <= 0:
        return "0 B"
    value = float(size)
    index = 0
    while value >= 1024 and index < len(_SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    return f"{value:.1f} {_SIZE_UNITS[index]}"


class Speaker(str, Enum):
    """Author of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


def new_turn_id() -> str:
    """Return a unique, creation-ordered turn identifier."""
    return f"{time.time_ns() // 1_000_000}-{next(_TURN_COUNTER)}"


@dataclass
class Turn:
    """One message in the conversation."""

    speaker: Speaker
    text: str = ""
    id: str = field(default_factory=new_turn_id)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    failed: bool = False
