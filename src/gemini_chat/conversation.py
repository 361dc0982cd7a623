"""Conversation orchestration: turns, file selection, and generation lifecycle."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
import logging
import mimetypes
from pathlib import Path
from typing import Any

from .config import resolve_api_key
from .context_builder import build_request
from .exceptions import GeminiChatError
from .file_store import ACCEPTED_MIME_TYPES, FileStoreClient
from .message_store import TurnLog
from .models import FileRecord, Turn
from .state import ConversationState, StateManager
from .stream_handler import StreamAssembler

LOGGER = logging.getLogger(__name__)

GENERATION_ERROR_MESSAGE = "I encountered an error while processing your request."

_EXTENSION_MIME_FALLBACKS: dict[str, str] = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".csv": "text/csv",
    ".txt": "text/plain",
}


def guess_mime_type(path: Path) -> str:
    """Guess a MIME type for an upload, defaulting to octet-stream."""
    guessed, _ = mimetypes.guess_type(path.name)
    if guessed:
        return guessed
    return _EXTENSION_MIME_FALLBACKS.get(path.suffix.lower(), "application/octet-stream")


class Conversation:
    """Own the chat turns, the file selection, and the single in-flight generation.

    At most one assistant turn is generated at a time; the ``IDLE`` ->
    ``GENERATING`` transition is the guard. File operations are independent
    of generation and only ever surface failures through ``on_notify``.
    """

    def __init__(
        self,
        file_store: FileStoreClient,
        assembler: StreamAssembler,
        *,
        model: str,
        system_prompt: str = "",
        on_change: Callable[[], None] | None = None,
        on_notify: Callable[[str], None] | None = None,
    ) -> None:
        self.file_store = file_store
        self.assembler = assembler
        self.model = model
        self.system_prompt = system_prompt
        self.turns = TurnLog()
        self.state = StateManager()
        self.files: list[FileRecord] = []
        self.is_uploading = False
        # dict keeps insertion order, which is the attachment order.
        self._selection: dict[str, None] = {}
        self._on_change = on_change
        self._on_notify = on_notify

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        environ: Mapping[str, str] | None = None,
        **kwargs: Any,
    ) -> Conversation:
        """Wire a conversation from a loaded config dict."""
        gemini = config["gemini"]
        api_key = resolve_api_key(gemini, environ)
        file_store = FileStoreClient(
            api_key,
            upload_base_url=str(gemini["upload_base_url"]),
            files_base_url=str(gemini["files_base_url"]),
            timeout=float(gemini["timeout"]),
        )
        return cls(
            file_store,
            StreamAssembler(api_key=api_key),
            model=str(gemini["model"]),
            system_prompt=str(gemini["system_prompt"]),
            **kwargs,
        )

    def on_change(self, callback: Callable[[], None]) -> None:
        """Register callback fired whenever turns, files, or selection change."""
        self._on_change = callback

    def on_notify(self, callback: Callable[[str], None]) -> None:
        """Register callback for one-shot user notifications."""
        self._on_notify = callback

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def _notify(self, message: str) -> None:
        if self._on_notify is not None:
            self._on_notify(message)

    @property
    def is_generating(self) -> bool:
        return self.state.current is ConversationState.GENERATING

    @property
    def selection(self) -> tuple[str, ...]:
        """Return the selected file uris in selection order."""
        return tuple(self._selection)

    def is_selected(self, uri: str) -> bool:
        return uri in self._selection

    def toggle(self, uri: str) -> bool:
        """Flip membership of ``uri`` and return whether it is now selected."""
        if uri in self._selection:
            del self._selection[uri]
            selected = False
        else:
            self._selection[uri] = None
            selected = True
        self._changed()
        return selected

    def selected_files(self) -> list[FileRecord]:
        """Return known records for the selected uris, in selection order."""
        by_uri = {record.uri: record for record in self.files}
        return [by_uri[uri] for uri in self._selection if uri in by_uri]

    def set_model(self, model_name: str) -> None:
        normalized = model_name.strip()
        if normalized:
            self.model = normalized

    def set_system_prompt(self, prompt: str) -> None:
        self.system_prompt = prompt.strip()

    async def clear(self) -> bool:
        """Start a new chat. Ignored while a turn is being generated."""
        if not await self.state.is_idle():
            return False
        self.turns.clear()
        self._changed()
        return True

    async def submit(self, text: str) -> bool:
        """Send a user turn and stream the reply into a placeholder turn.

        Returns ``False`` without touching anything when a generation is
        already running, or when ``text`` is blank and nothing is selected.
        """
        if not text.strip() and not self._selection:
            return False
        if not await self.state.begin():
            LOGGER.info(
                "conversation.submit.busy",
                extra={"event": "conversation.submit.busy"},
            )
            return False

        attached = self.selected_files()
        history = self.turns.turns
        self.turns.append_user(text)
        placeholder = self.turns.open_assistant()
        self._changed()

        payload = build_request(history, text, attached)

        def _on_chunk(fragment: str) -> None:
            self.turns.append_text(placeholder.id, fragment)
            self._changed()

        try:
            await self.assembler.stream(
                payload, self.model, self.system_prompt or None, _on_chunk
            )
        except GeminiChatError as exc:
            LOGGER.warning(
                "conversation.generation.failed",
                extra={
                    "event": "conversation.generation.failed",
                    "turn_id": placeholder.id,
                    "error_type": exc.__class__.__name__,
                },
            )
            self.turns.fail(placeholder.id, GENERATION_ERROR_MESSAGE)
        else:
            self.turns.close(placeholder.id)
        finally:
            # Cancellation leaves the partial text as the final text.
            if self.turns.open_turn is not None:
                self.turns.close(placeholder.id)
            await self.state.finish()
            self._changed()
        return True

    def _prune_selection(self) -> None:
        known = {record.uri for record in self.files}
        stale = [uri for uri in self._selection if uri not in known]
        for uri in stale:
            del self._selection[uri]
        if stale:
            LOGGER.info(
                "conversation.selection.pruned",
                extra={"event": "conversation.selection.pruned", "count": len(stale)},
            )

    async def refresh_files(self) -> list[FileRecord]:
        """Re-list remote files and drop selections whose file is gone."""
        try:
            files = await self.file_store.list_files()
        except GeminiChatError as exc:
            LOGGER.warning(
                "conversation.files.list_failed",
                extra={
                    "event": "conversation.files.list_failed",
                    "error_type": exc.__class__.__name__,
                },
            )
            self._notify(f"Failed to list files: {exc}")
            return list(self.files)
        self.files = files
        self._prune_selection()
        self._changed()
        return list(files)

    async def upload_file(self, path: str | Path) -> FileRecord | None:
        """Upload a local file, then refresh the file list."""
        target = Path(path).expanduser()
        mime_type = guess_mime_type(target)
        if mime_type not in ACCEPTED_MIME_TYPES:
            LOGGER.warning(
                "conversation.upload.unusual_type",
                extra={"event": "conversation.upload.unusual_type", "mime_type": mime_type},
            )

        self.is_uploading = True
        self._changed()
        try:
            content = await asyncio.to_thread(target.read_bytes)
            record = await self.file_store.upload(
                content, target.name, mime_type, len(content)
            )
        except (GeminiChatError, OSError) as exc:
            LOGGER.warning(
                "conversation.upload.failed",
                extra={
                    "event": "conversation.upload.failed",
                    "error_type": exc.__class__.__name__,
                },
            )
            self._notify(f"Upload failed: {exc}")
            return None
        finally:
            self.is_uploading = False
            self._changed()

        await self.refresh_files()
        return record

    async def delete_file(self, resource_id: str) -> bool:
        """Delete a remote file, unselect it, and refresh the file list."""
        try:
            await self.file_store.delete(resource_id)
        except GeminiChatError as exc:
            LOGGER.warning(
                "conversation.delete.failed",
                extra={
                    "event": "conversation.delete.failed",
                    "resource_id": resource_id,
                    "error_type": exc.__class__.__name__,
                },
            )
            self._notify("Failed to delete file")
            return False

        for record in self.files:
            if record.resource_id == resource_id:
                self._selection.pop(record.uri, None)
        await self.refresh_files()
        return True

    def history(self) -> list[Turn]:
        """Return the ordered turns."""
        return self.turns.turns
