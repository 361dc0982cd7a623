"""Main Textual application for chatting with Gemini over uploaded files."""

from __future__ import annotations

import logging
import sys
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Footer, Header, Input, OptionList

from .config import load_config
from .conversation import Conversation
from .logging_utils import configure_logging
from .models import Turn
from .screens import ConfirmScreen, SettingsResult, SettingsScreen, TextPromptScreen
from .widgets.conversation import ConversationView
from .widgets.file_list import FileList
from .widgets.input_box import InputBox
from .widgets.message import MessageBubble

LOGGER = logging.getLogger(__name__)


class GeminiChatApp(App[None]):
    """Chat with Gemini, grounding questions in files kept in the remote store."""

    CSS = """
    Screen {
        layout: vertical;
        background: $background;
    }

    #app-root {
        height: 1fr;
    }

    #chat-column {
        width: 1fr;
    }

    #conversation {
        height: 1fr;
        padding: 1;
    }

    InputBox {
        height: auto;
        padding: 0 1 1 1;
        border-top: solid $panel;
        background: $surface;
    }

    #message_input {
        width: 1fr;
    }

    #upload_button, #send_button {
        margin-left: 1;
        min-width: 10;
    }

    MessageBubble {
        width: 85%;
        margin: 1 0;
        padding: 1 2;
        border: round $panel;
    }

    .message-user {
        background: $primary;
    }

    .message-assistant {
        background: $surface;
    }
    """

    DEFAULT_ACTION_DESCRIPTIONS: dict[str, str] = {
        "new_conversation": "New Chat",
        "refresh_files": "Refresh Files",
        "upload_file": "Upload",
        "delete_file": "Delete File",
        "open_settings": "Settings",
        "quit": "Quit",
    }

    def __init__(
        self,
        conversation: Conversation | None = None,
        config: dict[str, dict[str, Any]] | None = None,
    ) -> None:
        self.config = config or load_config()
        self.window_title = str(self.config["app"]["title"])
        configure_logging(self.config["logging"])
        LOGGER.info(
            "app.python",
            extra={
                "event": "app.python",
                "executable": sys.executable,
                "version": sys.version.split()[0],
            },
        )
        self.conversation = conversation or Conversation.from_config(self.config)
        self.conversation.on_change(self._on_conversation_changed)
        self.conversation.on_notify(self._on_conversation_notice)
        self._configured_models = list(self.config["gemini"]["models"])
        self._bubbles: dict[str, MessageBubble] = {}
        self._binding_specs = self._binding_specs_from_config(self.config)
        super().__init__()

    @classmethod
    def _binding_specs_from_config(
        cls, config: dict[str, dict[str, Any]]
    ) -> list[Binding]:
        keybinds = config.get("keybinds", {})
        bindings: list[Binding] = []
        for action_name, description in cls.DEFAULT_ACTION_DESCRIPTIONS.items():
            binding_key = keybinds.get(action_name)
            if isinstance(binding_key, str) and binding_key.strip():
                bindings.append(
                    Binding(
                        key=binding_key.strip(),
                        action=action_name,
                        description=description,
                        show=True,
                    )
                )
        return bindings

    def compose(self) -> ComposeResult:
        """Compose app widgets."""
        yield Header()
        with Horizontal(id="app-root"):
            yield FileList(id="file_list")
            with Vertical(id="chat-column"):
                yield ConversationView(id="conversation")
                yield InputBox()
        yield Footer()

    async def on_mount(self) -> None:
        """Register keybindings and load the remote file list."""
        self.title = self.window_title
        self.sub_title = f"Model: {self.conversation.model}"
        for binding in self._binding_specs:
            self.bind(
                binding.key,
                binding.action,
                description=binding.description,
                show=binding.show,
            )
        self._render_files()
        self.query_one("#message_input", Input).focus()
        self.run_worker(self.conversation.refresh_files(), group="files")

    async def on_unmount(self) -> None:
        await self.conversation.file_store.aclose()
        await self.conversation.assembler.aclose()

    def _timestamp(self, turn: Turn) -> str:
        if not bool(self.config["ui"]["show_timestamps"]):
            return ""
        return turn.created_at.astimezone().strftime("%H:%M")

    def _render_turns(self) -> None:
        view = self.query_one(ConversationView)
        turns = self.conversation.history()
        known_ids = {turn.id for turn in turns}
        if any(turn_id not in known_ids for turn_id in self._bubbles):
            view.remove_children()
            self._bubbles.clear()

        appended = False
        for turn in turns:
            bubble = self._bubbles.get(turn.id)
            if bubble is None:
                bubble = view.add_message(
                    content=turn.text,
                    role=turn.speaker.value,
                    timestamp=self._timestamp(turn),
                )
                self._bubbles[turn.id] = bubble
                appended = True
            bubble.set_content(turn.text, failed=turn.failed)
        if appended or self.conversation.is_generating:
            view.scroll_end(animate=False)

    def _render_files(self) -> None:
        self.query_one(FileList).set_files(
            self.conversation.files,
            self.conversation.selection,
            is_uploading=self.conversation.is_uploading,
        )

    def _on_conversation_changed(self) -> None:
        self._render_turns()
        self._render_files()
        generating = self.conversation.is_generating
        self.query_one("#send_button", Button).disabled = generating
        self.sub_title = (
            "Generating..." if generating else f"Model: {self.conversation.model}"
        )

    def _on_conversation_notice(self, message: str) -> None:
        self.notify(message, severity="error")

    async def send_user_message(self) -> None:
        """Submit the input text (and the current file selection) as a new turn."""
        input_widget = self.query_one("#message_input", Input)
        text = input_widget.value
        if self.conversation.is_generating:
            self.sub_title = "Busy. Wait for current response to finish."
            return
        if not text.strip() and not self.conversation.selection:
            self.sub_title = "Type a message or select a file."
            return
        input_widget.value = ""
        self.run_worker(self.conversation.submit(text), group="generation")

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "message_input":
            await self.send_user_message()

    async def on_input_box_send_requested(self, _message: InputBox.SendRequested) -> None:
        await self.send_user_message()

    async def on_input_box_upload_requested(
        self, _message: InputBox.UploadRequested
    ) -> None:
        await self.action_upload_file()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        """Toggle a file in or out of the selection."""
        if event.option_list.id != "files-options" or event.option.id is None:
            return
        for record in self.conversation.files:
            if record.resource_id == event.option.id:
                self.conversation.toggle(record.uri)
                return

    async def action_new_conversation(self) -> None:
        if not await self.conversation.clear():
            self.sub_title = "Busy. Wait for current response to finish."

    async def action_refresh_files(self) -> None:
        self.run_worker(self.conversation.refresh_files(), group="files")

    async def action_upload_file(self) -> None:
        def _on_path(path: str | None) -> None:
            if path:
                self.run_worker(self.conversation.upload_file(path), group="files")

        self.push_screen(
            TextPromptScreen("Upload a document", placeholder="~/docs/report.pdf"),
            _on_path,
        )

    async def action_delete_file(self) -> None:
        resource_id = self.query_one(FileList).highlighted_resource_id
        if resource_id is None:
            self.sub_title = "Highlight a file to delete."
            return

        def _on_confirm(confirmed: bool | None) -> None:
            if confirmed:
                self.run_worker(self.conversation.delete_file(resource_id), group="files")

        self.push_screen(
            ConfirmScreen("Are you sure you want to delete this file?"), _on_confirm
        )

    async def action_open_settings(self) -> None:
        def _on_settings(result: SettingsResult | None) -> None:
            if result is None:
                return
            self.conversation.set_model(result.model)
            self.conversation.set_system_prompt(result.system_prompt)
            self.sub_title = f"Model: {self.conversation.model}"

        self.push_screen(
            SettingsScreen(
                self._configured_models,
                self.conversation.model,
                self.conversation.system_prompt,
            ),
            _on_settings,
        )
