"""Input row containing the message field and the upload/send buttons."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.widgets import Button, Input


class InputBox(Horizontal):
    """Input region with message field, upload button, and send button."""

    class UploadRequested(Message):
        """Posted when the user clicks the upload button."""

    class SendRequested(Message):
        """Posted when the user clicks the send button."""

    def compose(self) -> ComposeResult:
        yield Input(
            placeholder="Ask about your files... (Enter to send)",
            id="message_input",
        )
        yield Button("Upload", id="upload_button", variant="default")
        yield Button("Send", id="send_button", variant="success")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "upload_button":
            event.stop()
            self.post_message(self.UploadRequested())
        elif event.button.id == "send_button":
            event.stop()
            self.post_message(self.SendRequested())
