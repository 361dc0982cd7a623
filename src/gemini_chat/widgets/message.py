"""Message bubble widget for conversation rendering."""

from __future__ import annotations

from typing import Any

from rich.markdown import Markdown
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static


class MessageBubble(Vertical):
    """Render a single chat turn with its role header and markdown body."""

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
    }
    MessageBubble > #header-block {
        padding: 0;
    }
    MessageBubble > #content-block {
        height: auto;
    }
    MessageBubble.failed > #content-block {
        color: $error;
    }
    """

    def __init__(
        self,
        content: str,
        role: str,
        timestamp: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.message_content = content
        self.role = role
        self.timestamp = timestamp
        self.add_class(f"role-{role}")
        self._content_widget: Static | None = None

    @property
    def role_prefix(self) -> str:
        """Return a human-friendly role label."""
        return "You" if self.role == "user" else "Gemini"

    def _compose_header(self) -> str:
        if self.timestamp:
            return f"**{self.role_prefix}**  _{self.timestamp}_"
        return f"**{self.role_prefix}**"

    def compose(self) -> ComposeResult:
        self._content_widget = Static("", id="content-block")
        yield Static(Markdown(self._compose_header()), id="header-block")
        yield self._content_widget

    def on_mount(self) -> None:
        self._refresh_content()

    def _refresh_content(self) -> None:
        if self._content_widget is None:
            return
        text = self.message_content.rstrip()
        self._content_widget.update(Markdown(text) if text else "...")

    def set_content(self, content: str, failed: bool = False) -> None:
        """Replace the body text, re-rendering only when it changed."""
        self.set_class(failed, "failed")
        if content == self.message_content:
            return
        self.message_content = content
        self._refresh_content()
