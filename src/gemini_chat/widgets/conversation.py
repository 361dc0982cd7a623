"""Scrollable conversation view widget."""

from __future__ import annotations

from textual.containers import VerticalScroll

from .message import MessageBubble


class ConversationView(VerticalScroll):
    """A scrollable container that hosts message bubbles."""

    def add_message(self, content: str, role: str, timestamp: str = "") -> MessageBubble:
        """Create and mount a new message bubble, then scroll to it."""
        bubble = MessageBubble(content=content, role=role, timestamp=timestamp)
        bubble.add_class(f"message-{role}")
        self.mount(bubble)
        self.scroll_end(animate=False)
        return bubble
