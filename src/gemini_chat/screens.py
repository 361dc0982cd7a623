"""Modal screens for uploads, delete confirmation, and settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Select, Static, TextArea


class TextPromptScreen(ModalScreen[str | None]):
    """Modal screen to prompt for a single line of text."""

    CSS = """
    TextPromptScreen {
        align: center middle;
    }

    #text-prompt-dialog {
        width: 70;
        height: auto;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }

    #text-prompt-title {
        padding-bottom: 1;
        text-style: bold;
    }

    #text-prompt-input {
        width: 100%;
        margin-bottom: 1;
    }
    """

    def __init__(self, title: str, placeholder: str = "") -> None:
        super().__init__()
        self._title = title
        self._placeholder = placeholder

    def compose(self) -> ComposeResult:
        with Container(id="text-prompt-dialog"):
            yield Static(self._title, id="text-prompt-title")
            yield Input(placeholder=self._placeholder, id="text-prompt-input")
            yield Static("Enter to confirm | Esc to cancel", id="text-prompt-help")

    def on_mount(self) -> None:
        self.query_one("#text-prompt-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "text-prompt-input":
            return
        self.dismiss(event.value.strip())

    def on_key(self, event: Any) -> None:  # noqa: ANN401
        if str(getattr(event, "key", "")).lower() == "escape":
            self.dismiss(None)


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no confirmation dialog."""

    CSS = """
    ConfirmScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }

    #confirm-actions {
        height: 3;
        align: right middle;
    }
    """

    def __init__(self, question: str) -> None:
        super().__init__()
        self._question = question

    def compose(self) -> ComposeResult:
        with Container(id="confirm-dialog"):
            yield Static(self._question, id="confirm-question")
            with Horizontal(id="confirm-actions"):
                yield Button("Cancel", id="confirm-no")
                yield Button("Delete", id="confirm-yes", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(event.button.id == "confirm-yes")

    def on_key(self, event: Any) -> None:  # noqa: ANN401
        if str(getattr(event, "key", "")).lower() == "escape":
            self.dismiss(False)


@dataclass(frozen=True)
class SettingsResult:
    """Values chosen in the settings dialog."""

    model: str
    system_prompt: str


class SettingsScreen(ModalScreen[SettingsResult | None]):
    """Pick the generation model and edit the system instruction."""

    CSS = """
    SettingsScreen {
        align: center middle;
    }

    #settings-dialog {
        width: 80;
        height: auto;
        max-height: 30;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }

    #settings-prompt {
        height: 10;
        margin-bottom: 1;
    }

    #settings-actions {
        height: 3;
        align: right middle;
    }
    """

    def __init__(self, models: list[str], model: str, system_prompt: str) -> None:
        super().__init__()
        self._models = list(models) if model in models else [model, *models]
        self._model = model
        self._system_prompt = system_prompt

    def compose(self) -> ComposeResult:
        with Container(id="settings-dialog"):
            yield Static("Model", classes="settings-label")
            yield Select(
                [(name, name) for name in self._models],
                value=self._model,
                allow_blank=False,
                id="settings-model",
            )
            yield Static("System instruction", classes="settings-label")
            yield TextArea(self._system_prompt, id="settings-prompt")
            with Horizontal(id="settings-actions"):
                yield Button("Cancel", id="settings-cancel")
                yield Button("Save", id="settings-save", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.id != "settings-save":
            self.dismiss(None)
            return
        model = self.query_one("#settings-model", Select).value
        prompt = self.query_one("#settings-prompt", TextArea).text
        self.dismiss(
            SettingsResult(
                model=str(model) if isinstance(model, str) else self._model,
                system_prompt=prompt.strip(),
            )
        )

    def on_key(self, event: Any) -> None:  # noqa: ANN401
        if str(getattr(event, "key", "")).lower() == "escape":
            self.dismiss(None)
