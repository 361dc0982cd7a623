"""Sidebar listing stored files with their selection state."""

from __future__ import annotations

from collections.abc import Collection, Sequence

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import OptionList, Static
from textual.widgets.option_list import Option

from ..models import FileRecord, FileState, format_bytes


def file_label(record: FileRecord, selected: bool) -> str:
    """Return the sidebar line for a file record."""
    marker = "[x]" if selected else "[ ]"
    label = f"{marker} {record.label}  {format_bytes(record.size_bytes)}"
    if record.state is not FileState.ACTIVE:
        label += f"  ({record.state.value.lower()})"
    return label


class FileList(Vertical):
    """Knowledge-base sidebar; option ids are file resource ids."""

    DEFAULT_CSS = """
    FileList {
        width: 40;
        border-right: solid $panel;
        background: $surface;
    }
    FileList > #files-title {
        padding: 0 1;
        text-style: bold;
    }
    FileList > #files-options {
        height: 1fr;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static("Knowledge Base", id="files-title")
        yield OptionList(id="files-options")

    def set_files(
        self,
        files: Sequence[FileRecord],
        selection: Collection[str],
        is_uploading: bool = False,
    ) -> None:
        """Rebuild the option list, keeping the highlighted row when possible."""
        title = f"Knowledge Base  {len(files)} files"
        if is_uploading:
            title += "  (uploading...)"
        self.query_one("#files-title", Static).update(title)

        options = self.query_one("#files-options", OptionList)
        highlighted = options.highlighted
        options.clear_options()
        if not files:
            options.add_option(Option("No files uploaded", disabled=True))
            return
        options.add_options(
            [
                Option(file_label(record, record.uri in selection), id=record.resource_id)
                for record in files
            ]
        )
        if highlighted is not None and highlighted < len(files):
            options.highlighted = highlighted

    @property
    def highlighted_resource_id(self) -> str | None:
        """Return the resource id of the highlighted row, if any."""
        options = self.query_one("#files-options", OptionList)
        if options.highlighted is None:
            return None
        return options.get_option_at_index(options.highlighted).id
