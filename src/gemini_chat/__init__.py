"""Top-level package for gemini-chat."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import GeminiChatApp
    from .config import ensure_config_dir, load_config
    from .context_builder import RequestPayload, build_request
    from .conversation import Conversation
    from .exceptions import (
        ConfigError,
        GeminiChatError,
        GenerationError,
        NetworkError,
        NotFoundError,
        ProtocolError,
        UploadError,
    )
    from .file_store import FileStoreClient
    from .models import FileRecord, FileState, Speaker, Turn
    from .state import ConversationState, StateManager
    from .stream_handler import StreamAssembler

__all__ = [
    "ConfigError",
    "Conversation",
    "ConversationState",
    "FileRecord",
    "FileState",
    "FileStoreClient",
    "GeminiChatApp",
    "GeminiChatError",
    "GenerationError",
    "NetworkError",
    "NotFoundError",
    "ProtocolError",
    "RequestPayload",
    "Speaker",
    "StateManager",
    "StreamAssembler",
    "Turn",
    "UploadError",
    "build_request",
    "ensure_config_dir",
    "load_config",
]

_LAZY_EXPORTS: dict[str, str] = {
    "ConfigError": ".exceptions",
    "GeminiChatError": ".exceptions",
    "GenerationError": ".exceptions",
    "NetworkError": ".exceptions",
    "NotFoundError": ".exceptions",
    "ProtocolError": ".exceptions",
    "UploadError": ".exceptions",
    "FileRecord": ".models",
    "FileState": ".models",
    "Speaker": ".models",
    "Turn": ".models",
    "ConversationState": ".state",
    "StateManager": ".state",
    "RequestPayload": ".context_builder",
    "build_request": ".context_builder",
    "FileStoreClient": ".file_store",
    "StreamAssembler": ".stream_handler",
    "Conversation": ".conversation",
    "ensure_config_dir": ".config",
    "load_config": ".config",
    "GeminiChatApp": ".app",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols to keep the UI and SDK out of plain imports."""
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
