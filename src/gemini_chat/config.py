"""Configuration loading and validation for the Gemini chat client."""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
import logging
import os
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .exceptions import ConfigValidationError

import tomllib  # stdlib since Python 3.11 (project requires >=3.11)

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "gemini-chat"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_UPLOAD_BASE_URL = "https://generativelanguage.googleapis.com/upload/v1beta/files"
DEFAULT_FILES_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/files"
FALLBACK_API_KEY_ENV = "GEMINI_API_KEY"
VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _non_empty_string(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Expected a string value.")
    normalized = value.strip()
    if not normalized:
        raise ValueError("String value must not be empty.")
    return normalized


class AppConfig(BaseModel):
    """Application metadata."""

    title: str = "Gemini RAG"

    @field_validator("title", mode="before")
    @classmethod
    def _validate_title(cls, value: Any) -> str:
        return _non_empty_string(value)


class GeminiConfig(BaseModel):
    """Generation model and remote endpoint settings."""

    model: str = "gemini-3-flash-preview"
    models: list[str] = Field(default_factory=list)
    system_prompt: str = (
        "You are a helpful AI assistant. "
        "Use the provided files to answer questions if available."
    )
    api_key_env: str = "API_KEY"
    upload_base_url: str = DEFAULT_UPLOAD_BASE_URL
    files_base_url: str = DEFAULT_FILES_BASE_URL
    timeout: int = Field(default=120, ge=1, le=3600)

    @field_validator("model", "api_key_env", mode="before")
    @classmethod
    def _validate_required_string(cls, value: Any) -> str:
        return _non_empty_string(value)

    @field_validator("system_prompt", mode="before")
    @classmethod
    def _normalize_prompt(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Expected a string value.")
        return value.strip()

    @field_validator("upload_base_url", "files_base_url", mode="before")
    @classmethod
    def _validate_url(cls, value: Any) -> str:
        normalized = _non_empty_string(value).rstrip("/")
        parsed = urlparse(normalized)
        if parsed.scheme.lower() not in {"http", "https"}:
            raise ValueError("Endpoint URLs must use http or https scheme.")
        if not parsed.hostname:
            raise ValueError("Endpoint URLs must include a hostname.")
        return normalized

    @field_validator("models", mode="before")
    @classmethod
    def _validate_models(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("models must be a list of model names.")

        normalized: list[str] = []
        for item in value:
            candidate = _non_empty_string(item)
            if candidate not in normalized:
                normalized.append(candidate)
        return normalized

    @model_validator(mode="after")
    def _normalize_model_list(self) -> GeminiConfig:
        ordered_models = list(self.models)
        if self.model not in ordered_models:
            ordered_models.insert(0, self.model)
        self.models = ordered_models
        return self


class UIConfig(BaseModel):
    """Visual settings for Textual rendering."""

    show_timestamps: bool = True


class KeybindsConfig(BaseModel):
    """Keyboard action mapping."""

    new_conversation: str = "ctrl+n"
    refresh_files: str = "ctrl+r"
    upload_file: str = "ctrl+u"
    delete_file: str = "ctrl+d"
    open_settings: str = "ctrl+s"
    quit: str = "ctrl+q"

    @field_validator("*", mode="before")
    @classmethod
    def _validate_keybind(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Keybind must be a string.")
        return value.strip()


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/gemini-chat/app.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        return _non_empty_string(value)


class Config(BaseModel):
    """Root configuration model for all sections."""

    model_config = ConfigDict(populate_by_name=True)
    app: AppConfig = AppConfig()
    gemini: GeminiConfig = GeminiConfig()
    ui: UIConfig = UIConfig()
    keybinds: KeybindsConfig = KeybindsConfig()
    logging: LoggingConfig = LoggingConfig()


def _build_default_config() -> dict[str, dict[str, Any]]:
    """Build default config with an empty models list for clean merging."""
    data = Config().model_dump()
    # A partial TOML that only sets `model` must not inherit the default model list.
    data["gemini"]["models"] = []
    return data


DEFAULT_CONFIG: dict[str, dict[str, Any]] = _build_default_config()


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Ensure that the config directory exists and return its path."""
    directory = config_dir or CONFIG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("Unable to create config directory %s: %s", directory, exc)
    return directory


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override values onto base values."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _enforce_private_permissions(path: Path) -> None:
    """Best-effort enforcement of private file permissions on POSIX systems."""
    if os.name != "posix" or not path.exists():
        return
    try:
        path.chmod(0o600)
    except OSError as exc:
        LOGGER.warning("Unable to enforce 0600 permissions for %s: %s", path, exc)


def _safe_default_config() -> dict[str, dict[str, Any]]:
    """Return validated default config data."""
    return Config().model_dump()


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate merged config and fallback to safe defaults when possible."""
    try:
        config = Config.model_validate(raw)
        return config.model_dump()
    except ValidationError as exc:
        LOGGER.warning("Configuration validation failed, using safe defaults: %s", exc)
        return _safe_default_config()
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    The optional ``config_path`` argument is intended for tests and tooling.
    """
    target_path = config_path or CONFIG_PATH
    ensure_config_dir(target_path.parent)

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        _enforce_private_permissions(target_path)
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (
            Exception
        ) as exc:  # noqa: BLE001 - we must not crash on invalid user config.
            LOGGER.warning("Failed to parse config at %s: %s", target_path, exc)
            raw_data = {}

    merged = (
        _deep_merge(DEFAULT_CONFIG, raw_data)
        if isinstance(raw_data, dict)
        else _safe_default_config()
    )
    return _validate_config(merged)


def resolve_api_key(
    gemini_config: Mapping[str, Any],
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Return the API credential from the environment, or ``None`` when unset."""
    env = os.environ if environ is None else environ
    names = [str(gemini_config.get("api_key_env", "API_KEY")), FALLBACK_API_KEY_ENV]
    for name in names:
        value = env.get(name, "").strip()
        if value:
            return value
    return None
