"""Tests for configuration loading and validation."""

from __future__ import annotations

import tempfile
from pathlib import Path
import unittest

from gemini_chat.config import (
    DEFAULT_CONFIG,
    DEFAULT_FILES_BASE_URL,
    load_config,
    resolve_api_key,
)


class ConfigTests(unittest.TestCase):
    """Validate config merge and fallback behavior."""

    def test_missing_config_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config = load_config(config_path=config_path)
            self.assertEqual(config["app"]["title"], DEFAULT_CONFIG["app"]["title"])
            default_model = DEFAULT_CONFIG["gemini"]["model"]
            self.assertEqual(config["gemini"]["model"], default_model)
            self.assertEqual(config["gemini"]["models"], [default_model])
            self.assertEqual(config["gemini"]["files_base_url"], DEFAULT_FILES_BASE_URL)
            self.assertEqual(config["gemini"]["api_key_env"], "API_KEY")
            self.assertEqual(config["keybinds"]["upload_file"], "ctrl+u")
            self.assertEqual(config["logging"]["level"], "INFO")

    def test_partial_config_overrides_selected_values(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                """
[gemini]
model = "gemini-2.5-pro"
models = ["gemini-2.5-flash", "gemini-2.5-pro", "gemini-2.5-flash"]
files_base_url = "https://files.example.test/v1beta/files/"

[ui]
show_timestamps = false
                """.strip(),
                encoding="utf-8",
            )
            config = load_config(config_path=config_path)
            self.assertEqual(config["gemini"]["model"], "gemini-2.5-pro")
            self.assertEqual(
                config["gemini"]["models"], ["gemini-2.5-flash", "gemini-2.5-pro"]
            )
            self.assertEqual(
                config["gemini"]["files_base_url"],
                "https://files.example.test/v1beta/files",
            )
            self.assertFalse(config["ui"]["show_timestamps"])
            self.assertEqual(config["app"]["title"], DEFAULT_CONFIG["app"]["title"])

    def test_invalid_values_fall_back_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text(
                """
[gemini]
upload_base_url = "ftp://example.test/upload"
                """.strip(),
                encoding="utf-8",
            )
            config = load_config(config_path=config_path)
            self.assertEqual(
                config["gemini"]["upload_base_url"],
                DEFAULT_CONFIG["gemini"]["upload_base_url"],
            )

    def test_unparseable_toml_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text("[gemini\nmodel = ", encoding="utf-8")
            config = load_config(config_path=config_path)
            self.assertEqual(config["gemini"]["model"], DEFAULT_CONFIG["gemini"]["model"])


class ResolveApiKeyTests(unittest.TestCase):
    """Validate credential lookup from the environment."""

    def test_reads_configured_variable(self) -> None:
        key = resolve_api_key({"api_key_env": "MY_KEY"}, {"MY_KEY": " secret "})
        self.assertEqual(key, "secret")

    def test_falls_back_to_gemini_api_key(self) -> None:
        key = resolve_api_key({"api_key_env": "API_KEY"}, {"GEMINI_API_KEY": "other"})
        self.assertEqual(key, "other")

    def test_missing_or_blank_returns_none(self) -> None:
        self.assertIsNone(resolve_api_key({"api_key_env": "API_KEY"}, {}))
        self.assertIsNone(resolve_api_key({"api_key_env": "API_KEY"}, {"API_KEY": "  "}))


if __name__ == "__main__":
    unittest.main()
