"""Tests for file record parsing and turn defaults."""

from __future__ import annotations

import unittest

from pydantic import ValidationError

from gemini_chat.models import (
    FileRecord,
    FileState,
    Speaker,
    Turn,
    format_bytes,
)


def _wire_record(**overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "name": "files/abc123",
        "displayName": "notes.pdf",
        "mimeType": "application/pdf",
        "sizeBytes": "2048",
        "createTime": "2026-10-01T10:00:00Z",
        "updateTime": "2026-10-01T10:00:01Z",
        "expirationTime": "2026-10-03T10:00:00Z",
        "sha256Hash": "ignored",
        "uri": "https://generativelanguage.googleapis.com/v1beta/files/abc123",
        "state": "ACTIVE",
    }
    data.update(overrides)
    return data


class FileRecordTests(unittest.TestCase):
    """Validate parsing of the service's camelCase records."""

    def test_parses_wire_fields(self) -> None:
        record = FileRecord.model_validate(_wire_record())
        self.assertEqual(record.resource_id, "files/abc123")
        self.assertEqual(record.display_name, "notes.pdf")
        self.assertEqual(record.mime_type, "application/pdf")
        self.assertEqual(record.size_bytes, 2048)
        self.assertIs(record.state, FileState.ACTIVE)
        self.assertEqual(record.expiration_time, "2026-10-03T10:00:00Z")

    def test_size_accepts_integers_and_missing_values(self) -> None:
        self.assertEqual(FileRecord.model_validate(_wire_record(sizeBytes=7)).size_bytes, 7)
        data = _wire_record()
        del data["sizeBytes"]
        self.assertEqual(FileRecord.model_validate(data).size_bytes, 0)

    def test_non_numeric_size_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            FileRecord.model_validate(_wire_record(sizeBytes="lots"))
        with self.assertRaises(ValidationError):
            FileRecord.model_validate(_wire_record(sizeBytes="-5"))

    def test_missing_uri_is_rejected(self) -> None:
        data = _wire_record()
        del data["uri"]
        with self.assertRaises(ValidationError):
            FileRecord.model_validate(data)

    def test_label_falls_back_to_resource_id(self) -> None:
        data = _wire_record(state="PROCESSING")
        del data["displayName"]
        record = FileRecord.model_validate(data)
        self.assertEqual(record.label, "files/abc123")
        self.assertIs(record.state, FileState.PROCESSING)

    def test_unknown_state_is_treated_as_processing(self) -> None:
        for raw in ("STATE_UNSPECIFIED", "SOMETHING_NEW", None):
            with self.subTest(state=raw):
                record = FileRecord.model_validate(_wire_record(state=raw))
                self.assertIs(record.state, FileState.PROCESSING)
        lowered = FileRecord.model_validate(_wire_record(state="failed"))
        self.assertIs(lowered.state, FileState.FAILED)

    def test_format_bytes(self) -> None:
        self.assertEqual(format_bytes(0), "0 B")
        self.assertEqual(format_bytes(512), "512.0 B")
        self.assertEqual(format_bytes(1536), "1.5 KB")
        self.assertEqual(format_bytes(5 * 1024 * 1024), "5.0 MB")


class TurnTests(unittest.TestCase):
    """Validate turn defaults."""

    def test_turn_ids_are_unique_and_defaults_apply(self) -> None:
        first = Turn(speaker=Speaker.USER, text="hi")
        second = Turn(speaker=Speaker.ASSISTANT)
        self.assertNotEqual(first.id, second.id)
        self.assertEqual(second.text, "")
        self.assertFalse(second.failed)
        self.assertIsNotNone(first.created_at.tzinfo)


if __name__ == "__main__":
    unittest.main()
