"""Tests for append-only turn storage."""

from __future__ import annotations

import unittest

from gemini_chat.message_store import TurnLog
from gemini_chat.models import Speaker


class TurnLogTests(unittest.TestCase):
    """Validate turn ordering and the single in-flight assistant turn."""

    def test_user_then_placeholder_order(self) -> None:
        log = TurnLog()
        user = log.append_user("Hello")
        placeholder = log.open_assistant()

        self.assertEqual([t.id for t in log.turns], [user.id, placeholder.id])
        self.assertIs(user.speaker, Speaker.USER)
        self.assertEqual(placeholder.text, "")
        self.assertIs(log.open_turn, placeholder)

    def test_fragments_accumulate_until_close(self) -> None:
        log = TurnLog()
        placeholder = log.open_assistant()
        log.append_text(placeholder.id, "Hi")
        self.assertEqual(log.open_turn.text, "Hi")
        log.append_text(placeholder.id, " there")

        closed = log.close(placeholder.id)

        self.assertEqual(closed.text, "Hi there")
        self.assertIsNone(log.open_turn)
        with self.assertRaises(ValueError):
            log.append_text(placeholder.id, "late")

    def test_only_one_turn_in_flight(self) -> None:
        log = TurnLog()
        log.open_assistant()
        with self.assertRaises(RuntimeError):
            log.open_assistant()

    def test_fail_replaces_text_and_marks_failed(self) -> None:
        log = TurnLog()
        placeholder = log.open_assistant()
        log.append_text(placeholder.id, "partial")

        failed = log.fail(placeholder.id, "error text")

        self.assertEqual(failed.text, "error text")
        self.assertTrue(failed.failed)
        self.assertIsNone(log.open_turn)

    def test_clear_refused_while_in_flight(self) -> None:
        log = TurnLog()
        log.append_user("one")
        placeholder = log.open_assistant()
        with self.assertRaises(RuntimeError):
            log.clear()

        log.close(placeholder.id)
        log.clear()
        self.assertEqual(len(log), 0)

    def test_turns_returns_a_copy(self) -> None:
        log = TurnLog()
        log.append_user("one")
        snapshot = log.turns
        log.append_user("two")
        self.assertEqual(len(snapshot), 1)
        self.assertEqual(len(log), 2)


if __name__ == "__main__":
    unittest.main()
