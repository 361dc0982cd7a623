"""Textual widgets for the chat shell."""
