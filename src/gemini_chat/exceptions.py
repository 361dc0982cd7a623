"""Domain exception hierarchy for the Gemini chat client."""

from __future__ import annotations


class GeminiChatError(RuntimeError):
    """Base class for all domain-level chat errors."""


class ConfigError(GeminiChatError):
    """Raised when no API credential is configured."""


class ConfigValidationError(ConfigError):
    """Raised when configuration cannot be validated safely."""


class ProtocolError(GeminiChatError):
    """Raised when the remote side answered successfully but broke the handshake."""


class NetworkError(GeminiChatError):
    """Raised on transport failures and non-2xx responses."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UploadError(NetworkError):
    """Raised when the resumable upload handshake fails."""


class NotFoundError(NetworkError):
    """Raised when a remote file resource does not exist."""


class GenerationError(GeminiChatError):
    """Raised when a streamed generation call fails."""
