"""Pass-through driver for streamed generation calls."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from typing import Any

from google import genai

from .context_builder import RequestPayload
from .exceptions import ConfigError, GeminiChatError, GenerationError

LOGGER = logging.getLogger(__name__)

ChunkCallback = Callable[[str], None]


class StreamAssembler:
    """Open one streamed generation call and forward each text fragment.

    Holds no text buffer: every non-empty fragment is handed to ``on_chunk``
    as soon as it arrives, one call per fragment, in arrival order. The
    caller owns any accumulated text.

    ``client`` is anything exposing ``aio.models.generate_content_stream``;
    when omitted, a ``google.genai.Client`` is created on first use from
    ``api_key``.
    """

    def __init__(self, client: Any | None = None, api_key: str | None = None) -> None:
        self._client = client
        self._api_key = (api_key or "").strip()
        self._owns_client = False

    def _get_client(self) -> Any:
        if self._client is None:
            if not self._api_key:
                raise ConfigError(
                    "API key is missing. Set the API_KEY environment variable."
                )
            self._client = genai.Client(api_key=self._api_key)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        """Close the SDK client when this instance created it."""
        if self._owns_client and self._client is not None:
            await self._client.aio.aclose()
            self._client = None
            self._owns_client = False

    @staticmethod
    def _extract_text(fragment: Any) -> str:
        value = getattr(fragment, "text", None)
        if value is None and isinstance(fragment, dict):
            value = fragment.get("text")
        return value if isinstance(value, str) else ""

    async def stream(
        self,
        payload: RequestPayload,
        model_id: str,
        system_instruction: str | None,
        on_chunk: ChunkCallback,
    ) -> None:
        """Run the call to completion, invoking ``on_chunk`` per text fragment.

        Raises:
            ConfigError: no client and no credential.
            GenerationError: the call or the stream failed; text already
                delivered stays delivered.
        """
        client = self._get_client()
        config: dict[str, Any] = {}
        if system_instruction:
            config["system_instruction"] = system_instruction

        LOGGER.info(
            "stream.start",
            extra={
                "event": "stream.start",
                "model": model_id,
                "messages": len(payload.contents),
            },
        )
        fragments = 0
        try:
            response_stream = await client.aio.models.generate_content_stream(
                model=model_id,
                contents=payload.contents,
                config=config or None,
            )
            async for fragment in response_stream:
                text = self._extract_text(fragment)
                if text:
                    fragments += 1
                    on_chunk(text)
        except asyncio.CancelledError:
            LOGGER.info("stream.cancelled", extra={"event": "stream.cancelled"})
            raise
        except GeminiChatError:
            raise
        except Exception as exc:  # noqa: BLE001 - the SDK and transport fail in many ways.
            LOGGER.warning(
                "stream.failed",
                extra={
                    "event": "stream.failed",
                    "model": model_id,
                    "fragments": fragments,
                    "error_type": exc.__class__.__name__,
                },
            )
            raise GenerationError(f"Streaming from {model_id} failed: {exc}") from exc

        LOGGER.info(
            "stream.complete",
            extra={"event": "stream.complete", "model": model_id, "fragments": fragments},
        )
