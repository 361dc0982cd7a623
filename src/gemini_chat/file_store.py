"""Async client for the remote file store: resumable upload, list, and delete."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from .config import DEFAULT_FILES_BASE_URL, DEFAULT_UPLOAD_BASE_URL
from .exceptions import (
    ConfigError,
    NetworkError,
    NotFoundError,
    ProtocolError,
    UploadError,
)
from .models import FileRecord

LOGGER = logging.getLogger(__name__)

UPLOAD_URL_HEADER = "x-goog-upload-url"

# Advisory only; the service decides what it accepts.
ACCEPTED_MIME_TYPES: frozenset[str] = frozenset(
    {
        "application/pdf",
        "text/plain",
        "text/markdown",
        "text/csv",
        "text/html",
    }
)


def _response_text(response: httpx.Response) -> str:
    try:
        return response.text
    except Exception:  # noqa: BLE001 - undecodable error bodies are not fatal.
        return ""


class FileStoreClient:
    """Talk to the remote file-storage endpoint using one pre-configured API key.

    Every operation checks for the credential before touching the network.
    Errors are mapped onto the domain hierarchy and always propagate; nothing
    here retries.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        upload_base_url: str = DEFAULT_UPLOAD_BASE_URL,
        files_base_url: str = DEFAULT_FILES_BASE_URL,
        timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self.upload_base_url = upload_base_url.rstrip("/")
        self.files_base_url = files_base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> FileStoreClient:
        return self

    async def __aexit__(self, *_exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client when this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    def _require_key(self) -> str:
        if not self._api_key:
            raise ConfigError("API key is missing. Set the API_KEY environment variable.")
        return self._api_key

    def _resource_url(self, resource_id: str) -> str:
        # Record names already carry the collection prefix ("files/abc").
        file_id = resource_id.strip().removeprefix("files/")
        return f"{self.files_base_url}/{file_id}"

    async def upload(
        self,
        content: bytes,
        name: str,
        mime_type: str,
        size: int,
    ) -> FileRecord:
        """Upload ``content`` in two phases and return the created record.

        Raises:
            ConfigError: no credential configured.
            ProtocolError: the initiation response carried no session URL, or
                the finalize response carried no file record.
            UploadError: transport failure or non-2xx on either phase.
        """
        key = self._require_key()
        if size != len(content):
            raise ValueError(
                f"Declared size {size} does not match content length {len(content)}."
            )

        LOGGER.info(
            "file_store.upload.start",
            extra={
                "event": "file_store.upload.start",
                "display_name": name,
                "mime_type": mime_type,
                "size_bytes": size,
            },
        )
        try:
            init_response = await self._http.post(
                self.upload_base_url,
                params={"key": key},
                headers={
                    "X-Goog-Upload-Protocol": "resumable",
                    "X-Goog-Upload-Command": "start",
                    "X-Goog-Upload-Header-Content-Length": str(size),
                    "X-Goog-Upload-Header-Content-Type": mime_type,
                    "Content-Type": "application/json",
                },
                json={"file": {"display_name": name}},
            )
        except httpx.HTTPError as exc:
            raise UploadError(f"Failed to initiate upload: {exc}") from exc

        if not init_response.is_success:
            body = _response_text(init_response)
            raise UploadError(
                f"Failed to initiate upload: {body}",
                status_code=init_response.status_code,
                body=body,
            )

        session_url = init_response.headers.get(UPLOAD_URL_HEADER)
        if not session_url:
            raise ProtocolError("Upload URL not found in response headers")

        try:
            upload_response = await self._http.post(
                session_url,
                headers={
                    "Content-Length": str(size),
                    "X-Goog-Upload-Offset": "0",
                    "X-Goog-Upload-Command": "upload, finalize",
                },
                content=content,
            )
        except httpx.HTTPError as exc:
            raise UploadError(f"Failed to upload file content: {exc}") from exc

        if not upload_response.is_success:
            body = _response_text(upload_response)
            raise UploadError(
                f"Failed to upload file content: {body}",
                status_code=upload_response.status_code,
                body=body,
            )

        try:
            payload = upload_response.json()
        except ValueError as exc:
            raise ProtocolError("Upload response was not valid JSON.") from exc
        file_data = payload.get("file") if isinstance(payload, dict) else None
        if not isinstance(file_data, dict):
            raise ProtocolError("Upload response did not contain a file record.")
        record = self._parse_record(file_data)

        LOGGER.info(
            "file_store.upload.complete",
            extra={
                "event": "file_store.upload.complete",
                "resource_id": record.resource_id,
                "state": record.state.value,
            },
        )
        return record

    async def list_files(self) -> list[FileRecord]:
        """Return every file currently held by the store (possibly none)."""
        key = self._require_key()
        try:
            response = await self._http.get(self.files_base_url, params={"key": key})
        except httpx.HTTPError as exc:
            raise NetworkError(f"Failed to list files: {exc}") from exc

        if not response.is_success:
            body = _response_text(response)
            error_cls = NotFoundError if response.status_code == 404 else NetworkError
            raise error_cls(
                f"Failed to list files: {body}",
                status_code=response.status_code,
                body=body,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProtocolError("List response was not valid JSON.") from exc
        raw_files = payload.get("files") if isinstance(payload, dict) else None
        if not raw_files:
            return []
        if not isinstance(raw_files, list):
            raise ProtocolError("List response field 'files' must be a list.")

        records: list[FileRecord] = []
        skipped = 0
        for item in raw_files:
            try:
                records.append(self._parse_record(item))
            except ProtocolError as exc:
                skipped += 1
                LOGGER.warning(
                    "file_store.list.skipped",
                    extra={"event": "file_store.list.skipped", "reason": str(exc)},
                )
        LOGGER.debug(
            "file_store.list",
            extra={"event": "file_store.list", "count": len(records), "skipped": skipped},
        )
        return records

    async def delete(self, resource_id: str) -> None:
        """Delete a file. Unknown or already-deleted ids raise ``NotFoundError``."""
        key = self._require_key()
        try:
            response = await self._http.delete(
                self._resource_url(resource_id), params={"key": key}
            )
        except httpx.HTTPError as exc:
            raise NetworkError(f"Failed to delete file: {exc}") from exc

        if not response.is_success:
            body = _response_text(response)
            error_cls = NotFoundError if response.status_code == 404 else NetworkError
            raise error_cls(
                f"Failed to delete file: {body}",
                status_code=response.status_code,
                body=body,
            )
        LOGGER.info(
            "file_store.delete",
            extra={"event": "file_store.delete", "resource_id": resource_id},
        )

    @staticmethod
    def _parse_record(data: Any) -> FileRecord:
        try:
            return FileRecord.model_validate(data)
        except ValidationError as exc:
            raise ProtocolError(f"Malformed file record: {exc}") from exc
