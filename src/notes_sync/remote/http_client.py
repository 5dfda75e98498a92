"""HTTP client for the remote note service."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from notes_sync.domain.interfaces.remote_notes import IRemoteNotes
from notes_sync.exceptions import RemoteStoreError
from notes_sync.models import CreatableNote, NoteMetadata, NoteRecord
from notes_sync.utils.logging import get_logger

logger = get_logger(__name__)

# Transport-level failures worth another attempt on idempotent reads
_TRANSIENT_ERRORS = (httpx.TimeoutException, httpx.ConnectError, httpx.RemoteProtocolError)

_read_retry = retry(
    retry=retry_if_exception_type(_TRANSIENT_ERRORS),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, max=4.0),
    reraise=True,
)


class HttpRemoteNotes(IRemoteNotes):
    """Remote note store reached over a JSON REST API.

    Reads are retried on transient transport errors. Creates and updates are
    sent once: a failed write is reported, never assumed applied.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Service root, e.g. ``https://notes.example.com/api``
            api_token: Optional bearer token
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    def connect(self) -> None:
        if self._client is not None:
            return
        headers = {"Accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=self._timeout,
            transport=self._transport,
        )
        try:
            self._request("GET", "/health", operation="connect")
        except RemoteStoreError:
            self.disconnect()
            raise
        logger.info("remote_connected", url=self.base_url)

    def disconnect(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        logger.debug("remote_disconnected", url=self.base_url)

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        json: Any = None,
        note_id: str | None = None,
        allow_not_found: bool = False,
        retry_transient: bool = False,
    ) -> Any:
        """Send one request and decode the JSON payload.

        Returns:
            Decoded JSON, or None for a 404 when ``allow_not_found`` is set
            or for an empty body. Transient transport errors are retried
            when ``retry_transient`` is set.

        Raises:
            RemoteStoreError: On transport errors, error statuses or invalid JSON
        """
        if self._client is None:
            msg = f"Remote store not connected (operation: {operation})"
            raise RemoteStoreError(msg, context={"operation": operation, "id": note_id})
        client = self._client

        context = {"operation": operation, "id": note_id, "url": self.base_url}
        logger.debug("remote_request", method=method, path=path, operation=operation)

        try:
            if retry_transient:
                response = self._send_with_retry(client, method, path, json)
            else:
                response = client.request(method, path, json=json)
        except httpx.HTTPError as e:
            msg = f"Cannot reach note service at {self.base_url}: {e}"
            raise RemoteStoreError(
                msg,
                suggestion="Check remote_url and that the service is running.",
                context=context,
            ) from e

        if allow_not_found and response.status_code == 404:
            return None

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            msg = f"HTTP {response.status_code} from note service during {operation}"
            raise RemoteStoreError(msg, context=context) from e

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            msg = f"Invalid JSON from note service during {operation}: {e}"
            raise RemoteStoreError(msg, context=context) from e

    @staticmethod
    @_read_retry
    def _send_with_retry(
        client: httpx.Client, method: str, path: str, json: Any
    ) -> httpx.Response:
        return client.request(method, path, json=json)

    @staticmethod
    def _expect_list(payload: Any, operation: str) -> list[dict[str, Any]]:
        if not isinstance(payload, list):
            msg = f"Expected a list from {operation}, got {type(payload).__name__}"
            raise RemoteStoreError(msg, context={"operation": operation})
        return payload

    @staticmethod
    def _parse_record(payload: Any, operation: str) -> NoteRecord:
        if not isinstance(payload, dict) or "id" not in payload:
            msg = f"Malformed note in {operation} response"
            raise RemoteStoreError(msg, context={"operation": operation})
        return NoteRecord.from_dict(payload)

    def get_all_notes(self) -> list[NoteRecord]:
        payload = self._request(
            "GET", "/notes", operation="get_all_notes", retry_transient=True
        )
        items = self._expect_list(payload, "get_all_notes")
        return [self._parse_record(item, "get_all_notes") for item in items]

    def get_all_notes_metadata(self) -> list[NoteMetadata]:
        payload = self._request(
            "GET",
            "/notes/metadata",
            operation="get_all_notes_metadata",
            retry_transient=True,
        )
        items = self._expect_list(payload, "get_all_notes_metadata")
        try:
            return [NoteMetadata.from_dict(item) for item in items]
        except (KeyError, TypeError, AttributeError) as e:
            msg = f"Malformed note metadata: {e}"
            raise RemoteStoreError(msg, context={"operation": "get_all_notes_metadata"}) from e

    def get_note_by_id(self, note_id: str) -> NoteRecord | None:
        payload = self._request(
            "GET",
            f"/notes/{quote(note_id, safe='')}",
            operation="get_note_by_id",
            note_id=note_id,
            allow_not_found=True,
            retry_transient=True,
        )
        if payload is None:
            return None
        return self._parse_record(payload, "get_note_by_id")

    def create_note(self, note: CreatableNote) -> NoteRecord:
        payload = self._request("POST", "/notes", operation="create_note", json=note.to_dict())
        created = self._parse_record(payload, "create_note")
        logger.info("remote_note_created", id=created.id, title=created.title)
        return created

    def update_note(self, note_id: str, note: NoteRecord) -> None:
        body = note.to_dict()
        body["id"] = note_id
        self._request(
            "PUT",
            f"/notes/{quote(note_id, safe='')}",
            operation="update_note",
            json=body,
            note_id=note_id,
        )
        logger.info("remote_note_updated", id=note_id, title=note.title)
