"""HTTP delivery of activity batches to the collection endpoint."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any, Protocol

import httpx

from bakery.domain.entities import ActivityEvent

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json"}


class ActivityDeliveryError(RuntimeError):
    """Raised when a batch could not be handed to the collector."""


class ActivityRejectedError(ActivityDeliveryError):
    """Raised when the collector will never accept the batch as sent."""


# Client errors worth retrying: the collector timed out or throttled us.
RETRYABLE_STATUS_CODES = frozenset({408, 429})


def is_permanent_rejection(status_code: int) -> bool:
    """Return ``True`` for client errors that retrying cannot fix."""

    return 400 <= status_code < 500 and status_code not in RETRYABLE_STATUS_CODES


class ActivityTransport(Protocol):
    """Delivery channel used by :class:`ActivityBatcher`."""

    async def send(self, events: Sequence[ActivityEvent]) -> None:
        """Deliver ``events`` or raise :class:`ActivityDeliveryError`."""

    def send_beacon(self, events: Sequence[ActivityEvent]) -> bool:
        """Hand ``events`` off during teardown; never raises.

        Returns ``True`` when the events need no further delivery attempts.
        """


def encode_batch(events: Sequence[ActivityEvent]) -> bytes:
    """Serialize ``events`` into the ``{"events": [...]}`` request body."""

    body: dict[str, Any] = {"events": [event.to_payload() for event in events]}
    return json.dumps(body, default=str).encode("utf-8")


class HttpActivityTransport:
    """Post activity batches as JSON to ``endpoint``.

    The response body is ignored. Connection problems, server errors, 408 and
    429 are failed deliveries worth retrying; any other 4xx status or a batch
    that cannot be encoded is a permanent rejection.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = 10.0,
        beacon_timeout: float = 2.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.endpoint = endpoint
        self._timeout = timeout
        self._beacon_timeout = beacon_timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def send(self, events: Sequence[ActivityEvent]) -> None:
        try:
            content = encode_batch(events)
        except (TypeError, ValueError) as exc:
            raise ActivityRejectedError(f"Activity batch is not valid JSON: {exc}") from exc

        try:
            response = await self._get_client().post(
                self.endpoint, content=content, headers=_JSON_HEADERS
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            error_class = (
                ActivityRejectedError
                if is_permanent_rejection(status_code)
                else ActivityDeliveryError
            )
            raise error_class(f"Collector responded with status {status_code}") from exc
        except httpx.HTTPError as exc:
            raise ActivityDeliveryError(f"Collector unreachable: {exc}") from exc

    def send_beacon(self, events: Sequence[ActivityEvent]) -> bool:
        # Runs while the event loop is shutting down, so a blocking request is
        # used instead of the shared async client.
        try:
            content = encode_batch(events)
        except (TypeError, ValueError) as exc:
            logger.error(
                "Dropping %s activity events that cannot be encoded: %s", len(events), exc
            )
            return True

        try:
            response = httpx.post(
                self.endpoint,
                content=content,
                headers=_JSON_HEADERS,
                timeout=self._beacon_timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "Final delivery of %s activity events failed: %s", len(events), exc
            )
            return False

        if is_permanent_rejection(response.status_code):
            logger.error(
                "Collector rejected %s activity events with status %s, dropping them",
                len(events),
                response.status_code,
            )
            return True
        if response.is_error:
            logger.warning(
                "Collector rejected final delivery of %s activity events with status %s",
                len(events),
                response.status_code,
            )
            return False
        return True

    async def aclose(self) -> None:
        """Close the HTTP client when this transport created it."""

        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


__all__ = [
    "ActivityDeliveryError",
    "ActivityRejectedError",
    "ActivityTransport",
    "HttpActivityTransport",
    "RETRYABLE_STATUS_CODES",
    "encode_batch",
    "is_permanent_rejection",
]
