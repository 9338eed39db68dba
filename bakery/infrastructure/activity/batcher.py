"""Batched, best-effort delivery of activity events.

Events are buffered in call order and shipped to the collector when a
critical action is tracked, when the buffer reaches ``batch_size`` or on the
periodic timer. A failed delivery puts the batch back in front of whatever was
tracked meanwhile, so the next attempt keeps chronological order.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
import traceback
from collections import deque
from collections.abc import Iterator
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from anyio import to_thread

from bakery.domain.entities import (
    ACTION_CLICK,
    ACTION_ERROR,
    ACTION_SUBMIT,
    ACTION_VIEW,
    DATA_OPERATIONS,
    MAX_FIELD_LENGTH,
    ActivityEvent,
    is_critical_action,
)
from bakery.utils import utc_now_iso

from .sanitizer import sanitize_details, sanitize_form_data, to_json_compatible
from .transport import ActivityDeliveryError, ActivityRejectedError, ActivityTransport

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10
DEFAULT_FLUSH_INTERVAL = 5.0


def _clip(value: Any) -> str:
    return str(value)[:MAX_FIELD_LENGTH]


@dataclass(frozen=True)
class NavigationContext:
    """Where the current activity happens, as seen by the browser."""

    url: str | None = None
    referrer: str | None = None
    user_agent: str | None = None
    title: str | None = None


_navigation: ContextVar[NavigationContext | None] = ContextVar(
    "activity_navigation", default=None
)


def current_navigation() -> NavigationContext:
    """Return the navigation context active for the running task."""

    return _navigation.get() or NavigationContext()


@contextlib.contextmanager
def navigation_context(
    url: str | None = None,
    referrer: str | None = None,
    user_agent: str | None = None,
    title: str | None = None,
) -> Iterator[NavigationContext]:
    """Expose navigation details to the tracking helpers inside the block."""

    context = NavigationContext(
        url=url, referrer=referrer, user_agent=user_agent, title=title
    )
    token = _navigation.set(context)
    try:
        yield context
    finally:
        _navigation.reset(token)


class ActivityBatcher:
    """Buffer activity events and deliver them through ``transport``.

    ``track`` may be called from the event loop or from worker threads; the
    buffer is guarded by a lock and swapped wholesale on every flush so an
    event is never part of two deliveries.
    """

    def __init__(
        self,
        transport: ActivityTransport,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        flush_interval: float = DEFAULT_FLUSH_INTERVAL,
        enabled: bool = True,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be greater than zero")
        if flush_interval <= 0:
            raise ValueError("flush_interval must be greater than zero")

        self.batch_size = batch_size
        self.flush_interval = flush_interval
        self._transport = transport
        self._enabled = enabled
        self._pending: deque[ActivityEvent] = deque()
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._periodic_task: asyncio.Task[None] | None = None
        self._flush_tasks: set[asyncio.Task[None]] = set()

    @property
    def transport(self) -> ActivityTransport:
        return self._transport

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        """Turn tracking on or off; queued events are kept either way."""

        self._enabled = enabled

    @property
    def pending(self) -> tuple[ActivityEvent, ...]:
        """Snapshot of the events waiting for delivery."""

        with self._lock:
            return tuple(self._pending)

    @property
    def running(self) -> bool:
        return self._periodic_task is not None and not self._periodic_task.done()

    def track(
        self,
        action: str,
        resource: str,
        resource_id: Any = None,
        details: Any = None,
    ) -> None:
        """Queue an activity and schedule a flush when one is due.

        The event is made JSON-ready here, and its identifying fields are
        clipped to what the collector stores, so one odd event cannot hold
        back the rest of the queue.
        """

        if not self._enabled:
            return

        event = ActivityEvent(
            action=_clip(action),
            resource=_clip(resource),
            resource_id=_clip(resource_id) if resource_id is not None else None,
            details=to_json_compatible(sanitize_details(details)),
            timestamp=utc_now_iso(),
        )
        with self._lock:
            self._pending.append(event)
            queued = len(self._pending)

        if is_critical_action(event.action) or queued >= self.batch_size:
            self._schedule_flush()

    def track_page_view(self, page_name: str) -> None:
        navigation = current_navigation()
        self.track(
            ACTION_VIEW,
            "page",
            page_name,
            {
                "url": navigation.url,
                "referrer": navigation.referrer,
                "userAgent": navigation.user_agent,
            },
        )

    def track_form_submission(self, form_name: str, form_data: Any = None) -> None:
        self.track(
            ACTION_SUBMIT,
            "form",
            form_name,
            {
                "formData": sanitize_form_data(form_data),
                "url": current_navigation().url,
            },
        )

    def track_button_click(self, button_name: str, context: str | None = None) -> None:
        self.track(
            ACTION_CLICK,
            "button",
            button_name,
            {"context": context, "url": current_navigation().url},
        )

    def track_data_operation(
        self, operation: str, resource: str, resource_id: Any = None
    ) -> None:
        if operation not in DATA_OPERATIONS:
            logger.warning(
                "Ignoring unsupported data operation %r on %s", operation, resource
            )
            return
        self.track(
            operation, resource, resource_id, {"url": current_navigation().url}
        )

    def track_error(self, error: BaseException, context: str | None = None) -> None:
        stack = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
        self.track(
            ACTION_ERROR,
            "application",
            None,
            {
                "message": str(error),
                "stack": stack,
                "context": context,
                "url": current_navigation().url,
            },
        )

    async def flush(self) -> None:
        """Attempt one delivery of everything currently queued."""

        with self._lock:
            if not self._pending:
                return
            batch, self._pending = self._pending, deque()

        settled = False
        try:
            await self._transport.send(list(batch))
            settled = True
        except ActivityRejectedError as exc:
            settled = True
            logger.error(
                "Collector refused %s activity events, dropping them: %s", len(batch), exc
            )
        except ActivityDeliveryError as exc:
            logger.warning(
                "Failed to send %s activity events, will retry: %s", len(batch), exc
            )
        finally:
            if not settled:
                self._requeue(batch)

    def _requeue(self, batch: deque[ActivityEvent]) -> None:
        with self._lock:
            batch.extend(self._pending)
            self._pending = batch

    def _schedule_flush(self) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            loop = self._loop
            if loop is None or loop.is_closed():
                # Picked up by the next periodic flush or by shutdown.
                return
            try:
                loop.call_soon_threadsafe(self._spawn_flush)
            except RuntimeError:
                logger.debug("Event loop closed before flush could be scheduled")
            return
        self._spawn_flush()

    def _spawn_flush(self) -> None:
        task = asyncio.get_running_loop().create_task(self.flush())
        self._flush_tasks.add(task)
        task.add_done_callback(self._on_flush_done)

    def _on_flush_done(self, task: asyncio.Task[None]) -> None:
        self._flush_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unexpected error while flushing activity events", exc_info=exc)

    async def _run_periodic_flush(self) -> None:
        while True:
            await asyncio.sleep(self.flush_interval)
            try:
                await self.flush()
            except Exception:
                logger.exception("Periodic activity flush failed")

    def start(self) -> None:
        """Start the periodic flush on the running event loop.

        Calling it again while the timer is active does nothing.
        """

        if self.running:
            return
        self._loop = asyncio.get_running_loop()
        self._periodic_task = self._loop.create_task(self._run_periodic_flush())

    async def stop(self) -> None:
        """Cancel the periodic flush timer."""

        task, self._periodic_task = self._periodic_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def shutdown(self) -> None:
        """Stop timers, wait for running flushes and ship what is left."""

        await self.stop()
        if self._flush_tasks:
            await asyncio.gather(*list(self._flush_tasks), return_exceptions=True)
        self._loop = None
        await to_thread.run_sync(self.send_pending_beacon)

    def send_pending_beacon(self) -> bool:
        """Hand every queued event to the teardown transport.

        Returns ``True`` when nothing is left to deliver. Events stay queued if
        the hand-off is refused.
        """

        with self._lock:
            if not self._pending:
                return True
            batch, self._pending = self._pending, deque()

        handed_off = False
        try:
            handed_off = self._transport.send_beacon(list(batch))
        except Exception:
            logger.exception("Final delivery of %s activity events failed", len(batch))
        finally:
            if not handed_off:
                self._requeue(batch)
        return handed_off

    async def __aenter__(self) -> "ActivityBatcher":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()


__all__ = [
    "ActivityBatcher",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_FLUSH_INTERVAL",
    "NavigationContext",
    "current_navigation",
    "navigation_context",
]
