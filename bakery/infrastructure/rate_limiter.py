"""Sliding-window admission control shared by request handlers."""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable

from fastapi import Request

DEFAULT_WINDOW_MS = 60_000
DEFAULT_MAX_REQUESTS = 5


def rate_limit_key(ip: str, identifier: str | None = None) -> str:
    """Build the composite key for ``ip`` and an optional endpoint name."""

    return f"{ip}:{identifier}" if identifier else ip


def client_ip(request: Request) -> str:
    """Return the originating client address for ``request``."""

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client is not None and request.client.host:
        return request.client.host
    return "127.0.0.1"


class RateWindow:
    """Timestamps of accepted attempts, counted over a trailing window.

    Every accepted attempt stores its own timestamp under its key; denied
    attempts store nothing. Keys are matched exactly, so ``"10.0.0.1"`` and
    ``"10.0.0.11"`` never share capacity.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._attempts: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def check(
        self,
        key: str,
        window_ms: int = DEFAULT_WINDOW_MS,
        max_requests: int = DEFAULT_MAX_REQUESTS,
    ) -> bool:
        """Return ``True`` and record the attempt when ``key`` has capacity left."""

        if window_ms <= 0:
            raise ValueError("window_ms must be greater than zero")
        if max_requests <= 0:
            raise ValueError("max_requests must be greater than zero")

        with self._lock:
            now = self._clock()
            window_start = now - window_ms / 1000
            self._purge(window_start)

            attempts = self._attempts.get(key)
            count = len(attempts) if attempts is not None else 0
            if count >= max_requests:
                return False

            if attempts is None:
                attempts = self._attempts[key] = deque()
            attempts.append(now)
            return True

    def _purge(self, window_start: float) -> None:
        # Timestamps per key are appended in clock order, so expired ones sit
        # at the left end.
        for key in list(self._attempts):
            attempts = self._attempts[key]
            while attempts and attempts[0] < window_start:
                attempts.popleft()
            if not attempts:
                del self._attempts[key]

    def reset(self) -> None:
        with self._lock:
            self._attempts.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(attempts) for attempts in self._attempts.values())


__all__ = [
    "DEFAULT_MAX_REQUESTS",
    "DEFAULT_WINDOW_MS",
    "RateWindow",
    "client_ip",
    "rate_limit_key",
]
