"""Per-client admission control.

Fixed-duration counting windows keyed by client identifier. A window that
is observed past its reset time starts over at count=1; a background
sweeper reaps expired windows so the table only holds recently-active
clients.

The table sits behind the ``WindowStore`` protocol. ``InMemoryWindowStore``
serves a single process; a shared store (Redis etc.) can be dropped in
without touching the controller.
"""

import asyncio
import contextlib
import threading
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Protocol

from fastapi import Request
from slowapi.util import get_remote_address

from resume_roast.config import load_settings
from resume_roast.core.logger import logger


@dataclass
class ClientWindow:
    count: int
    reset_at: float


class WindowStore(Protocol):
    def transaction(self, key: str) -> contextlib.AbstractContextManager: ...

    def get(self, key: str) -> ClientWindow | None: ...

    def reset(self, key: str, reset_at: float) -> ClientWindow: ...

    def increment(self, key: str) -> ClientWindow: ...

    def sweep(self, now: float) -> int: ...


class InMemoryWindowStore:
    """Dict-backed window table guarded by one lock.

    ``get``/``reset``/``increment`` must be called inside ``transaction``;
    the lock is re-entrant so ``sweep`` may also run inside one.
    """

    def __init__(self) -> None:
        self._windows: dict[str, ClientWindow] = {}
        self._lock = threading.RLock()

    @contextlib.contextmanager
    def transaction(self, key: str) -> Iterator[None]:
        with self._lock:
            yield

    def get(self, key: str) -> ClientWindow | None:
        window = self._windows.get(key)
        if window is None:
            return None
        return ClientWindow(window.count, window.reset_at)

    def reset(self, key: str, reset_at: float) -> ClientWindow:
        window = ClientWindow(count=1, reset_at=reset_at)
        self._windows[key] = window
        return ClientWindow(window.count, window.reset_at)

    def increment(self, key: str) -> ClientWindow:
        window = self._windows[key]
        window.count += 1
        return ClientWindow(window.count, window.reset_at)

    def sweep(self, now: float) -> int:
        with self._lock:
            expired = [key for key, w in self._windows.items() if now > w.reset_at]
            for key in expired:
                del self._windows[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._windows)

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()


class AdmissionController:
    """Gate every analyze call before any expensive work happens."""

    def __init__(
        self,
        store: WindowStore,
        ceiling: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ceiling < 1:
            raise ValueError("ceiling must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.store = store
        self.ceiling = ceiling
        self.window_seconds = window_seconds
        self._clock = clock

    def check_and_admit(self, client_id: str) -> bool:
        """Count one request against ``client_id``. True if admitted."""
        now = self._clock()
        with self.store.transaction(client_id):
            window = self.store.get(client_id)
            if window is None or now > window.reset_at:
                self.store.reset(client_id, now + self.window_seconds)
                return True
            if window.count >= self.ceiling:
                return False
            self.store.increment(client_id)
            return True

    def sweep(self) -> int:
        """Drop every window whose reset time has passed. Returns how many."""
        return self.store.sweep(self._clock())


async def run_sweeper(
    controller: AdmissionController,
    interval: float,
    stop_event: asyncio.Event,
) -> None:
    """Periodically reap expired windows until ``stop_event`` is set."""
    while not stop_event.is_set():
        removed = controller.sweep()
        if removed:
            logger.debug(f"Rate limit sweep removed {removed} expired window(s)")
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            continue


def client_id_from_request(request: Request, trust_proxy_headers: bool = False) -> str:
    """Derive the admission key from the request's network origin.

    Forwarding headers are client-controlled, so they are only honoured
    when the service runs behind a proxy that overwrites them.
    """
    if not trust_proxy_headers:
        return get_remote_address(request)

    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    return get_remote_address(request)


_controller: AdmissionController | None = None
_controller_lock = threading.Lock()


def get_admission_controller() -> AdmissionController:
    """Process-wide controller built from settings (FastAPI dependency)."""
    global _controller
    if _controller is None:
        with _controller_lock:
            if _controller is None:
                settings = load_settings()
                _controller = AdmissionController(
                    InMemoryWindowStore(),
                    ceiling=settings.rate_limit_requests,
                    window_seconds=settings.rate_limit_window_seconds,
                )
    return _controller
