from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class Subscription:
    def __init__(self, on_dispose: Callable[[Subscription], None]) -> None:
        self._on_dispose: Callable[[Subscription], None] | None = on_dispose

    @property
    def active(self) -> bool:
        return self._on_dispose is not None

    def dispose(self) -> None:
        if self._on_dispose is None:
            return
        on_dispose, self._on_dispose = self._on_dispose, None
        on_dispose(self)


class TickSource(Protocol):
    def subscribe(self, callback: TickCallback) -> Subscription: ...


class _CallbackTickSource:
    def __init__(self) -> None:
        self._callbacks: dict[Subscription, TickCallback] = {}

    def subscribe(self, callback: TickCallback) -> Subscription:
        subscription = Subscription(self._unsubscribe)
        self._callbacks[subscription] = callback
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        self._callbacks.pop(subscription, None)

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def _fire(self) -> None:
        # A callback may unsubscribe itself or others mid-fire
        for subscription, callback in list(self._callbacks.items()):
            if subscription.active:
                callback()


class ManualTickSource(_CallbackTickSource):
    """Tick source driven explicitly by the host loop or a test."""

    def pump(self, times: int = 1) -> None:
        for _ in range(times):
            self._fire()


class IntervalTickSource(_CallbackTickSource):
    """Fixed-cadence tick loop that runs on the calling thread.

    ``run`` blocks until every subscriber is gone, ``stop`` is called from a
    callback, or ``max_ticks`` ticks have fired. Late ticks are not made up:
    if a tick overruns the interval the next one fires immediately and the
    schedule restarts from there.
    """

    def __init__(
        self,
        interval_ms: int = 16,
        sleep_fn: Callable[[float], None] | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        super().__init__()
        if interval_ms < 1:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self._interval = interval_ms / 1000.0
        self._sleep = sleep_fn if sleep_fn is not None else time.sleep
        self._clock = clock if clock is not None else time.monotonic
        self._stop_requested = False
        self.ticks = 0

    def stop(self) -> None:
        self._stop_requested = True

    def run(self, max_ticks: int | None = None) -> int:
        self._stop_requested = False
        fired = 0
        next_at = self._clock()
        logger.debug("Tick loop started (interval %.3fs)", self._interval)
        while self.subscriber_count and not self._stop_requested:
            if max_ticks is not None and fired >= max_ticks:
                break
            delay = next_at - self._clock()
            if delay > 0:
                self._sleep(delay)
            self._fire()
            fired += 1
            self.ticks += 1
            next_at += self._interval
            now = self._clock()
            if next_at < now:
                next_at = now
        logger.debug("Tick loop stopped after %d ticks", fired)
        return fired
