from __future__ import annotations

from typing import Any

import pytest

from strata.engine.driver import IntervalTickSource, ManualTickSource
from strata.engine.stack import ContextStack
from strata.exceptions import StackAlreadyInitializedError
from strata.models.args import ContextArgs
from strata.models.context import Context


class Counter(Context):
    def __init__(self) -> None:
        self.updates = 0

    def start(self, args: ContextArgs) -> None:
        pass

    def update(self, args: ContextArgs) -> None:
        self.updates += 1

    def dispose(self) -> None:
        pass


class RecordingEmitter:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_type: str, **data: Any) -> None:
        self.events.append((event_type, data))


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TestInitialization:
    def test_starts_uninitialized(self) -> None:
        assert ContextStack().initialized is False

    def test_initialize_subscribes_tick(self) -> None:
        source = ManualTickSource()
        stack = ContextStack()
        counter = stack.push_context(Counter)
        assert isinstance(counter, Counter)

        stack.initialize(source)
        source.pump(3)

        assert stack.initialized is True
        assert counter.updates == 3
        assert stack.ticks == 3

    def test_double_initialize_raises(self) -> None:
        source = ManualTickSource()
        stack = ContextStack()
        stack.initialize(source)

        with pytest.raises(StackAlreadyInitializedError):
            stack.initialize(ManualTickSource())

        assert source.subscriber_count == 1

    def test_terminate_releases_subscription_but_keeps_contexts(self) -> None:
        source = ManualTickSource()
        emitter = RecordingEmitter()
        stack = ContextStack(event_emitter=emitter)
        counter = stack.push_context(Counter)
        assert isinstance(counter, Counter)
        stack.initialize(source)

        stack.terminate()
        source.pump(2)

        assert stack.initialized is False
        assert counter.updates == 0
        assert stack.current_context == "Counter"
        assert source.subscriber_count == 0
        assert ("StackTerminated", {"context_count": 1}) in emitter.events

    def test_terminate_when_uninitialized_is_noop(self) -> None:
        emitter = RecordingEmitter()
        stack = ContextStack(event_emitter=emitter)
        stack.terminate()
        assert emitter.events == []

    def test_can_reinitialize_after_terminate(self) -> None:
        source = ManualTickSource()
        stack = ContextStack()
        stack.initialize(source)
        stack.terminate()
        stack.initialize(source)

        source.pump()
        assert stack.ticks == 1

    def test_independent_stacks_on_one_source(self) -> None:
        source = ManualTickSource()
        first = ContextStack()
        second = ContextStack()
        a = first.push_context(Counter)
        b = second.push_context(Counter)
        first.initialize(source)
        second.initialize(source)

        source.pump()
        first.terminate()
        source.pump()

        assert isinstance(a, Counter) and isinstance(b, Counter)
        assert a.updates == 1
        assert b.updates == 2


class TestSubscription:
    def test_dispose_is_idempotent(self) -> None:
        source = ManualTickSource()
        calls: list[int] = []
        subscription = source.subscribe(lambda: calls.append(1))

        subscription.dispose()
        subscription.dispose()
        source.pump()

        assert subscription.active is False
        assert calls == []

    def test_unsubscribe_during_fire_skips_removed_callback(self) -> None:
        source = ManualTickSource()
        calls: list[str] = []
        holder: dict[str, Any] = {}

        def first() -> None:
            calls.append("first")
            holder["second"].dispose()

        holder["first"] = source.subscribe(first)
        holder["second"] = source.subscribe(lambda: calls.append("second"))

        source.pump()

        assert calls == ["first"]


class TestIntervalTickSource:
    def test_rejects_non_positive_interval(self) -> None:
        with pytest.raises(ValueError):
            IntervalTickSource(interval_ms=0)

    def test_runs_until_max_ticks_at_fixed_cadence(self) -> None:
        clock = FakeClock()
        source = IntervalTickSource(interval_ms=20, sleep_fn=clock.sleep, clock=clock)
        stack = ContextStack()
        counter = stack.push_context(Counter)
        assert isinstance(counter, Counter)
        stack.initialize(source)

        fired = source.run(max_ticks=4)

        assert fired == 4
        assert counter.updates == 4
        assert clock.sleeps == pytest.approx([0.02, 0.02, 0.02])

    def test_returns_immediately_without_subscribers(self) -> None:
        clock = FakeClock()
        source = IntervalTickSource(interval_ms=10, sleep_fn=clock.sleep, clock=clock)
        assert source.run() == 0

    def test_stops_when_stack_terminates(self) -> None:
        clock = FakeClock()
        source = IntervalTickSource(interval_ms=10, sleep_fn=clock.sleep, clock=clock)
        stack = ContextStack()

        class Quitter(Counter):
            def update(self, args: ContextArgs) -> None:
                super().update(args)
                if self.updates == 3:
                    stack.terminate()

        stack.push_context(Quitter)
        stack.initialize(source)

        assert source.run() == 3
        assert stack.initialized is False

    def test_stop_request(self) -> None:
        clock = FakeClock()
        source = IntervalTickSource(interval_ms=10, sleep_fn=clock.sleep, clock=clock)
        source.subscribe(source.stop)

        assert source.run(max_ticks=100) == 1

    def test_overrun_does_not_accumulate_backlog(self) -> None:
        clock = FakeClock()
        source = IntervalTickSource(interval_ms=10, sleep_fn=clock.sleep, clock=clock)

        def slow() -> None:
            clock.now += 0.05

        source.subscribe(slow)
        source.run(max_ticks=3)

        assert clock.sleeps == []
