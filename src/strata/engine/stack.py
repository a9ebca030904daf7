from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, Protocol, Union

from strata.config.settings import StrataConfig
from strata.contexts.registry import ContextFactory, ContextRegistry
from strata.engine.driver import Subscription, TickSource
from strata.engine.error_policies import ErrorPolicy, PopOrder
from strata.exceptions import StackAlreadyInitializedError
from strata.models.args import ContextArgs
from strata.models.context import Context
from strata.models.data import ContextData, DataKey, data_key

logger = logging.getLogger(__name__)

ContextSpec = Union[type[Context], Callable[[], Context], str]


class EventEmitter(Protocol):
    def emit(self, event_type: str, **data: Any) -> None: ...


class _NullEmitter:
    def emit(self, event_type: str, **data: Any) -> None:
        pass


class ContextStack:
    """Ordered stack of live contexts, bottom (oldest) first.

    Each context sees, through ``ContextArgs``, the data attached to itself
    and to every context below it. Contexts above it are never visible.
    """

    def __init__(
        self,
        config: StrataConfig | None = None,
        registry: ContextRegistry | None = None,
        event_emitter: EventEmitter | None = None,
    ) -> None:
        self._config = config or StrataConfig()
        self._registry = registry or ContextRegistry()
        self._emitter: EventEmitter = event_emitter or _NullEmitter()
        self._contexts: list[Context] = []
        self._subscription: Subscription | None = None
        self._ticks = 0

    @property
    def config(self) -> StrataConfig:
        return self._config

    @property
    def registry(self) -> ContextRegistry:
        return self._registry

    @property
    def current_context(self) -> str:
        return self._contexts[-1].name if self._contexts else ""

    @property
    def initialized(self) -> bool:
        return self._subscription is not None

    @property
    def contexts(self) -> tuple[Context, ...]:
        return tuple(self._contexts)

    @property
    def top(self) -> Context | None:
        return self._contexts[-1] if self._contexts else None

    @property
    def ticks(self) -> int:
        return self._ticks

    def __len__(self) -> int:
        return len(self._contexts)

    # Driver subscription

    def initialize(self, source: TickSource) -> None:
        if self._subscription is not None:
            raise StackAlreadyInitializedError("Stack is already subscribed to a tick source")
        self._subscription = source.subscribe(self.tick)
        logger.debug("Context stack subscribed to %s", type(source).__name__)
        self._emit("StackInitialized")

    def terminate(self) -> None:
        if self._subscription is None:
            return
        subscription, self._subscription = self._subscription, None
        subscription.dispose()
        logger.debug("Context stack unsubscribed with %d contexts stacked", len(self._contexts))
        self._emit("StackTerminated", context_count=len(self._contexts))

    # Stack operations

    def push_context(self, context_type: ContextSpec, data: ContextData | None = None) -> Context | None:
        """Construct a context, put it on top and start it.

        ``start`` receives the data of every context below plus ``data``. A
        failure to construct or start the context is handled according to
        ``config.errors.start``; under ``isolate`` a context that was built
        stays on the stack even if its ``start`` raised.
        """
        if data is not None and not isinstance(data, ContextData):
            raise TypeError(f"Context data must be a ContextData, got {type(data).__name__}")
        name, factory = self._resolve(context_type)

        accumulated = self._accumulate(self._contexts)

        try:
            context = factory()
            if not isinstance(context, Context):
                raise TypeError(f"Factory for '{name}' returned {type(context).__name__}, not a Context")
        except Exception as e:
            self._lifecycle_failed(self._config.errors.start, "ContextStartFailed", name, e)
            return None

        self._contexts.append(context)
        if data is not None:
            context.attach_data(data)
            accumulated[data_key(data)] = data
        self._emit(
            "ContextPushed",
            context_name=context.name,
            depth=len(self._contexts),
            data_type=type(data).__name__ if data is not None else "",
        )

        args = ContextArgs(accumulated)
        try:
            context.start(args)
        except Exception as e:
            self._lifecycle_failed(self._config.errors.start, "ContextStartFailed", context.name, e)
            return context

        self._emit(
            "ContextStarted",
            context_name=context.name,
            visible_data=[key.__name__ for key in args],
        )
        return context

    def pop_context(self) -> Context | None:
        """Remove the top context and dispose it. No-op on an empty stack.

        With ``PopOrder.REMOVE_THEN_DISPOSE`` the context always leaves the
        stack. With ``DISPOSE_THEN_REMOVE`` a propagated dispose failure
        leaves it in place.
        """
        if not self._contexts:
            return None

        context = self._contexts[-1]
        if self._config.pop_order is PopOrder.REMOVE_THEN_DISPOSE:
            self._remove(context)
            self._dispose(context)
        else:
            self._dispose(context)
            self._remove(context)

        self._emit("ContextPopped", context_name=context.name, depth=len(self._contexts))
        return context

    def switch_context(self, context_type: ContextSpec, data: ContextData | None = None) -> Context | None:
        self.pop_context()
        return self.push_context(context_type, data)

    def clear(self) -> None:
        while self._contexts:
            self.pop_context()

    def snapshot(self) -> ContextArgs:
        return ContextArgs(self._accumulate(self._contexts))

    # Tick

    def tick(self) -> None:
        """Update every context once, bottom to top.

        The stack is walked over a copy taken at the start of the tick.
        Contexts pushed during the tick are first updated on the next one;
        contexts popped during the tick are skipped if not yet reached.
        """
        self._ticks += 1
        contexts = list(self._contexts)
        accumulated: dict[DataKey, ContextData] = {}
        failures = 0

        for context in contexts:
            if not self._holds(context):
                continue

            data, ok = self._read_data(context)
            if not ok:
                failures += 1
            elif data is not None:
                accumulated[data_key(data)] = data

            try:
                context.update(ContextArgs(accumulated))
            except Exception as e:
                failures += 1
                self._lifecycle_failed(self._config.errors.update, "ContextUpdateFailed", context.name, e)

        self._emit(
            "TickCompleted",
            tick=self._ticks,
            context_count=len(contexts),
            failures=failures,
        )

    # Internals

    def _resolve(self, context_type: ContextSpec) -> tuple[str, ContextFactory]:
        if isinstance(context_type, str):
            return context_type, self._registry.get(context_type)
        if isinstance(context_type, type) and issubclass(context_type, Context):
            return context_type.name, context_type
        if callable(context_type):
            return getattr(context_type, "__name__", type(context_type).__name__), context_type
        raise TypeError(f"Cannot push {context_type!r}: expected a Context type, factory or registered name")

    def _read_data(self, context: Context) -> tuple[ContextData | None, bool]:
        try:
            return context.data, True
        except Exception as e:
            logger.warning("Could not read data of context '%s', leaving it out of the snapshot", context.name, exc_info=True)
            self._emit("DataReadFailed", context_name=context.name, error=str(e))
            return None, False

    def _accumulate(self, contexts: Iterable[Context]) -> dict[DataKey, ContextData]:
        accumulated: dict[DataKey, ContextData] = {}
        for context in contexts:
            data, _ = self._read_data(context)
            if data is not None:
                accumulated[data_key(data)] = data
        return accumulated

    def _holds(self, context: Context) -> bool:
        # Identity, not ==: contexts may define value equality
        return any(stacked is context for stacked in self._contexts)

    def _emit(self, event_type: str, **data: Any) -> None:
        try:
            self._emitter.emit(event_type, **data)
        except Exception:
            logger.warning("Event emitter failed on %s, continuing", event_type, exc_info=True)

    def _remove(self, context: Context) -> None:
        for index in range(len(self._contexts) - 1, -1, -1):
            if self._contexts[index] is context:
                del self._contexts[index]
                return

    def _dispose(self, context: Context) -> None:
        try:
            context.dispose()
        except Exception as e:
            self._lifecycle_failed(self._config.errors.dispose, "ContextDisposeFailed", context.name, e)

    def _lifecycle_failed(self, policy: ErrorPolicy, event_type: str, context_name: str, error: Exception) -> None:
        self._emit(event_type, context_name=context_name, error=str(error) or type(error).__name__)
        if policy is ErrorPolicy.PROPAGATE:
            raise error
        logger.error("%s: context '%s'", event_type, context_name, exc_info=error)
