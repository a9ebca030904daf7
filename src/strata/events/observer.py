from __future__ import annotations

import logging
from typing import Protocol

import typer

from strata.events.types import (
    ContextDisposeFailed,
    ContextPopped,
    ContextPushed,
    ContextStarted,
    ContextStartFailed,
    ContextUpdateFailed,
    DataReadFailed,
    Event,
    StackInitialized,
    StackTerminated,
    TickCompleted,
)

_FAILURES = (ContextStartFailed, ContextDisposeFailed, ContextUpdateFailed, DataReadFailed)


class EventObserver(Protocol):
    def on_event(self, event: Event) -> None: ...


class StdoutObserver:
    """Prints one line per lifecycle event. Ticks are skipped unless ``show_ticks``."""

    def __init__(self, show_ticks: bool = False) -> None:
        self._show_ticks = show_ticks

    def on_event(self, event: Event) -> None:
        if isinstance(event, ContextPushed):
            suffix = f" with {event.data_type}" if event.data_type else ""
            typer.echo(f"[Stack] Pushed: {event.context_name} (depth {event.depth}){suffix}")
        elif isinstance(event, ContextStarted):
            visible = ", ".join(event.visible_data) or "no data"
            typer.echo(f"  [Context] Started: {event.context_name} ({visible})")
        elif isinstance(event, ContextStartFailed):
            typer.echo(f"  [Context] START FAILED: {event.context_name} - {event.error}")
        elif isinstance(event, ContextPopped):
            typer.echo(f"[Stack] Popped: {event.context_name} (depth {event.depth})")
        elif isinstance(event, ContextDisposeFailed):
            typer.echo(f"  [Context] DISPOSE FAILED: {event.context_name} - {event.error}")
        elif isinstance(event, ContextUpdateFailed):
            typer.echo(f"  [Context] UPDATE FAILED: {event.context_name} - {event.error}")
        elif isinstance(event, DataReadFailed):
            typer.echo(f"  [Context] DATA READ FAILED: {event.context_name} - {event.error}")
        elif isinstance(event, TickCompleted):
            if self._show_ticks:
                typer.echo(f"[Tick] #{event.tick}: {event.context_count} contexts, {event.failures} failures")
        elif isinstance(event, StackInitialized):
            typer.echo("[Stack] Initialized")
        elif isinstance(event, StackTerminated):
            typer.echo(f"[Stack] Terminated ({event.context_count} contexts still stacked)")


class LoggingObserver:
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("strata.events")

    def on_event(self, event: Event) -> None:
        level = logging.WARNING if isinstance(event, _FAILURES) else logging.DEBUG
        if not self._logger.isEnabledFor(level):
            return
        fields = event.model_dump(exclude={"timestamp", "event_type"})
        self._logger.log(level, "%s %s", event.event_type, fields)
