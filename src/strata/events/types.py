from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class Event(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    event_type: str


class ContextPushed(Event):
    event_type: str = "ContextPushed"
    context_name: str
    depth: int
    data_type: str = ""


class ContextStarted(Event):
    event_type: str = "ContextStarted"
    context_name: str
    visible_data: list[str] = Field(default_factory=list)


class ContextStartFailed(Event):
    event_type: str = "ContextStartFailed"
    context_name: str
    error: str = ""


class ContextPopped(Event):
    event_type: str = "ContextPopped"
    context_name: str
    depth: int


class ContextDisposeFailed(Event):
    event_type: str = "ContextDisposeFailed"
    context_name: str
    error: str = ""


class ContextUpdateFailed(Event):
    event_type: str = "ContextUpdateFailed"
    context_name: str
    error: str = ""


class DataReadFailed(Event):
    event_type: str = "DataReadFailed"
    context_name: str
    error: str = ""


class TickCompleted(Event):
    event_type: str = "TickCompleted"
    tick: int
    context_count: int
    failures: int = 0


class StackInitialized(Event):
    event_type: str = "StackInitialized"


class StackTerminated(Event):
    event_type: str = "StackTerminated"
    context_count: int = 0


EVENT_TYPE_MAP: dict[str, type[Event]] = {
    "ContextPushed": ContextPushed,
    "ContextStarted": ContextStarted,
    "ContextStartFailed": ContextStartFailed,
    "ContextPopped": ContextPopped,
    "ContextDisposeFailed": ContextDisposeFailed,
    "ContextUpdateFailed": ContextUpdateFailed,
    "DataReadFailed": DataReadFailed,
    "TickCompleted": TickCompleted,
    "StackInitialized": StackInitialized,
    "StackTerminated": StackTerminated,
}
