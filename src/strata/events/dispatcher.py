from __future__ import annotations

import logging
from typing import Any

from strata.events.observer import EventObserver
from strata.events.types import EVENT_TYPE_MAP, Event

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Fans lifecycle events out to observers.

    A failing observer is logged and skipped; the remaining observers still
    receive the event and the stack operation that emitted it carries on.
    """

    def __init__(self) -> None:
        self._observers: list[EventObserver] = []

    def add_observer(self, observer: EventObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: EventObserver) -> bool:
        for index, registered in enumerate(self._observers):
            if registered is observer:
                del self._observers[index]
                return True
        return False

    def emit(self, event_type: str, **data: Any) -> None:
        event_cls = EVENT_TYPE_MAP.get(event_type)
        if event_cls is None:
            logger.debug("Dropping unknown event type %s", event_type)
            return
        self.dispatch(event_cls(**data))

    def dispatch(self, event: Event) -> None:
        for observer in list(self._observers):
            try:
                observer.on_event(event)
            except Exception:
                logger.warning(
                    "Observer %s failed on %s", type(observer).__name__, event.event_type, exc_info=True
                )
