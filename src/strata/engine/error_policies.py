from __future__ import annotations

from enum import Enum


class ErrorPolicy(str, Enum):
    ISOLATE = "isolate"
    PROPAGATE = "propagate"


class PopOrder(str, Enum):
    REMOVE_THEN_DISPOSE = "remove_then_dispose"
    DISPOSE_THEN_REMOVE = "dispose_then_remove"
