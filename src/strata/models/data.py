from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ContextData(BaseModel):
    """Base for values a context can share with the contexts stacked above it.

    The concrete subclass is the lookup key: two values of the same class
    shadow each other, a subclass is a distinct key from its parent.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)


DataKey = type[ContextData]


def data_key(data: ContextData) -> DataKey:
    return type(data)
