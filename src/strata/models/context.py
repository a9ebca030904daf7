from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from strata.models.args import ContextArgs
from strata.models.data import ContextData


class Context(ABC):
    """A pushable unit of application state.

    Lifecycle, as driven by ``ContextStack``:

    - ``start`` once, right after the context is appended, with the data of
      every context below it plus its own.
    - ``update`` once per tick while it stays on the stack.
    - ``dispose`` once when it is popped. The instance is not reused.

    A context owns at most one ``ContextData``. It can be attached at push
    time or replaced later with ``attach_data``; contexts pushed above this
    one see it from their next ``start``/``update`` on.
    """

    name: ClassVar[str] = ""
    _data: ContextData | None = None

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        if "name" not in cls.__dict__:
            cls.name = cls.__name__

    @abstractmethod
    def start(self, args: ContextArgs) -> None: ...

    @abstractmethod
    def update(self, args: ContextArgs) -> None: ...

    @abstractmethod
    def dispose(self) -> None: ...

    def attach_data(self, data: ContextData | None) -> None:
        if data is not None and not isinstance(data, ContextData):
            raise TypeError(
                f"{type(self).__name__} can only attach ContextData, got {type(data).__name__}"
            )
        self._data = data

    @property
    def data(self) -> ContextData | None:
        return self._data

    def __repr__(self) -> str:
        return f"<{self.name} data={type(self._data).__name__ if self._data is not None else None}>"
