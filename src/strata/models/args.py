from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any, TypeVar

from strata.models.data import ContextData, DataKey

T = TypeVar("T", bound=ContextData)
U = TypeVar("U", bound=ContextData)


class ContextArgs:
    """Read-only view of the data accumulated below (and including) a context.

    Lookups for a type that is not present are silent no-ops so that
    lifecycle code can be written without None checks.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[DataKey, ContextData] | None = None) -> None:
        self._data: dict[DataKey, ContextData] = dict(data or {})

    def use(self, data_type: type[T], callback: Callable[[T], Any]) -> bool:
        value = self._data.get(data_type)
        if value is None:
            return False
        callback(value)  # type: ignore[arg-type]
        return True

    def use_both(
        self,
        first_type: type[T],
        second_type: type[U],
        callback: Callable[[T, U], Any],
    ) -> bool:
        first = self._data.get(first_type)
        second = self._data.get(second_type)
        if first is None or second is None:
            return False
        callback(first, second)  # type: ignore[arg-type]
        return True

    def get(self, data_type: type[T]) -> T | None:
        return self._data.get(data_type)  # type: ignore[return-value]

    @property
    def count(self) -> int:
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, data_type: object) -> bool:
        return data_type in self._data

    def __iter__(self) -> Iterator[DataKey]:
        return iter(list(self._data))

    def __repr__(self) -> str:
        names = ", ".join(key.__name__ for key in self._data)
        return f"ContextArgs({names})"
