from __future__ import annotations

from collections.abc import Callable

from strata.exceptions import UnknownContextError
from strata.models.context import Context

ContextFactory = Callable[[], Context]


class ContextRegistry:
    """Maps context identifiers to zero-argument construction closures."""

    def __init__(self) -> None:
        self._factories: dict[str, ContextFactory] = {}

    def register(
        self, name: str | None = None
    ) -> Callable[[type[Context]], type[Context]]:
        def decorator(cls: type[Context]) -> type[Context]:
            self._factories[name or cls.name] = cls
            return cls

        return decorator

    def register_factory(self, name: str, factory: ContextFactory) -> None:
        self._factories[name] = factory

    def get(self, name: str) -> ContextFactory:
        if name not in self._factories:
            raise UnknownContextError(name, self.list_contexts())
        return self._factories[name]

    def list_contexts(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories
