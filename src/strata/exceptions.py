from __future__ import annotations


class StrataError(Exception):
    pass


class UnknownContextError(StrataError, KeyError):
    def __init__(self, name: str, available: list[str]) -> None:
        listing = ", ".join(available) or "(none)"
        super().__init__(f"Unknown context '{name}'. Registered contexts: {listing}")
        self.name = name
        self.available = available

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0])


class StackAlreadyInitializedError(StrataError):
    pass


class ConfigError(StrataError):
    pass
