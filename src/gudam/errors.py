"""Exception taxonomy. Everything raised by gudam derives from GudamError."""

from __future__ import annotations


class GudamError(Exception):
    """Base class for gudam errors."""


class DuplicateKeyError(GudamError, KeyError):
    """A store key was registered twice."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"store {self.key!r} is already defined"


class ReservedNameError(GudamError, ValueError):
    """A field, getter or action name collides with an instance member."""

    def __init__(self, key: str, name: str) -> None:
        super().__init__(f"store {key!r}: {name!r} is a reserved name")
        self.key = key
        self.name = name


class PluginInitError(GudamError):
    """A plugin's init_state raised while instantiating a store."""

    def __init__(self, key: str, plugin: object) -> None:
        super().__init__(f"store {key!r}: init_state failed in {plugin!r}")
        self.key = key
        self.plugin = plugin


class DeserializationError(GudamError, ValueError):
    """A persisted payload could not be turned back into a state record."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"store {key!r}: {reason}")
        self.key = key


class NoSessionError(GudamError, LookupError):
    """A store reader ran with no channel and no ambient session."""
