"""Store registry — the table of store definitions.

A Registry only records definitions. It never builds state; that happens
in gudam.session.instantiate(), once per session.

define() returns a StoreReader: a callable that resolves the live store
for its key from a distribution channel (by default the ambient session).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterator, Mapping

from gudam.errors import DuplicateKeyError, NoSessionError, ReservedNameError

logger = logging.getLogger("gudam.registry")

# Members every store instance or store view carries. State fields,
# getters and actions may not shadow them.
RESERVED_NAMES = frozenset({"key", "reset", "trigger", "preload", "snapshot", "version"})


def check_name(key: str, name: str) -> None:
    """Raise ReservedNameError if name can't be used as a store member."""
    if not isinstance(name, str) or not name.isidentifier():
        raise ReservedNameError(key, name)
    if name.startswith("_") or name in RESERVED_NAMES:
        raise ReservedNameError(key, name)


@dataclass(frozen=True)
class StoreDefinition:
    """Everything needed to build a store instance. Immutable once registered."""

    key: str
    state: Callable[[], dict]
    getters: Mapping[str, Callable] = field(default_factory=dict)
    actions: Mapping[str, Callable] = field(default_factory=dict)
    plugins: tuple = ()

    def __post_init__(self) -> None:
        if not callable(self.state):
            raise TypeError(f"store {self.key!r}: state must be callable")
        for name in (*self.getters, *self.actions):
            check_name(self.key, name)
        clash = set(self.getters) & set(self.actions)
        if clash:
            raise ReservedNameError(self.key, sorted(clash)[0])
        object.__setattr__(self, "getters", MappingProxyType(dict(self.getters)))
        object.__setattr__(self, "actions", MappingProxyType(dict(self.actions)))
        object.__setattr__(self, "plugins", tuple(self.plugins))


class StoreReader:
    """Resolves the live view of one store from a distribution channel."""

    __slots__ = ("key",)

    def __init__(self, key: str) -> None:
        self.key = key

    def __call__(self, channel: Mapping | None = None):
        if channel is None:
            # Imported here: session depends on registry.
            from gudam.session import current_session

            channel = current_session.get()
            if channel is None:
                raise NoSessionError(
                    f"store {self.key!r} read outside of a session; "
                    "pass a channel or use session.provide()"
                )
        lookup = getattr(channel, "lookup", None)
        if lookup is not None:
            return lookup(self.key)
        return channel[self.key]

    def __repr__(self) -> str:
        return f"StoreReader({self.key!r})"


class Registry:
    """Ordered table of store definitions, keyed by store key."""

    def __init__(self) -> None:
        self._definitions: dict[str, StoreDefinition] = {}

    def define(
        self,
        key: str,
        state: Callable[[], dict],
        *,
        getters: Mapping[str, Callable] | None = None,
        actions: Mapping[str, Callable] | None = None,
        plugins=None,
    ) -> StoreReader:
        """Register a store and return a reader for it.

        Usage:
            def increment(store):
                store.n += 1

            use_counter = registry.define(
                "counter",
                lambda: {"n": 0},
                getters={"double": lambda store: store.n * 2},
                actions={"increment": increment},
            )
            session = registry.instantiate()
            use_counter(session).increment()
        """
        if key in self._definitions:
            raise DuplicateKeyError(key)
        definition = StoreDefinition(
            key=key,
            state=state,
            getters=getters or {},
            actions=actions or {},
            plugins=tuple(plugins or ()),
        )
        self._definitions[key] = definition
        logger.debug(
            "Defined store %r: %d getters, %d actions, %d plugins",
            key, len(definition.getters), len(definition.actions), len(definition.plugins),
        )
        return StoreReader(key)

    def get(self, key: str) -> StoreDefinition | None:
        return self._definitions.get(key)

    def keys(self):
        return self._definitions.keys()

    def instantiate(self):
        """Build a fresh session from this registry."""
        from gudam.session import instantiate

        return instantiate(self)

    def __contains__(self, key: object) -> bool:
        return key in self._definitions

    def __iter__(self) -> Iterator[StoreDefinition]:
        return iter(list(self._definitions.values()))

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"Registry({list(self._definitions)!r})"


def create_gudam() -> Registry:
    """Create an independent registry."""
    return Registry()


default_registry = create_gudam()
define_store = default_registry.define
