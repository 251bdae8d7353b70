"""Store instances — the live, mutable object behind a store definition.

Each instantiation builds a small subclass of StoreInstance per definition:
one property per state field, one read-only property per getter, one
method per action. Nothing is intercepted generically; every field write
goes through a generated setter that calls _notify().

    field write ──► _state[name] = value ──► _notify()
                                               ├─ publish(key)   new view, re-render signal
                                               ├─ _ever_changed = True
                                               └─ plugin.on_change(key, snapshot)   runs even if a subscriber raised

Getters are recomputed on every read. They are not memoized, so keep them
cheap: at most linear in the size of the state.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable

from gudam.errors import ReservedNameError
from gudam.plugin import run_init_state, run_on_change
from gudam.registry import StoreDefinition, check_name

logger = logging.getLogger("gudam.instance")


class StoreInstance:
    """Live store. Subclassed per definition with generated members."""

    __slots__ = ("key", "_definition", "_state", "_silent", "_ever_changed", "_publish")

    def __init__(
        self,
        definition: StoreDefinition,
        state: dict,
        publish: Callable[[str], None],
    ) -> None:
        self.key = definition.key
        self._definition = definition
        self._state = state
        self._silent = False
        self._ever_changed = False
        self._publish = publish

    def _notify(self) -> None:
        if self._silent:
            return
        # State has already changed; plugins see it even if a subscriber raises.
        try:
            self._publish(self.key)
        finally:
            self._ever_changed = True
            run_on_change(self.key, self._state, self._definition.plugins)

    def reset(self) -> None:
        """Replace the state with a fresh state() result and notify."""
        self._state = self._definition.state()
        self._notify()

    def trigger(self) -> None:
        """Notify without changing anything."""
        self._notify()

    def preload(self, fn: Callable[["StoreInstance"], object]) -> bool:
        """Apply fn(store) silently, once, before any ordinary mutation.

        Writes made by fn produce no notification. The gate closes after
        the first call whether or not fn wrote anything. Returns False
        (and does not call fn) if the gate is already closed.
        """
        if self._ever_changed:
            logger.debug("Skipped preload of %r: store already changed", self.key)
            return False
        # Closed before fn runs, so a preload nested inside fn is refused.
        self._ever_changed = True
        self._silent = True
        try:
            fn(self)
        finally:
            self._silent = False
        return True

    def snapshot(self) -> dict:
        """Shallow copy of the current state."""
        return dict(self._state)

    def __repr__(self) -> str:
        return f"<{self.key} store {self._state!r}>"


def _field(name: str) -> property:
    def fget(self):
        try:
            return self._state[name]
        except KeyError:
            raise AttributeError(f"store {self.key!r} has no value for {name!r}") from None

    def fset(self, value):
        self._state[name] = value
        self._notify()

    return property(fget, fset, doc=f"State field {name!r}.")


def _getter(name: str, fn: Callable) -> property:
    def fget(self):
        return fn(self)

    return property(fget, doc=fn.__doc__ or f"Derived value {name!r}.")


def _action(name: str, fn: Callable) -> Callable:
    @functools.wraps(fn)
    def method(self, *args, **kwargs):
        return fn(self, *args, **kwargs)

    method.__name__ = name
    method.__qualname__ = name
    return method


def build_instance(
    definition: StoreDefinition, publish: Callable[[str], None]
) -> StoreInstance:
    """Resolve initial state through the plugins and build the live instance."""
    key = definition.key
    initial = definition.state()
    if not isinstance(initial, dict):
        raise TypeError(
            f"store {key!r}: state() must return a dict, got {type(initial).__name__}"
        )
    fields = list(initial)
    state = run_init_state(key, initial, definition.plugins)
    state = dict(state)
    fields.extend(name for name in state if name not in initial)

    namespace: dict[str, object] = {"__slots__": ()}
    for name in fields:
        check_name(key, name)
        if name in definition.getters or name in definition.actions:
            raise ReservedNameError(key, name)
        namespace[name] = _field(name)
    for name, fn in definition.getters.items():
        namespace[name] = _getter(name, fn)
    for name, fn in definition.actions.items():
        namespace[name] = _action(name, fn)

    cls = type(f"StoreInstance[{key}]", (StoreInstance,), namespace)
    return cls(definition, state, publish)
