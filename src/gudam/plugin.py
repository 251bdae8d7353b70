"""Plugins — lifecycle hooks attached to a store definition.

A plugin intercepts two moments of a store's life:

- init_state(key, state): runs once per instantiation, in declared order.
  Returns the state to use, or None to keep the one it was given.
- on_change(key, snapshot): runs after every notification, in declared
  order. Receives a shallow copy of the state; plugins never own it.

Either hook may be left as None. Any object with these two attributes
works; subclassing Plugin is a convenience.
"""

from __future__ import annotations

from typing import Callable, Iterable

from gudam.errors import PluginInitError

StateRecord = dict
InitStateHook = Callable[[str, StateRecord], "StateRecord | None"]
OnChangeHook = Callable[[str, StateRecord], None]


class Plugin:
    """Base plugin. Override either hook; the other stays None."""

    init_state: InitStateHook | None = None
    on_change: OnChangeHook | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class HookPlugin(Plugin):
    """Plugin built from plain functions.

    Usage:
        log = []
        HookPlugin(on_change=lambda key, state: log.append((key, state)))
    """

    def __init__(
        self,
        init_state: InitStateHook | None = None,
        on_change: OnChangeHook | None = None,
    ) -> None:
        self.init_state = init_state
        self.on_change = on_change

    def __repr__(self) -> str:
        hooks = [
            name for name in ("init_state", "on_change") if getattr(self, name) is not None
        ]
        return f"HookPlugin({', '.join(hooks)})"


def run_init_state(key: str, state: StateRecord, plugins: Iterable) -> StateRecord:
    """Pipe state through every plugin's init_state, in order."""
    for plugin in plugins:
        hook = getattr(plugin, "init_state", None)
        if hook is None:
            continue
        try:
            result = hook(key, state)
        except Exception as exc:
            raise PluginInitError(key, plugin) from exc
        if result is not None:
            state = result
    return state


def run_on_change(key: str, state: StateRecord, plugins: Iterable) -> None:
    """Call every plugin's on_change with its own snapshot of state."""
    for plugin in plugins:
        hook = getattr(plugin, "on_change", None)
        if hook is not None:
            hook(key, dict(state))
