"""Sessions — the distribution channel between live stores and the UI.

instantiate(registry) builds one live instance per definition and returns
a SessionState: a read-only mapping from store key to StoreView.

A StoreView is a pass-through wrapper around the live instance. Every
notification replaces the key's view with a *new* wrapper, so consumers
detect change with a cheap identity check (or by comparing .version):

    before = session["counter"]
    before.n += 1
    session["counter"] is before   # False — re-render
    session["counter"].n           # same live instance underneath

Consumers usually read through the ambient channel:

    with session.provide():
        counter = use_counter()
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from collections.abc import Mapping
from typing import Callable, Iterator

from gudam.instance import StoreInstance, build_instance
from gudam.registry import Registry, default_registry

logger = logging.getLogger("gudam.session")

Subscriber = Callable[[str, "StoreView"], None]
Disposer = Callable[[], None]

# The ambient session read by StoreReader when no channel is passed.
current_session: contextvars.ContextVar[SessionState | None] = contextvars.ContextVar(
    "current_session", default=None
)


class StoreView:
    """Identity token for one published state of a store.

    Attribute reads, writes and calls pass straight through to the live
    instance. Two views of the same store differ only in identity and
    version.
    """

    __slots__ = ("_instance", "version")

    def __init__(self, instance: StoreInstance, version: int) -> None:
        object.__setattr__(self, "_instance", instance)
        object.__setattr__(self, "version", version)

    def __getattr__(self, name: str):
        return getattr(self._instance, name)

    def __setattr__(self, name: str, value) -> None:
        if name in StoreView.__slots__:
            raise AttributeError(f"{name!r} is read-only on a store view")
        setattr(self._instance, name, value)

    def __dir__(self):
        return sorted(set(dir(self._instance)) | {"version"})

    def __repr__(self) -> str:
        return f"StoreView({self._instance!r}, version={self.version})"


class SessionState(Mapping):
    """Store key -> current StoreView, for one instantiation pass."""

    def __init__(self) -> None:
        self._instances: dict[str, StoreInstance] = {}
        self._views: dict[str, StoreView] = {}
        self._subscribers: list[Subscriber] = []
        self.errors: dict[str, Exception] = {}

    # --- Mapping ---

    def __getitem__(self, key: str) -> StoreView:
        return self._views[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._views)

    def __len__(self) -> int:
        return len(self._views)

    # --- Channel ---

    def lookup(self, key: str) -> StoreView:
        """Current view for key. Re-raises the error if key failed to instantiate."""
        error = self.errors.get(key)
        if error is not None:
            raise error
        return self._views[key]

    def instance(self, key: str) -> StoreInstance:
        """The live instance behind key's views."""
        return self._instances[key]

    def subscribe(self, callback: Subscriber) -> Disposer:
        """Call callback(key, view) after every publish. Returns a remover."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass  # already removed

        return _unsubscribe

    @contextmanager
    def provide(self):
        """Make this session the ambient channel for store readers."""
        token = current_session.set(self)
        try:
            yield self
        finally:
            current_session.reset(token)

    # --- Internal ---

    def _add(self, instance: StoreInstance) -> None:
        self._instances[instance.key] = instance
        self._views[instance.key] = StoreView(instance, 0)

    def _publish(self, key: str) -> None:
        previous = self._views[key]
        view = StoreView(self._instances[key], previous.version + 1)
        self._views[key] = view
        logger.debug("Published %r version %d", key, view.version)
        for callback in list(self._subscribers):
            callback(key, view)

    def __repr__(self) -> str:
        return f"SessionState({list(self._views)!r}, errors={list(self.errors)!r})"


def instantiate(registry: Registry | None = None) -> SessionState:
    """Build a fresh session with one live instance per registered store.

    Stores are independent: one that fails to instantiate is logged and
    recorded in session.errors, and the others are still built.
    """
    if registry is None:
        registry = default_registry
    session = SessionState()
    for definition in registry:
        try:
            instance = build_instance(definition, session._publish)
        except Exception as exc:
            logger.exception("Failed to instantiate store %r", definition.key)
            session.errors[definition.key] = exc
            continue
        session._add(instance)
    logger.info(
        "Instantiated %d stores (%d failed)", len(session), len(session.errors)
    )
    return session


@contextmanager
def provide(session: SessionState):
    """Module-level spelling of session.provide()."""
    with session.provide():
        yield session
