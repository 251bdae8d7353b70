"""Persistence plugin — versioned, debounced durable storage of store state.

Two string keys per store:

    gudam_data__<key>      stringify(state)
    gudam_version__<key>   version string

On instantiation the stored state is used only if the stored version
matches the plugin's version; otherwise the factory state becomes the new
baseline. Writes are coalesced: any number of changes before the deferred
write runs produce a single write of the latest state.

Usage:
    store_plugin = persist(FileStorage("~/.cache/myapp"), version="2")
    define_store("prefs", lambda: {"theme": "light"}, plugins=[store_plugin])
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Protocol

from gudam import _queue
from gudam.errors import DeserializationError
from gudam.plugin import Plugin

logger = logging.getLogger("gudam.persist")

DEFAULT_VERSION = "0.0.1"
DATA_PREFIX = "gudam_data__"
VERSION_PREFIX = "gudam_version__"


class Storage(Protocol):
    """String key/value backend."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage. Lives as long as the process."""

    def __init__(self, items: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(items) if items else {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def __repr__(self) -> str:
        return f"MemoryStorage({self._items!r})"


class FileStorage:
    """One UTF-8 text file per key inside directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        return self.directory / key

    def get_item(self, key: str) -> str | None:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    def __repr__(self) -> str:
        return f"FileStorage({str(self.directory)!r})"


def data_key(key: str) -> str:
    return DATA_PREFIX + key


def version_key(key: str) -> str:
    return VERSION_PREFIX + key


class PersistPlugin(Plugin):
    """See module docstring. Build with persist()."""

    def __init__(
        self,
        storage: Storage | None = None,
        version: str = DEFAULT_VERSION,
        parse: Callable[[str], object] = json.loads,
        stringify: Callable[[object], str] = json.dumps,
    ) -> None:
        self.storage = storage
        self.version = version
        self.parse = parse
        self.stringify = stringify
        # store key -> latest snapshot awaiting its deferred write
        self._latest: dict[str, dict] = {}
        # store keys with a write scheduled but not yet run
        self._pending: set[str] = set()

    def init_state(self, key: str, initial: dict) -> dict:
        if self.storage is None:
            return initial
        stored_version = self.storage.get_item(version_key(key))
        payload = self.storage.get_item(data_key(key))
        if stored_version != self.version or payload is None:
            logger.info(
                "Store %r: stored version %r != %r, writing new baseline",
                key, stored_version, self.version,
            )
            self._write_baseline(key, initial)
            return initial
        try:
            return self._load(key, payload)
        except DeserializationError as exc:
            logger.warning("%s; falling back to initial state", exc)
            self._write_baseline(key, initial)
            return initial

    def on_change(self, key: str, state: dict) -> None:
        if self.storage is None:
            return
        self._latest[key] = state
        if key in self._pending:
            return
        self._pending.add(key)
        _queue.defer(lambda: self._flush(key))

    def is_pending(self, key: str) -> bool:
        """True while a write for key is scheduled but hasn't run."""
        return key in self._pending

    def _load(self, key: str, payload: str) -> dict:
        try:
            state = self.parse(payload)
        except Exception as exc:
            raise DeserializationError(key, f"stored state is unreadable ({exc})") from exc
        if not isinstance(state, dict):
            raise DeserializationError(
                key, f"stored state is a {type(state).__name__}, not a mapping"
            )
        return state

    def _write_baseline(self, key: str, state: dict) -> None:
        self.storage.set_item(data_key(key), self.stringify(state))
        self.storage.set_item(version_key(key), self.version)

    def _flush(self, key: str) -> None:
        self._pending.discard(key)
        state = self._latest.pop(key)
        self.storage.set_item(data_key(key), self.stringify(state))

    def __repr__(self) -> str:
        return f"PersistPlugin({self.storage!r}, version={self.version!r})"


def persist(
    storage: Storage | None = None,
    version: str = DEFAULT_VERSION,
    parse: Callable[[str], object] = json.loads,
    stringify: Callable[[object], str] = json.dumps,
) -> PersistPlugin:
    """Build a persistence plugin.

    Without a storage backend the plugin is inert: init_state returns the
    factory state unchanged and on_change does nothing.
    """
    if storage is None:
        logger.debug("persist() without storage: persistence disabled")
    return PersistPlugin(storage, version=version, parse=parse, stringify=stringify)
