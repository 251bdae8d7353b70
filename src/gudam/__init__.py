"""gudam: reactive store container with plugins and debounced persistence."""

from importlib.metadata import version as _version

__version__ = _version("gudam")

from gudam._queue import flush, get_pending_count, set_scheduler
from gudam.errors import (
    DeserializationError,
    DuplicateKeyError,
    GudamError,
    NoSessionError,
    PluginInitError,
    ReservedNameError,
)
from gudam.registry import (
    Registry,
    StoreDefinition,
    StoreReader,
    create_gudam,
    default_registry,
    define_store,
)
from gudam.plugin import HookPlugin, Plugin
from gudam.instance import StoreInstance
from gudam.session import SessionState, StoreView, current_session, instantiate, provide
from gudam.persist import FileStorage, MemoryStorage, PersistPlugin, Storage, persist
# textual NOT auto-imported — opt-in only

__all__ = [
    "Registry",
    "StoreDefinition",
    "StoreReader",
    "create_gudam",
    "default_registry",
    "define_store",
    "Plugin",
    "HookPlugin",
    "StoreInstance",
    "SessionState",
    "StoreView",
    "current_session",
    "instantiate",
    "provide",
    "persist",
    "PersistPlugin",
    "Storage",
    "MemoryStorage",
    "FileStorage",
    "flush",
    "get_pending_count",
    "set_scheduler",
    "GudamError",
    "DuplicateKeyError",
    "ReservedNameError",
    "PluginInitError",
    "DeserializationError",
    "NoSessionError",
]
