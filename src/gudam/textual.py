"""Textual integration for gudam. Opt-in — requires textual.

Bridges a SessionState to a Textual app: session publishes reach widgets
only while the app is running and not paused, cross-thread publishes are
marshaled with call_from_thread, and NoMatches from widget queries during
screen changes is swallowed.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from gudam import _queue

# Apps whose session callbacks are held back, keyed by id(app). An id is
# present only inside a pause() block.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Hold back watch_session() callbacks for app while widgets are swapped.

    Stores keep changing and persisting; only the UI callback is skipped.
    """
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """True when a store change may be pushed into app's widgets."""
    return app.is_running and id(app) not in _paused_apps


def watch_session(app, session, callback):
    """Push every store change in session to callback(key, view) on app.

    The callback sees the freshly published StoreView, so widgets can keep
    the last view they rendered and compare identities. It is skipped while
    app is paused or not running, marshaled to app's thread when the store
    was written from another thread, and NoMatches from a widget query is
    ignored. Returns the disposer from session.subscribe().
    """
    app_thread = threading.get_ident()

    def _on_publish(key, view):
        if not is_safe(app):
            return
        if threading.get_ident() != app_thread:
            app.call_from_thread(_deliver, key, view)
        else:
            _deliver(key, view)

    def _deliver(key, view):
        try:
            callback(key, view)
        except NoMatches:
            pass

    return session.subscribe(_on_publish)


def use_app_scheduler(app) -> None:
    """Run deferred persistence writes on the app's message loop."""
    _queue.set_scheduler(app.call_later)
