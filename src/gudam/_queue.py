"""Deferred execution — the single suspension point of gudam.

Persistence writes are not performed synchronously with the mutation that
caused them. They are deferred onto a cooperative run queue and executed
on a later turn.

By default deferred callables sit in a module-level FIFO until flush() is
called. set_scheduler() hands them to an external loop instead, e.g.:

    gudam.set_scheduler(asyncio.get_running_loop().call_soon)
"""

from __future__ import annotations

from collections import deque
from typing import Callable

Task = Callable[[], object]

# External scheduler. None means "use the internal queue".
_scheduler: Callable[[Task], object] | None = None

# Callables deferred while no external scheduler is set, in FIFO order.
_pending: deque[Task] = deque()


def set_scheduler(scheduler: Callable[[Task], object] | None) -> None:
    """Route deferred callables to scheduler(fn). None restores the internal queue."""
    global _scheduler
    _scheduler = scheduler


def defer(task: Task) -> None:
    """Run task on a later turn. Never runs it synchronously."""
    if _scheduler is not None:
        _scheduler(task)
    else:
        _pending.append(task)


def flush() -> int:
    """Run queued callables until the queue is empty. Returns how many ran.

    Callables deferred while flushing run in the same call.
    """
    ran = 0
    while _pending:
        task = _pending.popleft()
        task()
        ran += 1
    return ran


def get_pending_count() -> int:
    """Number of callables waiting on the internal queue. Useful for testing."""
    return len(_pending)


def clear() -> None:
    """Drop queued callables without running them."""
    _pending.clear()
