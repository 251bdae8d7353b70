import pytest

from gudam import _queue


@pytest.fixture(autouse=True)
def _reset_queue():
    _queue.set_scheduler(None)
    _queue.clear()
    yield
    _queue.set_scheduler(None)
    _queue.clear()
