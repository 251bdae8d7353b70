"""Tests for the deferred run queue."""

from gudam import _queue, flush, get_pending_count, set_scheduler


class TestQueue:
    def test_defer_does_not_run_immediately(self):
        log = []
        _queue.defer(lambda: log.append(1))
        assert log == []
        assert get_pending_count() == 1

    def test_flush_runs_in_order(self):
        log = []
        _queue.defer(lambda: log.append(1))
        _queue.defer(lambda: log.append(2))
        assert flush() == 2
        assert log == [1, 2]
        assert get_pending_count() == 0

    def test_flush_runs_tasks_deferred_while_flushing(self):
        log = []
        _queue.defer(lambda: _queue.defer(lambda: log.append("inner")))
        assert flush() == 2
        assert log == ["inner"]

    def test_external_scheduler(self):
        scheduled = []
        set_scheduler(scheduled.append)
        _queue.defer(lambda: None)
        assert len(scheduled) == 1
        assert get_pending_count() == 0

    def test_scheduler_reset(self):
        set_scheduler(lambda task: None)
        set_scheduler(None)
        _queue.defer(lambda: None)
        assert get_pending_count() == 1

    def test_clear(self):
        log = []
        _queue.defer(lambda: log.append(1))
        _queue.clear()
        assert flush() == 0
        assert log == []
