import logging
import threading

import pytest

from notion_forge.tasks import TaskDispatcher


def test_submit_returns_handle_with_result():
    dispatcher = TaskDispatcher(max_workers=2)
    handle = dispatcher.submit("add", lambda a, b: a + b, 2, b=3)
    assert handle.result(timeout=5) == 5
    assert handle.done()
    assert handle.name == "add"
    assert len(handle.id) == 32
    dispatcher.shutdown()


def test_join_waits_for_pending_tasks():
    dispatcher = TaskDispatcher(max_workers=2)
    release = threading.Event()
    handle = dispatcher.submit("blocked", release.wait, 5)

    assert dispatcher.join(timeout=0.05) is False
    release.set()
    assert dispatcher.join(timeout=5) is True
    assert handle.result() is True
    assert dispatcher.pending() == 0
    dispatcher.shutdown()


def test_failures_are_logged_and_kept_on_the_handle(caplog):
    def boom():
        raise RuntimeError("notion is down")

    dispatcher = TaskDispatcher(max_workers=1)
    with caplog.at_level(logging.INFO, logger="notion_forge.tasks"):
        handle = dispatcher.submit("boom", boom)
        dispatcher.join(timeout=5)

    assert isinstance(handle.exception(), RuntimeError)
    with pytest.raises(RuntimeError):
        handle.result()
    assert "Task failed" in caplog.text
    assert "notion is down" in caplog.text
    dispatcher.shutdown()


def test_finished_tasks_are_not_tracked():
    dispatcher = TaskDispatcher(max_workers=4)
    handles = [dispatcher.submit(f"square {i}", lambda n: n * n, i) for i in range(50)]
    dispatcher.shutdown(wait=True)

    assert [h.result() for h in handles] == [i * i for i in range(50)]
    assert dispatcher._futures == set()
    assert dispatcher.pending() == 0
