# tests/test_worker.py
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from hoptrace.exceptions import ListenTimeout, ReadError
from hoptrace.worker import BoundedTask


@pytest.fixture
def executor():
    with ThreadPoolExecutor(max_workers=1) as pool:
        yield pool


def test_join_returns_result(executor):
    task = BoundedTask(executor, lambda: 42, timeout=1)

    assert task.join() == 42
    assert task.done()


def test_join_propagates_task_error(executor):
    def fail():
        raise ReadError("ICMP read failed")

    task = BoundedTask(executor, fail, timeout=1)

    with pytest.raises(ReadError):
        task.join()


def test_join_is_bounded(executor):
    release = threading.Event()
    task = BoundedTask(executor, lambda: release.wait(5), timeout=0.05, grace=0.05)

    with pytest.raises(ListenTimeout):
        task.join()

    release.set()


def test_cancel_before_start(executor):
    release = threading.Event()
    blocker = BoundedTask(executor, lambda: release.wait(5), timeout=1)
    queued = BoundedTask(executor, lambda: 'never', timeout=1)

    assert queued.cancel()
    release.set()
    assert blocker.join() is True
