import threading
import time

import pytest

from aclx.core.rwlock import ReadWriteLock


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    barrier = threading.Barrier(2, timeout=2)
    errors = []

    def reader():
        try:
            with lock.read():
                barrier.wait()  # both readers inside at once
        except Exception as e:  # pragma: no cover
            errors.append(e)

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(2)
    assert errors == []


def test_writer_waits_for_reader():
    lock = ReadWriteLock()
    order = []
    lock.acquire_read()

    def writer():
        with lock.write():
            order.append("write")

    t = threading.Thread(target=writer)
    t.start()
    time.sleep(0.05)
    order.append("read-done")
    lock.release_read()
    t.join(2)
    assert order == ["read-done", "write"]


def test_read_is_reentrant_and_write_inside_read_fails():
    lock = ReadWriteLock()
    with lock.read():
        with lock.read():
            pass
        with pytest.raises(RuntimeError):
            lock.acquire_write()
    # fully released: a writer can get in
    with lock.write():
        pass


def test_writer_may_read_its_own_state():
    lock = ReadWriteLock()
    with lock.write():
        with lock.read():
            pass


def test_unbalanced_release_raises():
    lock = ReadWriteLock()
    with pytest.raises(RuntimeError):
        lock.release_read()
    with pytest.raises(RuntimeError):
        lock.release_write()
