import threading

import pytest

from corekv.closer import Closer


def test_close_waits_for_workers():
    closer = Closer()
    released = []

    def worker():
        closer.wait_signal()
        released.append(True)
        closer.done()

    closer.add(2)
    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    closer.close()
    assert released == [True, True]
    assert closer.wait_signal(0) is True
    for t in threads:
        t.join()


def test_wait_signal_times_out_before_close():
    closer = Closer()
    assert closer.wait_signal(0.01) is False
    closer.close()
    assert closer.wait_signal(0) is True


def test_done_without_add_raises():
    with pytest.raises(ValueError):
        Closer().done()


def test_close_twice_raises():
    closer = Closer()
    closer.close()
    with pytest.raises(RuntimeError):
        closer.close()